# app/api/v1/ratings.py

from typing import List
from fastapi import APIRouter, HTTPException, Depends, Path
from app.schemas.profile import Profile
from app.schemas.rating import RateMoviePayload, Rating
from app.services.query_service import QueryService
from app.core.dependencies import get_current_user, get_query_service
from app.api.v1.errors import http_error

router = APIRouter()


@router.post(
    "",
    response_model=Rating,
    summary="영화 평가",
    description="영화에 평점을 남깁니다. 이미 평가한 영화는 평점이 수정되고, 왓치리스트의 평점도 함께 바뀝니다.",
)
async def rate_movie(
    payload: RateMoviePayload,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.rate_movie(current_user.id, payload)
    except Exception as e:
        raise http_error(e, "영화 평가") from e


@router.get(
    "/me",
    response_model=List[Rating],
    summary="내 평점 목록",
    description="내가 남긴 평점을 최신순으로 조회합니다.",
)
async def get_my_ratings(
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_user_ratings(current_user.id)
    except Exception as e:
        raise http_error(e, "평점 목록 조회") from e


@router.get(
    "/me/{movie_id}",
    response_model=Rating,
    summary="영화에 대한 내 평점",
    description="특정 영화에 남긴 내 평점을 조회합니다.",
)
async def get_my_rating(
    movie_id: int = Path(description="TMDB 영화 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        rating = await query_service.get_user_rating(current_user.id, movie_id)
        if not rating:
            raise HTTPException(status_code=404, detail="아직 평가하지 않은 영화입니다")
        return rating
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "평점 조회") from e


@router.delete(
    "/{rating_id}",
    summary="평점 삭제",
    description="평점을 삭제합니다. 같은 영화의 왓치리스트 항목도 함께 삭제됩니다.",
)
async def delete_rating(
    rating_id: str = Path(description="평점 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        rating = await query_service.delete_rating(rating_id, current_user.id)
        if not rating:
            raise HTTPException(status_code=404, detail="평점을 찾을 수 없습니다")
        return {"message": "평점이 삭제되었습니다", "rating_id": rating_id}
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "평점 삭제") from e
