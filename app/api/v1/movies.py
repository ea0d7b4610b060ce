# app/api/v1/movies.py

from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query, Path, Depends
from app.schemas.movie import MovieDetails, MoviePage, MovieSummary
from app.schemas.rating import MovieRatingSummary, RatingWithAuthor
from app.services.query_service import QueryService
from app.services.tmdb_service import IMAGE_SIZES, TMDBService
from app.core.dependencies import get_query_service, get_tmdb_service
from app.core.exceptions import TMDBError
from app.api.v1.errors import http_error

router = APIRouter()


@router.get(
    "/trending",
    response_model=List[MovieSummary],
    summary="트렌딩 영화",
    description="TMDB 트렌딩 영화를 조회합니다. (day / week)",
)
async def get_trending_movies(
    window: str = Query(default="week", description="집계 기간 (day, week)"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_trending(window)
    except Exception as e:
        raise http_error(e, "트렌딩 영화 조회") from e


@router.get(
    "/popular",
    response_model=MoviePage,
    summary="인기 영화",
    description="TMDB 인기 영화를 페이지 단위로 조회합니다.",
)
async def get_popular_movies(
    page: int = Query(default=1, ge=1, le=500, description="페이지"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_popular(page)
    except Exception as e:
        raise http_error(e, "인기 영화 조회") from e


@router.get(
    "/top-rated",
    response_model=MoviePage,
    summary="평점 높은 영화",
    description="TMDB 평점 순 영화를 페이지 단위로 조회합니다.",
)
async def get_top_rated_movies(
    page: int = Query(default=1, ge=1, le=500, description="페이지"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_top_rated(page)
    except Exception as e:
        raise http_error(e, "평점 높은 영화 조회") from e


@router.get(
    "/image-url",
    summary="이미지 URL 생성",
    description="TMDB 이미지 경로와 크기로 전체 URL을 만듭니다.",
)
def get_image_url(
    path: Optional[str] = Query(default=None, description="TMDB 이미지 경로"),
    size: str = Query(default="w500", description=f"이미지 크기 ({', '.join(IMAGE_SIZES)})"),
    tmdb_service: TMDBService = Depends(get_tmdb_service),
):
    return {"url": tmdb_service.get_image_url(path, size)}


@router.get(
    "/{movie_id}",
    response_model=MovieDetails,
    summary="영화 상세 정보",
    description="TMDB에서 영화 상세 정보를 조회합니다.",
)
async def get_movie_details(
    movie_id: int = Path(description="TMDB 영화 ID"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_movie_details(movie_id)
    except TMDBError as e:
        if e.status_code == 404:
            raise HTTPException(status_code=404, detail=f"영화를 찾을 수 없습니다 (ID: {movie_id})") from e
        raise http_error(e, "영화 상세 정보 조회") from e
    except Exception as e:
        raise http_error(e, "영화 상세 정보 조회") from e


@router.get(
    "/{movie_id}/ratings/summary",
    response_model=MovieRatingSummary,
    summary="영화 평점 요약",
    description="서비스 사용자들의 평균 평점과 평점 수를 조회합니다.",
)
async def get_movie_rating_summary(
    movie_id: int = Path(description="TMDB 영화 ID"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_movie_rating_summary(movie_id)
    except Exception as e:
        raise http_error(e, "영화 평점 요약 조회") from e


@router.get(
    "/{movie_id}/ratings/recent",
    response_model=List[RatingWithAuthor],
    summary="최근 평점",
    description="영화에 남겨진 최근 평점을 작성자 정보와 함께 조회합니다.",
)
async def get_recent_ratings(
    movie_id: int = Path(description="TMDB 영화 ID"),
    limit: int = Query(default=5, ge=1, le=50, description="가져올 평점 수"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_recent_ratings(movie_id, limit)
    except Exception as e:
        raise http_error(e, "최근 평점 조회") from e
