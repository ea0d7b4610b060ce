# app/api/v1/watchlist.py

from typing import List
from fastapi import APIRouter, HTTPException, Depends, Path
from app.schemas.profile import Profile
from app.schemas.watchlist import (
    AddToWatchlistPayload,
    UpdateWatchlistMoviePayload,
    WatchlistMovie,
)
from app.services.query_service import QueryService
from app.core.dependencies import get_current_user, get_query_service
from app.api.v1.errors import http_error

router = APIRouter()


@router.get(
    "",
    response_model=List[WatchlistMovie],
    summary="내 왓치리스트",
    description="내 왓치리스트를 최근 추가순으로 조회합니다.",
)
async def get_my_watchlist(
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_watchlist(current_user.id)
    except Exception as e:
        raise http_error(e, "왓치리스트 조회") from e


@router.post(
    "",
    response_model=WatchlistMovie,
    summary="왓치리스트 추가",
    description="평가한 영화만 추가할 수 있습니다. 평점은 저장된 평점에서 복사됩니다.",
)
async def add_to_watchlist(
    payload: AddToWatchlistPayload,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.add_to_watchlist(current_user.id, payload)
    except Exception as e:
        raise http_error(e, "왓치리스트 추가") from e


@router.get(
    "/check/{tmdb_id}",
    summary="왓치리스트 포함 여부",
    description="영화가 내 왓치리스트에 있는지 확인합니다.",
)
async def check_watchlist(
    tmdb_id: int = Path(description="TMDB 영화 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        in_watchlist = await query_service.is_in_watchlist(current_user.id, tmdb_id)
        return {"tmdb_id": tmdb_id, "in_watchlist": in_watchlist}
    except Exception as e:
        raise http_error(e, "왓치리스트 확인") from e


@router.patch(
    "/{watchlist_id}",
    response_model=WatchlistMovie,
    summary="왓치리스트 항목 수정",
    description="시청 여부나 평점을 수정합니다.",
)
async def update_watchlist_movie(
    payload: UpdateWatchlistMoviePayload,
    watchlist_id: str = Path(description="왓치리스트 항목 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        entry = await query_service.update_watchlist_movie(watchlist_id, current_user.id, payload)
        if not entry:
            raise HTTPException(status_code=404, detail="왓치리스트 항목을 찾을 수 없습니다")
        return entry
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "왓치리스트 수정") from e


@router.delete(
    "/{watchlist_id}",
    summary="왓치리스트 삭제",
    description="왓치리스트에서 영화를 제거합니다.",
)
async def remove_from_watchlist(
    watchlist_id: str = Path(description="왓치리스트 항목 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        entry = await query_service.remove_from_watchlist(watchlist_id, current_user.id)
        if not entry:
            raise HTTPException(status_code=404, detail="왓치리스트 항목을 찾을 수 없습니다")
        return {"message": "왓치리스트에서 제거되었습니다", "watchlist_id": watchlist_id}
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "왓치리스트 삭제") from e
