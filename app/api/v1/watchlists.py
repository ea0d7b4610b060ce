# app/api/v1/watchlists.py

from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Path
from app.schemas.profile import Profile
from app.schemas.watchlist import WatchlistItem, WatchlistLike, WatchlistLikeRequest
from app.services.query_service import QueryService
from app.core.dependencies import get_current_user, get_optional_current_user, get_query_service
from app.api.v1.errors import http_error

router = APIRouter()


@router.get(
    "",
    response_model=List[WatchlistItem],
    summary="커뮤니티 왓치리스트",
    description="평가 기록이 있는 모든 사용자의 왓치리스트를 좋아요 순으로 조회합니다.",
)
async def get_all_watchlists(
    current_user: Optional[Profile] = Depends(get_optional_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        viewer_id = current_user.id if current_user else None
        return await query_service.get_all_watchlists(viewer_id)
    except Exception as e:
        raise http_error(e, "커뮤니티 왓치리스트 조회") from e


@router.post(
    "/likes",
    response_model=WatchlistLike,
    summary="왓치리스트 좋아요",
    description="다른 사용자의 왓치리스트에 좋아요를 누릅니다.",
)
async def like_watchlist(
    like_request: WatchlistLikeRequest,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.like_watchlist(current_user.id, like_request.watchlist_owner_id)
    except Exception as e:
        raise http_error(e, "왓치리스트 좋아요") from e


@router.delete(
    "/likes/{watchlist_owner_id}",
    summary="왓치리스트 좋아요 취소",
    description="왓치리스트 좋아요를 취소합니다.",
)
async def unlike_watchlist(
    watchlist_owner_id: str = Path(description="왓치리스트 소유자 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        removed = await query_service.unlike_watchlist(current_user.id, watchlist_owner_id)
        if not removed:
            raise HTTPException(status_code=404, detail="좋아요한 왓치리스트가 아닙니다")
        return {"message": "좋아요가 취소되었습니다", "success": removed}
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "왓치리스트 좋아요 취소") from e
