# app/api/v1/follows.py

from typing import List
from fastapi import APIRouter, HTTPException, Depends, Path
from app.schemas.follow import Follow, FollowRequest, FollowStats
from app.schemas.profile import Profile, ProfileSummary
from app.services.query_service import QueryService
from app.core.dependencies import get_current_user, get_query_service
from app.api.v1.errors import http_error

router = APIRouter()


@router.post(
    "",
    response_model=Follow,
    summary="사용자 팔로우",
    description="다른 사용자를 팔로우합니다.",
)
async def follow_user(
    follow_request: FollowRequest,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.follow_user(current_user.id, follow_request.following_id)
    except Exception as e:
        raise http_error(e, "팔로우") from e


@router.delete(
    "/{following_id}",
    summary="사용자 언팔로우",
    description="팔로우 중인 사용자를 언팔로우합니다.",
)
async def unfollow_user(
    following_id: str = Path(description="언팔로우할 사용자 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        success = await query_service.unfollow_user(current_user.id, following_id)
        if not success:
            raise HTTPException(status_code=404, detail="팔로우 중인 사용자가 아닙니다")
        return {"message": "언팔로우가 완료되었습니다", "success": success}
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "언팔로우") from e


@router.get(
    "/stats/{user_id}",
    response_model=FollowStats,
    summary="팔로우 통계",
    description="사용자의 팔로워/팔로잉 수를 조회합니다.",
)
async def get_follow_stats(
    user_id: str = Path(description="사용자 ID"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_follow_stats(user_id)
    except Exception as e:
        raise http_error(e, "팔로우 통계 조회") from e


@router.get(
    "/check/{following_id}",
    summary="팔로우 관계 확인",
    description="현재 사용자가 특정 사용자를 팔로우하는지 확인합니다.",
)
async def check_follow_relationship(
    following_id: str = Path(description="확인할 사용자 ID"),
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        is_following = await query_service.is_following(current_user.id, following_id)
        return {"is_following": is_following}
    except Exception as e:
        raise http_error(e, "팔로우 관계 확인") from e


@router.get(
    "/{user_id}/followers",
    response_model=List[ProfileSummary],
    summary="팔로워 목록",
    description="사용자의 팔로워 목록을 조회합니다.",
)
async def get_followers(
    user_id: str = Path(description="사용자 ID"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_followers(user_id)
    except Exception as e:
        raise http_error(e, "팔로워 목록 조회") from e


@router.get(
    "/{user_id}/following",
    response_model=List[ProfileSummary],
    summary="팔로잉 목록",
    description="사용자가 팔로우하는 사람들의 목록을 조회합니다.",
)
async def get_following(
    user_id: str = Path(description="사용자 ID"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_following(user_id)
    except Exception as e:
        raise http_error(e, "팔로잉 목록 조회") from e
