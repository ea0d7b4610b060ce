# app/api/v1/profiles.py

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Path, Query, WebSocket, WebSocketDisconnect
from app.schemas.profile import (
    Profile,
    ProfileStats,
    UpdatePreferencesPayload,
    UpdateProfilePayload,
    UsernameCheck,
)
from app.schemas.rating import VisibleRatingList
from app.schemas.watchlist import VisibleWatchlist
from app.services.query_service import QueryService
from app.core.config import get_settings
from app.core.debounce import Debouncer
from app.core.dependencies import get_current_user, get_optional_current_user, get_query_service
from app.core.exceptions import AppError
from app.core.logging_config import get_logger
from app.api.v1.errors import http_error, send_ws_json

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


async def _get_profile_or_404(query_service: QueryService, username: str) -> Profile:
    profile = await query_service.get_profile_by_username(username)
    if not profile:
        raise HTTPException(status_code=404, detail=f"사용자를 찾을 수 없습니다: {username}")
    return profile


@router.get(
    "/username-check",
    response_model=UsernameCheck,
    summary="유저네임 중복 확인",
    description="입력값을 정규화한 뒤 사용 가능 여부를 확인합니다.",
)
async def check_username(
    username: str = Query(description="확인할 유저네임"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.check_username(username)
    except Exception as e:
        raise http_error(e, "유저네임 확인") from e


@router.websocket("/username-check/ws")
async def check_username_ws(
    websocket: WebSocket,
    query_service: QueryService = Depends(get_query_service),
):
    """입력 중 유저네임 확인 (username_debounce_ms 디바운스)"""
    await websocket.accept()

    async def run_check(username: str):
        try:
            result = await query_service.check_username(username)
            await send_ws_json(websocket, result.model_dump())
        except AppError as e:
            logger.warning("username_check_ws_failed", error=e.message)
            await send_ws_json(websocket, {"username": username, "error": "유저네임 확인에 실패했습니다"})

    debouncer = Debouncer(settings.username_debounce_ms / 1000, run_check)
    try:
        while True:
            debouncer.trigger(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.debug("username_check_ws_disconnected")
    finally:
        debouncer.cancel()


@router.patch(
    "/me",
    response_model=Profile,
    summary="내 프로필 수정",
    description="유저네임, 프로필 이미지, 자기소개를 수정합니다.",
)
async def update_my_profile(
    payload: UpdateProfilePayload,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        profile = await query_service.update_profile(current_user.id, payload)
        if not profile:
            raise HTTPException(status_code=404, detail="프로필을 찾을 수 없습니다")
        return profile
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "프로필 수정") from e


@router.put(
    "/me/preferences",
    response_model=Profile,
    summary="선호 태그 수정",
    description="선호 장르/분위기 태그를 저장합니다. 중복은 제거되고 순서는 유지됩니다.",
)
async def update_my_preferences(
    payload: UpdatePreferencesPayload,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        profile = await query_service.update_preferences(current_user.id, payload.preferences)
        if not profile:
            raise HTTPException(status_code=404, detail="프로필을 찾을 수 없습니다")
        return profile
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "선호 태그 수정") from e


@router.get(
    "/{username}",
    response_model=Profile,
    summary="프로필 조회",
    description="유저네임으로 프로필을 조회합니다.",
)
async def get_profile(
    username: str = Path(description="유저네임"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await _get_profile_or_404(query_service, username)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "프로필 조회") from e


@router.get(
    "/{username}/stats",
    response_model=ProfileStats,
    summary="프로필 통계",
    description="평가한 영화 수, 평균 평점, 팔로워 수를 조회합니다.",
)
async def get_profile_stats(
    username: str = Path(description="유저네임"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        profile = await _get_profile_or_404(query_service, username)
        return await query_service.get_profile_stats(profile.id)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "프로필 통계 조회") from e


@router.get(
    "/{username}/ratings",
    response_model=VisibleRatingList,
    summary="프로필 평점 목록",
    description="로그인하지 않은 사용자에게는 평점 높은 절반만 평점 값 없이 보여줍니다.",
)
async def get_profile_ratings(
    username: str = Path(description="유저네임"),
    current_user: Optional[Profile] = Depends(get_optional_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        profile = await _get_profile_or_404(query_service, username)
        return await query_service.get_visible_ratings(profile.id, current_user is not None)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "평점 목록 조회") from e


@router.get(
    "/{username}/watchlist",
    response_model=VisibleWatchlist,
    summary="프로필 왓치리스트",
    description="로그인하지 않은 사용자에게는 평점 높은 절반만 평점 값 없이 보여줍니다.",
)
async def get_profile_watchlist(
    username: str = Path(description="유저네임"),
    current_user: Optional[Profile] = Depends(get_optional_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        profile = await _get_profile_or_404(query_service, username)
        return await query_service.get_visible_watchlist(profile.id, current_user is not None)
    except HTTPException:
        raise
    except Exception as e:
        raise http_error(e, "왓치리스트 조회") from e
