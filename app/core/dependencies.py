# app/core/dependencies.py

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.schemas.profile import Profile
from app.services.profile_service import ProfileService
from app.services.tmdb_service import TMDBService
from app.services.query_service import QueryService
from app.core.auth import verify_token
from app.core.exceptions import AppError
from app.core.query_cache import QueryCache

security = HTTPBearer(auto_error=False)


def get_profile_service() -> ProfileService:
    return ProfileService()


def get_tmdb_service() -> TMDBService:
    return TMDBService()


def get_query_cache(connection: HTTPConnection) -> QueryCache:
    """앱 단위로 공유되는 쿼리 캐시 (HTTP, WebSocket 공용)"""
    return connection.app.state.query_cache


def get_query_service(
    cache: QueryCache = Depends(get_query_cache),
    tmdb_service: TMDBService = Depends(get_tmdb_service),
    profile_service: ProfileService = Depends(get_profile_service),
) -> QueryService:
    return QueryService(cache, tmdb_service=tmdb_service, profile_service=profile_service)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    profile_service: ProfileService = Depends(get_profile_service),
) -> Profile:
    """현재 로그인한 사용자 조회"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="토큰이 필요합니다"
        )

    user_id = verify_token(credentials.credentials)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않은 토큰입니다"
        )

    profile = await profile_service.get_profile(user_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="사용자를 찾을 수 없습니다"
        )

    return profile


async def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    profile_service: ProfileService = Depends(get_profile_service),
) -> Optional[Profile]:
    """현재 로그인한 사용자 조회 None 허용"""
    if not credentials:
        return None

    user_id = verify_token(credentials.credentials)
    if not user_id:
        return None

    try:
        return await profile_service.get_profile(user_id)
    except AppError:
        return None
