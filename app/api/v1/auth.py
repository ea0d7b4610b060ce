# app/api/v1/auth.py

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query
from app.schemas.auth import TokenResponse
from app.schemas.profile import Profile
from app.services.google_oauth_service import GoogleOAuthService
from app.services.query_service import QueryService
from app.core.auth import create_access_token
from app.core.dependencies import get_current_user, get_query_service
from app.core.logging_config import get_logger
from app.api.v1.errors import http_error

router = APIRouter()
logger = get_logger(__name__)


def get_google_oauth_service() -> GoogleOAuthService:
    return GoogleOAuthService()


@router.get(
    "/google/login",
    summary="Google 로그인 URL",
    description="Google OAuth 동의 화면 URL을 반환합니다.",
)
def google_login(
    state: Optional[str] = Query(default=None, description="로그인 후 돌려받을 상태값"),
    google_service: GoogleOAuthService = Depends(get_google_oauth_service),
):
    return {"login_url": google_service.get_login_url(state)}


@router.get(
    "/google/callback",
    response_model=TokenResponse,
    summary="Google 로그인 콜백",
    description="인증 코드를 교환하고 내부 JWT를 발급합니다. 최초 로그인 시 프로필이 생성됩니다.",
)
async def google_callback(
    code: str = Query(description="Google 인증 코드"),
    google_service: GoogleOAuthService = Depends(get_google_oauth_service),
    query_service: QueryService = Depends(get_query_service),
):
    user_info = google_service.get_user_info_from_code(code)
    if not user_info or not user_info.get("id"):
        raise HTTPException(status_code=401, detail="Google 인증에 실패했습니다")

    try:
        profile, created = await query_service.sign_in(
            google_id=str(user_info["id"]),
            email=user_info.get("email"),
            name=user_info.get("name"),
            avatar_url=user_info.get("picture"),
        )
        access_token = create_access_token(data={"sub": profile.id})

        logger.info("user_signed_in", user_id=profile.id, is_new_user=created)
        return TokenResponse(access_token=access_token, user=profile, is_new_user=created)

    except Exception as e:
        raise http_error(e, "Google 로그인") from e


@router.get(
    "/me",
    response_model=Profile,
    summary="현재 세션 조회",
    description="토큰에 해당하는 사용자 프로필을 반환합니다.",
)
async def get_me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.post(
    "/logout",
    summary="로그아웃",
    description="서버에 세션 상태가 없으므로 클라이언트가 토큰을 폐기하면 됩니다.",
)
async def logout(current_user: Profile = Depends(get_current_user)):
    logger.info("user_signed_out", user_id=current_user.id)
    return {"message": "로그아웃되었습니다"}
