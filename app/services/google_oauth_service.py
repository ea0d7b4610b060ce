# app/services/google_oauth_service.py

from typing import Optional, Dict
from urllib.parse import urlencode

import requests

from app.core.config import get_settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class GoogleOAuthService:
    def __init__(self, session: Optional[requests.Session] = None):
        self.settings = get_settings()
        self.session = session or requests.Session()

    def get_login_url(self, state: Optional[str] = None) -> str:
        """Google 로그인 URL 생성"""
        params = {
            "response_type": "code",
            "client_id": self.settings.google_client_id,
            "redirect_uri": self.settings.google_redirect_uri,
            "scope": "openid email profile",
        }
        if state:
            params["state"] = state

        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def get_user_info_from_code(self, code: str) -> Optional[Dict]:
        """
        Google 인증 코드로 사용자 정보 조회.

        코드 교환이나 사용자 정보 조회에 실패하면 None 반환.
        반환값에는 id, email, name, picture 가 들어 있다.
        """
        try:
            # 1. 인증 코드를 액세스 토큰으로 교환
            token_response = self.session.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.settings.google_client_id,
                    "client_secret": self.settings.google_client_secret,
                    "redirect_uri": self.settings.google_redirect_uri,
                    "grant_type": "authorization_code",
                },
                timeout=10,
            )

            if token_response.status_code != 200:
                logger.warning("google_token_exchange_failed", status_code=token_response.status_code)
                return None

            access_token = token_response.json().get("access_token")
            if not access_token:
                return None

            # 2. 액세스 토큰으로 사용자 정보 조회
            user_info = self.session.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=10,
            )

            if user_info.status_code != 200:
                logger.warning("google_userinfo_failed", status_code=user_info.status_code)
                return None

            return user_info.json()

        except requests.RequestException as e:
            logger.warning("google_oauth_error", error=str(e))
            return None
