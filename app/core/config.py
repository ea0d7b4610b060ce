# app/core/config.py

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """설정 클래스"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # 애플리케이션 설정
    app_name: str = Field(default="MyWatchList", description="애플리케이션 이름")
    debug: bool = Field(default=False, description="디버그 모드")

    # 데이터베이스 설정
    database_url: str = Field(default="sqlite:///./mywatchlist.db", description="DB 접속 URL")
    database_echo: bool = Field(default=False, description="SQL 로그 출력")

    # 로깅 설정
    log_level: str = Field(default="INFO", description="로그 레벨")
    log_json: bool = Field(default=True, description="JSON 로그 출력 여부")

    # JWT 인증 설정
    secret_key: str = Field(default="secret-jwt-key", description="JWT 토큰 암호화 키")
    algorithm: str = Field(default="HS256", description="JWT 알고리즘")
    access_token_expire_minutes: int = Field(default=60 * 24 * 30, description="JWT 토큰 만료 시간(분)")

    # Google OAuth 설정
    google_client_id: str = Field(default="", description="Google OAuth Client ID")
    google_client_secret: str = Field(default="", description="Google OAuth Client Secret")
    google_redirect_uri: str = Field(
        default="http://127.0.0.1:8000/api/v1/auth/google/callback",
        description="Google OAuth 리디렉트 URI"
    )

    # TMDB API 설정
    tmdb_api_key: str = Field(default="", description="TMDB API Key")
    tmdb_access_token: str = Field(default="", description="TMDB Access Token")
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3", description="TMDB API URL")
    tmdb_image_base_url: str = Field(default="https://image.tmdb.org/t/p/", description="TMDB 이미지 URL")
    tmdb_timeout: float = Field(default=10.0, description="요청 타임아웃")

    # 피드 / 활동 설정
    activity_feed_limit: int = Field(default=20, description="팔로잉 피드 기본 개수")
    unread_sample_size: int = Field(default=50, description="안 읽은 활동 계산용 피드 개수")
    unread_window_hours: int = Field(default=24, description="안 읽은 활동 기준 시간")

    # 디바운스 설정 (밀리초)
    search_debounce_ms: int = Field(default=300, description="검색 디바운스")
    username_debounce_ms: int = Field(default=500, description="유저네임 확인 디바운스")

    @property
    def tmdb_headers(self) -> dict[str, str]:
        """TMDB API 요청 헤더"""
        headers = {"Content-Type": "application/json"}
        if self.tmdb_access_token:
            headers["Authorization"] = f"Bearer {self.tmdb_access_token}"
        return headers


@lru_cache()
def get_settings() -> Settings:
    return Settings()
