# app/core/exceptions.py

from typing import Optional


class AppError(Exception):
    """서비스 계층 기본 예외"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailure(AppError):
    """변경 전에 거부된 요청 (사용자가 조치할 수 있는 오류)"""


class UpstreamError(AppError):
    """저장소 또는 외부 API 호출 실패"""


class StoreError(UpstreamError):
    """데이터베이스 쿼리 실패"""


class TMDBError(UpstreamError):
    """TMDB API 실패 (2xx 이외 응답 또는 전송 오류)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
