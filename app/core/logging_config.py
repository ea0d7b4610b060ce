"""
structlog 기반 로깅 설정.

- 개발 환경: 콘솔 렌더러
- 운영 환경: JSON 렌더러
- 로그 레벨은 LOG_LEVEL 환경 변수(Settings.log_level)로 조정
"""

import logging
from typing import Any, Dict, Optional

import structlog

from app.core.config import get_settings

SENSITIVE_FIELD_NAMES = {
    "access_token", "token", "authorization", "api_key", "tmdb_api_key",
    "secret", "client_secret", "code",
}


def add_app_context(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    event_dict["service"] = "mywatchlist"
    return event_dict


def redact_sensitive_fields(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    for key in list(event_dict.keys()):
        if key.lower() in SENSITIVE_FIELD_NAMES:
            event_dict[key] = "[REDACTED]"
    return event_dict


def configure_structlog():
    settings = get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
        redact_sensitive_fields,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_json and not settings.debug:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
