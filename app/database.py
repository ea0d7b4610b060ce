# app/database.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv
from app.core.config import get_settings

# .env 파일 로드
load_dotenv()

settings = get_settings()
DATABASE_URL = settings.database_url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # 인메모리 DB는 모든 세션이 하나의 연결을 공유해야 함
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,  # 연결 상태 확인
        "pool_recycle": 300,  # 5분마다 연결 재사용
    }


# 엔진 생성
engine = create_engine(
    DATABASE_URL,
    echo=settings.database_echo,
    **_engine_options(DATABASE_URL),
)

# 세션 팩토리 생성
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base 클래스 생성
Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """UTC 기준 현재 시각 (timezone 정보 없이 저장)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
