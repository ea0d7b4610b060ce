# app/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import get_settings
from app.core.logging_config import configure_structlog, get_logger
from app.core.query_cache import QueryCache
from app.api.v1 import api_router
from app.database import engine, Base
from app import models  # noqa: F401  테이블 등록

# 설정 로드
settings = get_settings()

configure_structlog()
logger = get_logger(__name__)

# 데이터베이스 테이블 생성
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 시작 시 - 앱 단위 쿼리 캐시
    app.state.query_cache = QueryCache()
    logger.info("app_started", app_name=settings.app_name)

    yield

    # 종료 시
    app.state.query_cache.clear()
    logger.info("app_stopped", app_name=settings.app_name)


# FastAPI 앱 생성
app = FastAPI(
    title="MyWatchList",
    description="Social Movie Watchlist Service",
    version="1.0.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

ALLOWED_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]

# CORS 미들웨어
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1 라우터 등록
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    """서비스 루트"""
    return {
        "service": "MyWatchList",
        "description": "Social Movie Watchlist Service",
        "version": "1.0.0",
        "docs": "/docs",
    }
