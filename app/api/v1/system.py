# app/api/v1/system.py

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from app.database import engine
from app.core.logging_config import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
def health_check():
    """서비스 헬스체크"""
    return {"status": "healthy", "service": "MyWatchList"}


@router.get("/db-test")
def test_db():
    """데이터베이스 연결 테스트"""
    try:
        with engine.connect() as connection:
            result = connection.execute(text("SELECT 1"))
            return {"status": "DB 연결 성공!", "result": result.fetchone()[0]}
    except SQLAlchemyError as e:
        logger.warning("db_check_failed", error=str(e))
        raise HTTPException(status_code=502, detail="DB 연결 실패")
