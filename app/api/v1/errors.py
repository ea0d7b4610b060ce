# app/api/v1/errors.py

from fastapi import HTTPException, WebSocket, WebSocketDisconnect
from app.core.exceptions import UpstreamError, ValidationFailure
from app.core.logging_config import get_logger

logger = get_logger(__name__)


def http_error(e: Exception, action: str) -> HTTPException:
    """
    서비스 예외를 HTTP 응답으로 변환.

    - ValidationFailure: 400, 사용자에게 메시지 그대로 전달
    - UpstreamError: 502, 내부 오류 내용은 로그에만 남김
    - 그 외: 500
    """
    if isinstance(e, ValidationFailure):
        return HTTPException(status_code=400, detail=e.message)

    if isinstance(e, UpstreamError):
        logger.warning("upstream_failure", action=action, error=e.message)
        return HTTPException(
            status_code=502,
            detail=f"{action}에 실패했습니다. 잠시 후 다시 시도해 주세요",
        )

    logger.exception("unexpected_failure", action=action)
    return HTTPException(status_code=500, detail=f"{action} 실패: {str(e)}")


async def send_ws_json(websocket: WebSocket, payload: dict) -> bool:
    """소켓이 이미 닫혔으면 보내지 않고 False 반환"""
    try:
        await websocket.send_json(payload)
        return True
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug("ws_send_skipped", error=str(e))
        return False
