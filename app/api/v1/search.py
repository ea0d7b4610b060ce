# app/api/v1/search.py

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from app.schemas.movie import MoviePage
from app.services.query_service import QueryService
from app.core.config import get_settings
from app.core.debounce import Debouncer
from app.core.dependencies import get_query_service
from app.core.exceptions import AppError
from app.core.logging_config import get_logger
from app.api.v1.errors import http_error, send_ws_json

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


@router.get(
    "",
    response_model=MoviePage,
    summary="영화 검색",
    description="TMDB에서 영화를 검색합니다. 3자 미만 검색어는 빈 결과를 반환합니다.",
)
async def search_movies(
    query: str = Query(default="", description="검색할 키워드"),
    page: int = Query(default=1, ge=1, le=500, description="페이지"),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.search_movies(query, page)
    except Exception as e:
        raise http_error(e, "영화 검색") from e


@router.websocket("/ws")
async def search_movies_ws(
    websocket: WebSocket,
    query_service: QueryService = Depends(get_query_service),
):
    """
    입력 중 검색.

    클라이언트는 입력값이 바뀔 때마다 텍스트 메시지를 보내고, 서버는 마지막
    입력 후 search_debounce_ms 동안 입력이 없을 때만 검색해 결과를 보낸다.
    """
    await websocket.accept()

    async def run_search(query: str):
        try:
            result = await query_service.search_movies(query)
            await send_ws_json(websocket, {"query": query, "result": result.model_dump(mode="json")})
        except AppError as e:
            logger.warning("search_ws_failed", query=query, error=e.message)
            await send_ws_json(websocket, {"query": query, "error": "검색에 실패했습니다"})

    debouncer = Debouncer(settings.search_debounce_ms / 1000, run_search)
    try:
        while True:
            debouncer.trigger(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.debug("search_ws_disconnected")
    finally:
        debouncer.cancel()
