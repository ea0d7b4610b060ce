# app/api/v1/activity.py

from typing import Any, AsyncIterator, List
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from pydantic import TypeAdapter
from app.schemas.activity import ActivityItem, UnreadCount
from app.schemas.profile import Profile
from app.services.query_service import QueryService
from app.core.dependencies import get_current_user, get_query_service
from app.core.exceptions import AppError
from app.core.logging_config import get_logger
from app.api.v1.errors import http_error

router = APIRouter()
logger = get_logger(__name__)

_activity_list = TypeAdapter(List[ActivityItem])


async def _event_stream(
    request: Request, event: str, values: AsyncIterator[Any], encode
) -> AsyncIterator[str]:
    """폴링 결과를 SSE 이벤트로 변환. 연결이 끊기면 폴링도 멈춘다."""
    try:
        async for value in values:
            if await request.is_disconnected():
                break
            yield f"event: {event}\ndata: {encode(value)}\n\n"
    except AppError as e:
        logger.warning("activity_stream_failed", stream=event, error=e.message)
        yield "event: error\ndata: {\"detail\": \"활동을 불러오지 못했습니다\"}\n\n"
    finally:
        await values.aclose()


@router.get(
    "/following",
    response_model=List[ActivityItem],
    summary="팔로잉 활동 피드",
    description="팔로우한 사용자들의 최근 평점을 최신순으로 조회합니다.",
)
async def get_following_activity(
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return await query_service.get_following_activity(current_user.id)
    except Exception as e:
        raise http_error(e, "활동 피드 조회") from e


@router.get(
    "/unread-count",
    response_model=UnreadCount,
    summary="새 활동 수",
    description="최근 24시간 안의 팔로잉 활동 수를 조회합니다.",
)
async def get_unread_count(
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    try:
        return UnreadCount(count=await query_service.get_unread_count(current_user.id))
    except Exception as e:
        raise http_error(e, "새 활동 수 조회") from e


@router.get(
    "/following/stream",
    summary="팔로잉 활동 스트림",
    description="연결되어 있는 동안 60초마다 활동 피드를 SSE로 보냅니다.",
)
async def stream_following_activity(
    request: Request,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    values = query_service.poll_following_activity(current_user.id)
    return StreamingResponse(
        _event_stream(request, "activity", values, lambda v: _activity_list.dump_json(v).decode()),
        media_type="text/event-stream",
    )


@router.get(
    "/unread-count/stream",
    summary="새 활동 수 스트림",
    description="연결되어 있는 동안 120초마다 새 활동 수를 SSE로 보냅니다.",
)
async def stream_unread_count(
    request: Request,
    current_user: Profile = Depends(get_current_user),
    query_service: QueryService = Depends(get_query_service),
):
    values = query_service.poll_unread_count(current_user.id)
    return StreamingResponse(
        _event_stream(request, "unread", values, lambda v: UnreadCount(count=v).model_dump_json()),
        media_type="text/event-stream",
    )
