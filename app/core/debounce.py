import asyncio
from typing import Any, Awaitable, Callable, Optional

from app.core.logging_config import get_logger

logger = get_logger(__name__)


class Debouncer:
    """
    마지막 입력 후 delay 초 동안 새 입력이 없을 때만 callback 실행.

    새 입력이 들어오면 대기 중인 실행을 취소하고 타이머를 다시 시작한다.
    검색어 입력(300ms), 유저네임 중복 확인(500ms)에 사용.
    """

    def __init__(self, delay: float, callback: Callable[[Any], Awaitable[Any]]):
        self.delay = delay
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, value: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(value))
        self._task.add_done_callback(self._log_failure)
        return self._task

    async def _run(self, value: Any) -> Any:
        await asyncio.sleep(self.delay)
        return await self.callback(value)

    def _log_failure(self, task: asyncio.Task) -> None:
        # flush() 없이 끝난 실행의 에러도 회수해 로그로 남김
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("debounced_call_failed", error=repr(error))

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def flush(self) -> Optional[Any]:
        """대기 중인 실행이 있으면 끝날 때까지 기다림"""
        task = self._task
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            return None
