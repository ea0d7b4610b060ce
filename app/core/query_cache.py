"""
요청 단위 조회 결과를 위한 인메모리 쿼리 캐시.

- 키는 (뷰 이름, *파라미터) 튜플이며 무효화는 접두사 단위로 처리
- 뷰별 staleness 기간 안에서는 캐시된 값을 반환
- 같은 키에 대한 동시 요청은 하나의 로드로 합침
- poll()로 화면이 열려 있는 동안 주기적으로 다시 로드
- 변경 작업 종류별로 무효화할 키를 INVALIDATION_RULES 표에 정의
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from app.core.logging_config import get_logger

logger = get_logger(__name__)

QueryKey = Tuple[Any, ...]
Loader = Callable[[], Awaitable[Any]]


class Mutation(str, Enum):
    RATE_MOVIE = "rate_movie"
    DELETE_RATING = "delete_rating"
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"
    ADD_TO_WATCHLIST = "add_to_watchlist"
    REMOVE_FROM_WATCHLIST = "remove_from_watchlist"
    UPDATE_WATCHLIST_MOVIE = "update_watchlist_movie"
    LIKE_WATCHLIST = "like_watchlist"
    UNLIKE_WATCHLIST = "unlike_watchlist"
    UPDATE_PROFILE = "update_profile"


_RATING_KEYS = [
    ("rating", "user", "{user_id}", "{movie_id}"),
    ("ratings", "movie", "{movie_id}"),
    ("ratings", "recent", "{movie_id}"),
    ("ratings", "user", "{user_id}"),
    ("profile", "stats", "{user_id}"),
    ("watchlist", "{user_id}"),
    ("watchlist", "check", "{user_id}"),
    ("watchlists", "all"),
    ("activity",),
]

_FOLLOW_KEYS = [
    ("following", "{user_id}"),
    ("followers", "{target_user_id}"),
    ("followingCount", "{user_id}"),
    ("followerCount", "{target_user_id}"),
    ("isFollowing", "{user_id}", "{target_user_id}"),
    ("profile", "stats", "{target_user_id}"),
    ("activity", "following", "{user_id}"),
    ("activity", "unread", "{user_id}"),
]

_WATCHLIST_KEYS = [
    ("watchlist", "{user_id}"),
    ("watchlist", "check", "{user_id}"),
]

# 변경 작업 -> 영향을 받는 캐시 키 (접두사)
INVALIDATION_RULES: Dict[Mutation, List[QueryKey]] = {
    Mutation.RATE_MOVIE: _RATING_KEYS,
    Mutation.DELETE_RATING: _RATING_KEYS,
    Mutation.FOLLOW: _FOLLOW_KEYS,
    Mutation.UNFOLLOW: _FOLLOW_KEYS,
    Mutation.ADD_TO_WATCHLIST: _WATCHLIST_KEYS,
    Mutation.REMOVE_FROM_WATCHLIST: _WATCHLIST_KEYS,
    Mutation.UPDATE_WATCHLIST_MOVIE: _WATCHLIST_KEYS,
    Mutation.LIKE_WATCHLIST: [("watchlists", "all")],
    Mutation.UNLIKE_WATCHLIST: [("watchlists", "all")],
    # 작성자/소유자 요약을 담은 뷰도 유저네임 변경의 영향을 받음
    Mutation.UPDATE_PROFILE: [
        ("profile", "{user_id}"),
        ("profile", "username"),
        ("username", "check"),
        ("watchlists", "all"),
        ("activity",),
        ("followers",),
        ("following",),
        ("ratings", "recent"),
    ],
}


def resolve_key(template: QueryKey, params: Dict[str, Any]) -> QueryKey:
    """"{name}" 형태의 자리표시자를 파라미터 값으로 치환"""
    resolved = []
    for part in template:
        if isinstance(part, str) and part.startswith("{") and part.endswith("}"):
            resolved.append(params[part[1:-1]])
        else:
            resolved.append(part)
    return tuple(resolved)


def _retrieve_exception(task: asyncio.Task) -> None:
    # 대기자가 모두 취소된 로드의 에러도 회수
    if not task.cancelled():
        task.exception()


@dataclass
class CacheEntry:
    value: Any
    updated_at: float


class QueryCache:
    """키 단위 쿼리 캐시 (단일 이벤트 루프에서 사용)"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._in_flight: Dict[QueryKey, asyncio.Task] = {}
        self._generations: Dict[QueryKey, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: QueryKey, stale_time: float = 0.0) -> Optional[Any]:
        """staleness 기간 안의 값만 반환"""
        entry = self._entries.get(key)
        if entry is None or self._is_stale(entry, stale_time):
            return None
        return entry.value

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, updated_at=self._clock())

    def _is_stale(self, entry: CacheEntry, stale_time: float) -> bool:
        return self._clock() - entry.updated_at >= stale_time

    async def fetch(self, key: QueryKey, loader: Loader, stale_time: float = 0.0) -> Any:
        entry = self._entries.get(key)
        if entry is not None and not self._is_stale(entry, stale_time):
            logger.debug("cache_hit", key=key)
            return entry.value

        return await self._load(key, loader)

    async def refetch(self, key: QueryKey, loader: Loader) -> Any:
        """staleness와 관계없이 다시 로드"""
        return await self._load(key, loader)

    async def _load(self, key: QueryKey, loader: Loader) -> Any:
        task = self._in_flight.get(key)
        if task is not None:
            logger.debug("cache_join_in_flight", key=key)
        else:
            logger.debug("cache_miss", key=key)
            generation = self._generations.get(key, 0)
            task = asyncio.ensure_future(self._run_loader(key, loader, generation))
            task.add_done_callback(_retrieve_exception)
            self._in_flight[key] = task

        # 호출자가 취소되어도 로드는 계속되어 다른 대기자와 캐시를 채운다
        return await asyncio.shield(task)

    async def _run_loader(self, key: QueryKey, loader: Loader, generation: int) -> Any:
        try:
            value = await loader()
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

        # 에러는 캐시하지 않음. 로드 도중 무효화되었다면 오래된 결과도 저장하지 않음
        if self._generations.get(key, 0) == generation:
            self.set(key, value)
        return value

    def invalidate(self, prefix: QueryKey) -> int:
        """접두사가 일치하는 모든 키 무효화"""
        keys = {k for k in list(self._entries) + list(self._in_flight) if k[: len(prefix)] == prefix}
        for key in keys:
            self._entries.pop(key, None)
            self._in_flight.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1

        if keys:
            logger.debug("cache_invalidated", prefix=prefix, count=len(keys))
        return len(keys)

    def invalidate_for(self, mutation: Mutation, **params: Any) -> int:
        """변경 작업 표에 따라 관련 키를 모두 무효화"""
        total = 0
        for template in INVALIDATION_RULES[mutation]:
            total += self.invalidate(resolve_key(template, params))
        return total

    async def poll(
        self,
        key: QueryKey,
        loader: Loader,
        interval: float,
        stale_time: float = 0.0,
    ) -> AsyncIterator[Any]:
        """
        값을 내보낸 뒤 interval 마다 강제로 다시 로드해 내보낸다.

        소비자가 반복을 멈추면(aclose 또는 연결 종료) 폴링도 끝난다.
        """
        yield await self.fetch(key, loader, stale_time)
        while True:
            await asyncio.sleep(interval)
            yield await self.refetch(key, loader)

    def clear(self) -> None:
        self._entries.clear()
        self._in_flight.clear()
        self._generations.clear()
