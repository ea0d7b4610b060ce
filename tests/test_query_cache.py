"""
Tests for the keyed query cache.

Tests cover:
- Staleness windows with an injected clock
- Deduplication of concurrent loads
- Error propagation without caching
- Prefix invalidation and the mutation table
- Polling
"""

import asyncio

import pytest

from app.core.query_cache import INVALIDATION_RULES, Mutation, QueryCache, resolve_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingLoader:
    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.values[min(self.calls, len(self.values)) - 1]


class TestFetch:
    """Test QueryCache.fetch staleness."""

    def test_fresh_value_served_from_cache(self):
        clock = FakeClock()
        cache = QueryCache(clock=clock)
        loader = CountingLoader("first", "second")

        async def scenario():
            first = await cache.fetch(("movie", 550), loader, stale_time=60)
            clock.advance(59)
            second = await cache.fetch(("movie", 550), loader, stale_time=60)
            return first, second

        assert asyncio.run(scenario()) == ("first", "first")
        assert loader.calls == 1

    def test_stale_value_reloaded(self):
        clock = FakeClock()
        cache = QueryCache(clock=clock)
        loader = CountingLoader("first", "second")

        async def scenario():
            await cache.fetch(("movie", 550), loader, stale_time=60)
            clock.advance(60)
            return await cache.fetch(("movie", 550), loader, stale_time=60)

        assert asyncio.run(scenario()) == "second"
        assert loader.calls == 2

    def test_zero_stale_time_always_reloads(self):
        cache = QueryCache(clock=FakeClock())
        loader = CountingLoader("a", "b")

        async def scenario():
            await cache.fetch(("watchlist", "u1"), loader)
            return await cache.fetch(("watchlist", "u1"), loader)

        assert asyncio.run(scenario()) == "b"
        assert loader.calls == 2

    def test_refetch_ignores_freshness(self):
        cache = QueryCache(clock=FakeClock())
        loader = CountingLoader("a", "b")

        async def scenario():
            await cache.fetch(("k",), loader, stale_time=600)
            return await cache.refetch(("k",), loader)

        assert asyncio.run(scenario()) == "b"
        assert cache.get(("k",), stale_time=600) == "b"

    def test_get_returns_none_for_missing_or_stale(self):
        clock = FakeClock()
        cache = QueryCache(clock=clock)
        cache.set(("k",), "v")

        assert cache.get(("missing",), stale_time=10) is None
        assert cache.get(("k",), stale_time=10) == "v"
        clock.advance(10)
        assert cache.get(("k",), stale_time=10) is None


class TestInFlight:
    """Test deduplication and error handling of concurrent loads."""

    def test_concurrent_fetches_share_one_load(self):
        cache = QueryCache()
        calls = []

        async def scenario():
            gate = asyncio.Event()

            async def loader():
                calls.append(1)
                await gate.wait()
                return "value"

            first = asyncio.create_task(cache.fetch(("k",), loader, stale_time=60))
            second = asyncio.create_task(cache.fetch(("k",), loader, stale_time=60))
            await asyncio.sleep(0)
            gate.set()
            return await asyncio.gather(first, second)

        assert asyncio.run(scenario()) == ["value", "value"]
        assert len(calls) == 1

    def test_loader_error_reaches_every_waiter_and_is_not_cached(self):
        cache = QueryCache()

        async def scenario():
            gate = asyncio.Event()

            async def failing():
                await gate.wait()
                raise RuntimeError("boom")

            first = asyncio.create_task(cache.fetch(("k",), failing, stale_time=60))
            second = asyncio.create_task(cache.fetch(("k",), failing, stale_time=60))
            await asyncio.sleep(0)
            gate.set()
            return await asyncio.gather(first, second, return_exceptions=True)

        results = asyncio.run(scenario())

        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(cache) == 0

    def test_invalidation_during_load_discards_result(self):
        cache = QueryCache()

        async def scenario():
            gate = asyncio.Event()

            async def loader():
                await gate.wait()
                return "stale"

            task = asyncio.create_task(cache.fetch(("activity", "following", "u1"), loader, stale_time=60))
            await asyncio.sleep(0)
            cache.invalidate(("activity",))
            gate.set()
            return await task

        assert asyncio.run(scenario()) == "stale"
        assert cache.get(("activity", "following", "u1"), stale_time=60) is None

    def test_cancelled_caller_leaves_shared_load_running(self):
        """Cancelling the caller that started a load does not fail the others."""
        cache = QueryCache()

        async def scenario():
            gate = asyncio.Event()

            async def loader():
                await gate.wait()
                return "value"

            first = asyncio.create_task(cache.fetch(("k",), loader, stale_time=60))
            second = asyncio.create_task(cache.fetch(("k",), loader, stale_time=60))
            await asyncio.sleep(0)
            first.cancel()
            await asyncio.sleep(0)
            gate.set()
            return first, await second

        first, second_value = asyncio.run(scenario())

        assert first.cancelled()
        assert second_value == "value"
        assert cache.get(("k",), stale_time=60) == "value"

    def test_load_completes_after_every_caller_is_cancelled(self):
        cache = QueryCache()

        async def scenario():
            gate = asyncio.Event()

            async def loader():
                await gate.wait()
                return "value"

            task = asyncio.create_task(cache.fetch(("k",), loader, stale_time=60))
            await asyncio.sleep(0)
            task.cancel()
            gate.set()
            for _ in range(3):
                await asyncio.sleep(0)

        asyncio.run(scenario())

        assert cache.get(("k",), stale_time=60) == "value"


class TestInvalidation:
    """Test prefix invalidation and the mutation table."""

    def test_prefix_match(self):
        cache = QueryCache()
        cache.set(("ratings", "user", "u1"), 1)
        cache.set(("ratings", "user", "u1", "visible", False), 2)
        cache.set(("ratings", "user", "u2"), 3)
        cache.set(("ratings", "movie", 550), 4)

        removed = cache.invalidate(("ratings", "user", "u1"))

        assert removed == 2
        assert cache.get(("ratings", "user", "u2"), stale_time=60) == 3
        assert cache.get(("ratings", "movie", 550), stale_time=60) == 4

    def test_resolve_key(self):
        key = resolve_key(("rating", "user", "{user_id}", "{movie_id}"), {"user_id": "u1", "movie_id": 550})
        assert key == ("rating", "user", "u1", 550)

    def test_rate_movie_invalidates_related_views(self):
        cache = QueryCache()
        related = [
            ("rating", "user", "u1", 550),
            ("ratings", "movie", 550),
            ("ratings", "movie", 550, "summary"),
            ("ratings", "recent", 550, 5),
            ("profile", "stats", "u1"),
            ("ratings", "user", "u1"),
            ("watchlist", "u1"),
            ("watchlists", "all", None),
            ("watchlists", "all", "u2"),
            ("activity", "following", "u2"),
            ("activity", "unread", "u3"),
        ]
        unrelated = [
            ("ratings", "movie", 603),
            ("profile", "stats", "u2"),
            ("movie", 550),
            ("followers", "u1"),
        ]
        for key in related + unrelated:
            cache.set(key, "cached")

        cache.invalidate_for(Mutation.RATE_MOVIE, user_id="u1", movie_id=550)

        assert all(cache.get(key, stale_time=60) is None for key in related)
        assert all(cache.get(key, stale_time=60) == "cached" for key in unrelated)

    def test_follow_invalidates_both_sides(self):
        cache = QueryCache()
        keys = [
            ("following", "u1"),
            ("followers", "u2"),
            ("followingCount", "u1"),
            ("followerCount", "u2"),
            ("isFollowing", "u1", "u2"),
            ("activity", "following", "u1"),
            ("activity", "unread", "u1"),
        ]
        for key in keys:
            cache.set(key, "cached")
        cache.set(("activity", "following", "u3"), "other")

        cache.invalidate_for(Mutation.FOLLOW, user_id="u1", target_user_id="u2")

        assert all(cache.get(key, stale_time=60) is None for key in keys)
        assert cache.get(("activity", "following", "u3"), stale_time=60) == "other"

    def test_like_invalidates_only_leaderboard(self):
        cache = QueryCache()
        cache.set(("watchlists", "all", "u1"), "cached")
        cache.set(("watchlist", "u1"), "cached")

        cache.invalidate_for(Mutation.LIKE_WATCHLIST)

        assert cache.get(("watchlists", "all", "u1"), stale_time=60) is None
        assert cache.get(("watchlist", "u1"), stale_time=60) == "cached"

    def test_every_mutation_has_rules(self):
        assert set(INVALIDATION_RULES) == set(Mutation)

    def test_delete_rating_matches_rate_movie(self):
        assert INVALIDATION_RULES[Mutation.DELETE_RATING] == INVALIDATION_RULES[Mutation.RATE_MOVIE]


class TestPoll:
    """Test QueryCache.poll."""

    def test_yields_then_refetches(self):
        cache = QueryCache()
        loader = CountingLoader(1, 2, 3)

        async def scenario():
            values = []
            stream = cache.poll(("activity", "unread", "u1"), loader, interval=0, stale_time=60)
            async for value in stream:
                values.append(value)
                if len(values) == 3:
                    break
            await stream.aclose()
            return values

        assert asyncio.run(scenario()) == [1, 2, 3]
        assert loader.calls == 3

    def test_first_value_served_from_fresh_cache(self):
        cache = QueryCache()
        cache.set(("activity", "following", "u1"), ["cached"])
        loader = CountingLoader(["loaded"])

        async def scenario():
            stream = cache.poll(("activity", "following", "u1"), loader, interval=0, stale_time=30)
            first = await stream.__anext__()
            await stream.aclose()
            return first

        assert asyncio.run(scenario()) == ["cached"]
        assert loader.calls == 0

    def test_loader_error_ends_stream(self):
        cache = QueryCache()

        async def failing():
            raise RuntimeError("boom")

        async def scenario():
            async for _ in cache.poll(("k",), failing, interval=0):
                pass

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())
