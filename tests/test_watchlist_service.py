"""
Tests for the personal watchlist.
"""

import asyncio
from datetime import timedelta

import pytest

from app.core.exceptions import ValidationFailure
from app.schemas.watchlist import AddToWatchlistPayload, UpdateWatchlistMoviePayload
from app.services.watchlist_service import WatchlistService


class TestAddToWatchlist:
    """Test the rated-first gate and snapshot fields."""

    def test_unrated_movie_rejected(self, tmdb, make_profile):
        user_id = make_profile("alice")
        service = WatchlistService(tmdb_service=tmdb.service())

        with pytest.raises(ValidationFailure):
            asyncio.run(service.add_to_watchlist(user_id, AddToWatchlistPayload(tmdb_id=550)))
        assert asyncio.run(service.get_watchlist(user_id)) == []

    def test_rating_copied_and_title_resolved(self, tmdb, make_profile, make_rating):
        user_id = make_profile("alice")
        make_rating(user_id, 550, 8)
        service = WatchlistService(tmdb_service=tmdb.service())

        entry = asyncio.run(service.add_to_watchlist(user_id, AddToWatchlistPayload(tmdb_id=550)))

        assert entry.rating == 8
        assert entry.title == "Fight Club"
        assert entry.poster_path == "/fight.jpg"
        assert entry.movie_id == entry.tmdb_id == 550
        assert entry.watched is False

    def test_given_title_skips_lookup(self, tmdb, make_profile, make_rating):
        user_id = make_profile("alice")
        make_rating(user_id, 550, 8)
        service = WatchlistService(tmdb_service=tmdb.service())

        payload = AddToWatchlistPayload(tmdb_id=550, title="Fight Club", poster_path="/given.jpg")
        entry = asyncio.run(service.add_to_watchlist(user_id, payload))

        assert entry.poster_path == "/given.jpg"
        assert tmdb.requests == []

    def test_lookup_failure_uses_placeholder(self, tmdb, make_profile, make_rating):
        user_id = make_profile("alice")
        make_rating(user_id, 603, 6)
        tmdb.failing_ids.add(603)
        service = WatchlistService(tmdb_service=tmdb.service())

        entry = asyncio.run(service.add_to_watchlist(user_id, AddToWatchlistPayload(tmdb_id=603)))

        assert entry.title == "Movie #603"
        assert entry.poster_path is None

    def test_duplicate_rejected(self, tmdb, make_profile, make_rating):
        user_id = make_profile("alice")
        make_rating(user_id, 550, 8)
        service = WatchlistService(tmdb_service=tmdb.service())
        payload = AddToWatchlistPayload(tmdb_id=550, title="Fight Club")

        asyncio.run(service.add_to_watchlist(user_id, payload))
        with pytest.raises(ValidationFailure):
            asyncio.run(service.add_to_watchlist(user_id, payload))

        assert len(asyncio.run(service.get_watchlist(user_id))) == 1
        assert asyncio.run(service.is_in_watchlist(user_id, 550)) is True
        assert asyncio.run(service.is_in_watchlist(user_id, 603)) is False


class TestUpdateAndRemove:
    """Test ownership checks on existing entries."""

    def test_update_watched(self, make_profile, make_watchlist_entry):
        user_id = make_profile("alice")
        entry_id = make_watchlist_entry(user_id, 550, rating=7)

        entry = asyncio.run(
            WatchlistService().update_watchlist_movie(
                entry_id, user_id, UpdateWatchlistMoviePayload(watched=True)
            )
        )

        assert entry.watched is True
        assert entry.rating == 7

    def test_update_other_users_entry_rejected(self, make_profile, make_watchlist_entry):
        alice = make_profile("alice")
        bob = make_profile("bob")
        entry_id = make_watchlist_entry(alice, 550)

        with pytest.raises(ValidationFailure):
            asyncio.run(
                WatchlistService().update_watchlist_movie(
                    entry_id, bob, UpdateWatchlistMoviePayload(watched=True)
                )
            )

    def test_remove(self, make_profile, make_watchlist_entry):
        user_id = make_profile("alice")
        entry_id = make_watchlist_entry(user_id, 550)
        service = WatchlistService()

        removed = asyncio.run(service.remove_from_watchlist(entry_id, user_id))

        assert removed.id == entry_id
        assert asyncio.run(service.get_watchlist(user_id)) == []

    def test_missing_entry_returns_none(self, make_profile):
        user_id = make_profile("alice")
        service = WatchlistService()

        assert asyncio.run(service.remove_from_watchlist("missing", user_id)) is None
        assert (
            asyncio.run(
                service.update_watchlist_movie("missing", user_id, UpdateWatchlistMoviePayload(watched=True))
            )
            is None
        )


class TestVisibleWatchlist:
    """Test the profile watchlist shown to anonymous viewers."""

    def test_anonymous_sees_top_half_without_ratings(self, make_profile, make_watchlist_entry, base_time):
        user_id = make_profile("alice")
        for offset, (tmdb_id, rating) in enumerate([(550, 5), (603, 9), (680, 3)]):
            make_watchlist_entry(user_id, tmdb_id, rating=rating, added_at=base_time + timedelta(minutes=offset))

        result = asyncio.run(WatchlistService().get_visible_watchlist(user_id, viewer_authenticated=False))

        assert [item.tmdb_id for item in result.items] == [603, 550]
        assert all(item.rating is None for item in result.items)
        assert result.total == 3
        assert result.hidden_count == 1

    def test_authenticated_sees_all(self, make_profile, make_watchlist_entry):
        user_id = make_profile("alice")
        make_watchlist_entry(user_id, 550, rating=5)
        make_watchlist_entry(user_id, 603, rating=9)

        result = asyncio.run(WatchlistService().get_visible_watchlist(user_id, viewer_authenticated=True))

        assert [item.rating for item in result.items] == [9, 5]
        assert result.is_limited is False
