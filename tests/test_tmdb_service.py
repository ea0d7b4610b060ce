"""
Tests for the TMDB client.

Tests cover:
- Image URL construction
- Request authentication and input gating
- Error classification for non-2xx and transport failures
- Per-item degradation when resolving movie titles
"""

import asyncio

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import TMDBError, UpstreamError, ValidationFailure
from app.services.tmdb_service import TMDBService, placeholder_movie


class TestImageUrl:
    """Test TMDBService.get_image_url."""

    def test_builds_url_with_size(self):
        """Path and size are joined onto the image base URL."""
        url = TMDBService().get_image_url("/poster.jpg", "w200")
        assert url == "https://image.tmdb.org/t/p/w200/poster.jpg"

    def test_default_size_is_w500(self):
        assert TMDBService().get_image_url("/poster.jpg").endswith("/w500/poster.jpg")

    @pytest.mark.parametrize("path", [None, ""])
    def test_missing_path_returns_none(self, path):
        assert TMDBService().get_image_url(path) is None

    def test_unknown_size_falls_back(self):
        """Sizes outside the allowed set use w500."""
        assert TMDBService().get_image_url("/p.jpg", "w9999").endswith("/w500/p.jpg")


class TestSettingsHeaders:
    """Test TMDB authentication headers."""

    def test_bearer_header_when_access_token_set(self):
        settings = Settings(tmdb_access_token="token-123")
        assert settings.tmdb_headers["Authorization"] == "Bearer token-123"

    def test_no_bearer_header_without_access_token(self):
        settings = Settings(tmdb_access_token="")
        assert "Authorization" not in settings.tmdb_headers


class TestRequests:
    """Test the TMDB endpoints through a mock transport."""

    def test_trending_returns_summaries(self, tmdb):
        movies = asyncio.run(tmdb.service().get_trending("day"))

        assert [m.title for m in movies][:2] == ["Fight Club", "The Matrix"]
        assert tmdb.paths() == ["/3/trending/movie/day"]

    def test_api_key_sent_as_query_param(self, tmdb):
        """Without an access token the api_key query parameter is used."""
        asyncio.run(tmdb.service().get_popular(2))

        request = tmdb.requests[0]
        assert request.url.params["api_key"] == "test-api-key"
        assert request.url.params["page"] == "2"

    def test_invalid_trending_window_rejected(self, tmdb):
        """Unknown windows fail validation before any request."""
        with pytest.raises(ValidationFailure):
            asyncio.run(tmdb.service().get_trending("month"))
        assert tmdb.requests == []

    @pytest.mark.parametrize("query", ["", "  ", "in", " ab "])
    def test_short_search_query_skips_request(self, tmdb, query):
        page = asyncio.run(tmdb.service().search_movies(query))

        assert page.results == []
        assert page.total_results == 0
        assert tmdb.requests == []

    def test_search_strips_query(self, tmdb):
        page = asyncio.run(tmdb.service().search_movies("  matrix "))

        assert [m.id for m in page.results] == [603]
        assert tmdb.search_queries() == ["matrix"]

    def test_movie_details(self, tmdb):
        details = asyncio.run(tmdb.service().get_movie_details(550))

        assert details.title == "Fight Club"
        assert details.runtime == 139
        assert details.genres[0].name == "Drama"

    def test_non_2xx_raises_tmdb_error_with_status(self, tmdb):
        with pytest.raises(TMDBError) as exc_info:
            asyncio.run(tmdb.service().get_movie_details(1))

        assert exc_info.value.status_code == 404
        assert isinstance(exc_info.value, UpstreamError)

    def test_server_error_body_not_parsed(self, tmdb):
        """A 5xx response is a failure even when it carries a JSON body."""
        tmdb.fail_all_with = 503
        with pytest.raises(TMDBError) as exc_info:
            asyncio.run(tmdb.service().get_popular())
        assert exc_info.value.status_code == 503

    def test_transport_failure_raises_tmdb_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = TMDBService(transport=httpx.MockTransport(handler))
        with pytest.raises(TMDBError) as exc_info:
            asyncio.run(service.get_trending())
        assert exc_info.value.status_code is None


class TestResolveMovieRefs:
    """Test per-item movie resolution."""

    def test_failed_lookup_uses_placeholder(self, tmdb):
        tmdb.failing_ids.add(603)

        refs = asyncio.run(tmdb.service().resolve_movie_refs([550, 603, 999]))

        assert refs[550].title == "Fight Club"
        assert refs[550].poster_path == "/fight.jpg"
        assert refs[603] == placeholder_movie(603)
        assert refs[999].title == "Movie #999"
        assert refs[999].poster_path is None

    def test_duplicate_ids_fetched_once(self, tmdb):
        refs = asyncio.run(tmdb.service().resolve_movie_refs([550, 550, 680]))

        assert set(refs) == {550, 680}
        assert sorted(tmdb.paths()) == ["/3/movie/550", "/3/movie/680"]

    def test_empty_ids(self, tmdb):
        assert asyncio.run(tmdb.service().resolve_movie_refs([])) == {}
