import os
import re
from datetime import datetime

# 앱 import 전에 테스트 설정 적용 (get_settings는 캐시됨)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TMDB_API_KEY"] = "test-api-key"
os.environ["TMDB_ACCESS_TOKEN"] = ""
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.auth import create_access_token
from app.core.dependencies import get_tmdb_service
from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import (
    FollowModel,
    ProfileModel,
    RatingModel,
    WatchlistLikeModel,
    WatchlistMovieModel,
)
from app.services.tmdb_service import TMDBService

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


class FakeTMDB:
    """httpx.MockTransport 로 동작하는 TMDB 대역"""

    def __init__(self):
        self.movies = {
            550: {"title": "Fight Club", "poster_path": "/fight.jpg"},
            603: {"title": "The Matrix", "poster_path": "/matrix.jpg"},
            680: {"title": "Pulp Fiction", "poster_path": "/pulp.jpg"},
            27205: {"title": "Inception", "poster_path": "/inception.jpg"},
        }
        self.failing_ids = set()
        self.fail_all_with = None
        self.requests = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def service(self) -> TMDBService:
        return TMDBService(transport=self.transport)

    def paths(self):
        return [request.url.path for request in self.requests]

    def search_queries(self):
        return [
            request.url.params.get("query")
            for request in self.requests
            if request.url.path.endswith("/search/movie")
        ]

    def _summary(self, movie_id):
        movie = self.movies[movie_id]
        return {
            "id": movie_id,
            "title": movie["title"],
            "poster_path": movie["poster_path"],
            "overview": f"{movie['title']} overview",
            "release_date": "1999-10-15",
            "vote_average": 8.4,
            "vote_count": 1000,
            "genre_ids": [18],
        }

    def _page(self, movies, page=1):
        return {
            "page": page,
            "results": movies,
            "total_pages": 1,
            "total_results": len(movies),
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_all_with is not None:
            return httpx.Response(self.fail_all_with, json={"status_message": "boom"})

        path = re.sub(r"^/3", "", request.url.path)
        page = int(request.url.params.get("page", 1))
        summaries = [self._summary(movie_id) for movie_id in sorted(self.movies)]

        if path.startswith("/trending/movie/"):
            return httpx.Response(200, json=self._page(summaries))
        if path in ("/movie/popular", "/movie/top_rated"):
            return httpx.Response(200, json=self._page(summaries, page))
        if path == "/search/movie":
            query = request.url.params.get("query", "").lower()
            found = [s for s in summaries if query in s["title"].lower()]
            return httpx.Response(200, json=self._page(found, page))

        match = re.fullmatch(r"/movie/(\d+)", path)
        if match:
            movie_id = int(match.group(1))
            if movie_id in self.failing_ids:
                return httpx.Response(500, json={"status_message": "internal error"})
            if movie_id not in self.movies:
                return httpx.Response(404, json={"status_message": "not found"})
            details = self._summary(movie_id)
            details.update({"runtime": 139, "genres": [{"id": 18, "name": "Drama"}], "tagline": ""})
            return httpx.Response(200, json=details)

        return httpx.Response(404, json={"status_message": "unknown path"})


@pytest.fixture(autouse=True)
def reset_database():
    """테스트마다 빈 인메모리 DB"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def tmdb():
    return FakeTMDB()


@pytest.fixture
def client(tmdb):
    """TMDB 호출을 가짜 전송 계층으로 돌린 TestClient"""
    app.dependency_overrides[get_tmdb_service] = tmdb.service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _save(model):
    db = SessionLocal()
    try:
        db.add(model)
        db.commit()
        db.refresh(model)
        return model
    finally:
        db.close()


@pytest.fixture
def make_profile():
    def factory(username, **fields):
        fields.setdefault("email", f"{username}@example.com")
        fields.setdefault("google_id", f"google-{username}")
        return _save(ProfileModel(username=username, **fields)).id

    return factory


@pytest.fixture
def make_rating():
    def factory(user_id, movie_id, rating_value, created_at=None):
        return _save(
            RatingModel(
                user_id=user_id,
                movie_id=movie_id,
                rating_value=rating_value,
                created_at=created_at or BASE_TIME,
            )
        ).id

    return factory


@pytest.fixture
def make_follow():
    def factory(follower_id, following_id):
        return _save(FollowModel(follower_id=follower_id, following_id=following_id)).id

    return factory


@pytest.fixture
def make_like():
    def factory(user_id, watchlist_owner_id):
        _save(WatchlistLikeModel(user_id=user_id, watchlist_owner_id=watchlist_owner_id))

    return factory


@pytest.fixture
def make_watchlist_entry():
    def factory(user_id, tmdb_id, rating=None, title=None, added_at=None):
        return _save(
            WatchlistMovieModel(
                user_id=user_id,
                movie_id=tmdb_id,
                tmdb_id=tmdb_id,
                title=title or f"Movie #{tmdb_id}",
                rating=rating,
                added_at=added_at or BASE_TIME,
            )
        ).id

    return factory


@pytest.fixture
def auth_headers():
    def factory(user_id):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return factory


@pytest.fixture
def base_time():
    return BASE_TIME
