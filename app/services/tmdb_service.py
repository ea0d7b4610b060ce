# app/services/tmdb_service.py

import asyncio
from typing import Dict, List, Optional
import httpx
from app.core.config import get_settings
from app.core.exceptions import TMDBError, ValidationFailure
from app.core.logging_config import get_logger
from app.schemas import MovieSummary, MovieDetails, MoviePage, MovieRef

logger = get_logger(__name__)

TRENDING_WINDOWS = ("day", "week")
IMAGE_SIZES = ("w200", "w300", "w500", "original")
MIN_SEARCH_QUERY_LENGTH = 3


class TMDBService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = get_settings()
        self.timeout = httpx.Timeout(self.settings.tmdb_timeout)
        self.transport = transport

    def get_image_url(self, path: Optional[str], size: str = "w500") -> Optional[str]:
        """포스터 경로와 사이즈로 이미지 URL 생성 (경로가 없으면 None)"""
        if not path:
            return None
        if size not in IMAGE_SIZES:
            size = "w500"
        return f"{self.settings.tmdb_image_base_url}{size}{path}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.tmdb_base_url,
            timeout=self.timeout,
            headers=self.settings.tmdb_headers,
            transport=self.transport,
        )

    def _params(self, **params) -> dict:
        if self.settings.tmdb_api_key and not self.settings.tmdb_access_token:
            params["api_key"] = self.settings.tmdb_api_key
        return params

    async def _get(self, path: str, **params) -> dict:
        async with self._client() as client:
            try:
                response = await client.get(path, params=self._params(**params))
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                logger.warning("tmdb_request_failed", path=path, status_code=status_code)
                raise TMDBError(f"TMDB API 오류: {status_code}", status_code=status_code) from e
            except httpx.RequestError as e:
                logger.warning("tmdb_request_error", path=path, error=str(e))
                raise TMDBError(f"요청 실패: {str(e)}") from e

    async def get_trending(self, window: str = "week") -> List[MovieSummary]:
        if window not in TRENDING_WINDOWS:
            raise ValidationFailure(f"지원하지 않는 기간입니다: {window}")

        data = await self._get(f"/trending/movie/{window}")
        return [MovieSummary.model_validate(item) for item in data.get("results", [])]

    async def search_movies(self, query: str, page: int = 1) -> MoviePage:
        """영화 검색 - 3글자 미만 검색어는 호출하지 않음"""
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_QUERY_LENGTH:
            return MoviePage(page=page)

        data = await self._get("/search/movie", query=query, page=page)
        return MoviePage.model_validate(data)

    async def get_movie_details(self, movie_id: int) -> MovieDetails:
        data = await self._get(f"/movie/{movie_id}")
        return MovieDetails.model_validate(data)

    async def get_popular(self, page: int = 1) -> MoviePage:
        data = await self._get("/movie/popular", page=page)
        return MoviePage.model_validate(data)

    async def get_top_rated(self, page: int = 1) -> MoviePage:
        data = await self._get("/movie/top_rated", page=page)
        return MoviePage.model_validate(data)

    async def resolve_movie_ref(self, movie_id: int) -> MovieRef:
        """영화 제목/포스터 조회 - 실패 시 대체 제목으로 degrade"""
        try:
            details = await self.get_movie_details(movie_id)
            return MovieRef(id=movie_id, title=details.title, poster_path=details.poster_path)
        except (TMDBError, ValueError) as e:
            logger.info("movie_lookup_degraded", movie_id=movie_id, error=str(e))
            return placeholder_movie(movie_id)

    async def resolve_movie_refs(self, movie_ids: List[int]) -> Dict[int, MovieRef]:
        """여러 영화를 동시에 조회 (항목별로 실패 격리)"""
        unique_ids = list(dict.fromkeys(movie_ids))
        refs = await asyncio.gather(*(self.resolve_movie_ref(movie_id) for movie_id in unique_ids))
        return dict(zip(unique_ids, refs))


def placeholder_movie(movie_id: int) -> MovieRef:
    return MovieRef(id=movie_id, title=f"Movie #{movie_id}", poster_path=None)
