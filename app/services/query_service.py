# app/services/query_service.py

from typing import AsyncIterator, List, Optional
from app.core.query_cache import Mutation, QueryCache
from app.core.logging_config import get_logger
from app.schemas.activity import ActivityItem
from app.schemas.follow import Follow, FollowStats
from app.schemas.movie import MovieDetails, MoviePage, MovieSummary
from app.schemas.profile import (
    Profile,
    ProfileStats,
    ProfileSummary,
    UpdateProfilePayload,
    UsernameCheck,
)
from app.schemas.rating import (
    MovieRatingSummary,
    RateMoviePayload,
    Rating,
    RatingWithAuthor,
    VisibleRatingList,
)
from app.schemas.watchlist import (
    AddToWatchlistPayload,
    UpdateWatchlistMoviePayload,
    VisibleWatchlist,
    WatchlistItem,
    WatchlistLike,
    WatchlistMovie,
)
from app.services.activity_service import ActivityService
from app.services.follow_service import FollowService
from app.services.profile_service import ProfileService, normalize_username
from app.services.rating_service import RatingService
from app.services.tmdb_service import TMDBService
from app.services.watchlist_service import WatchlistService
from app.services.watchlists_service import WatchlistsService

logger = get_logger(__name__)

# 뷰별 staleness (초)
TRENDING_STALE_TIME = 5 * 60
MOVIE_LIST_STALE_TIME = 5 * 60
MOVIE_DETAILS_STALE_TIME = 10 * 60
PROFILE_STATS_STALE_TIME = 60
USERNAME_CHECK_STALE_TIME = 30
ALL_WATCHLISTS_STALE_TIME = 60
ACTIVITY_STALE_TIME = 30
ACTIVITY_REFETCH_INTERVAL = 60
UNREAD_STALE_TIME = 60
UNREAD_REFETCH_INTERVAL = 120


class QueryService:
    """
    라우터가 사용하는 조회/변경 진입점.

    조회는 (뷰 이름, *파라미터) 키로 QueryCache를 거치고, 변경은 서비스
    호출이 성공한 뒤 INVALIDATION_RULES에 따라 관련 키를 무효화한다.
    """

    def __init__(
        self,
        cache: QueryCache,
        tmdb_service: Optional[TMDBService] = None,
        profile_service: Optional[ProfileService] = None,
        follow_service: Optional[FollowService] = None,
    ):
        self.cache = cache
        self.tmdb_service = tmdb_service or TMDBService()
        self.profile_service = profile_service or ProfileService()
        self.follow_service = follow_service or FollowService()
        self.rating_service = RatingService(tmdb_service=self.tmdb_service)
        self.watchlist_service = WatchlistService(tmdb_service=self.tmdb_service)
        self.watchlists_service = WatchlistsService(
            profile_service=self.profile_service, rating_service=self.rating_service
        )
        self.activity_service = ActivityService(
            follow_service=self.follow_service, tmdb_service=self.tmdb_service
        )

    # ----- 영화 -----

    async def get_trending(self, window: str = "week") -> List[MovieSummary]:
        return await self.cache.fetch(
            ("movies", "trending", window),
            lambda: self.tmdb_service.get_trending(window),
            TRENDING_STALE_TIME,
        )

    async def get_popular(self, page: int = 1) -> MoviePage:
        return await self.cache.fetch(
            ("movies", "popular", page),
            lambda: self.tmdb_service.get_popular(page),
            MOVIE_LIST_STALE_TIME,
        )

    async def get_top_rated(self, page: int = 1) -> MoviePage:
        return await self.cache.fetch(
            ("movies", "topRated", page),
            lambda: self.tmdb_service.get_top_rated(page),
            MOVIE_LIST_STALE_TIME,
        )

    async def get_movie_details(self, movie_id: int) -> MovieDetails:
        return await self.cache.fetch(
            ("movie", movie_id),
            lambda: self.tmdb_service.get_movie_details(movie_id),
            MOVIE_DETAILS_STALE_TIME,
        )

    async def search_movies(self, query: str, page: int = 1) -> MoviePage:
        query = query.strip()
        return await self.cache.fetch(
            ("search", query, page),
            lambda: self.tmdb_service.search_movies(query, page),
        )

    # ----- 프로필 -----

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        return await self.cache.fetch(
            ("profile", user_id),
            lambda: self.profile_service.get_profile(user_id),
        )

    async def get_profile_by_username(self, username: str) -> Optional[Profile]:
        return await self.cache.fetch(
            ("profile", "username", username),
            lambda: self.profile_service.get_profile_by_username(username),
        )

    async def get_profile_stats(self, user_id: str) -> ProfileStats:
        return await self.cache.fetch(
            ("profile", "stats", user_id),
            lambda: self.profile_service.get_profile_stats(user_id),
            PROFILE_STATS_STALE_TIME,
        )

    async def check_username(self, raw_username: str) -> UsernameCheck:
        username = normalize_username(raw_username)
        return await self.cache.fetch(
            ("username", "check", username),
            lambda: self.profile_service.check_username(username),
            USERNAME_CHECK_STALE_TIME,
        )

    async def update_profile(self, user_id: str, payload: UpdateProfilePayload) -> Optional[Profile]:
        profile = await self.profile_service.update_profile(user_id, payload)
        if profile:
            self.cache.invalidate_for(Mutation.UPDATE_PROFILE, user_id=user_id)
        return profile

    async def update_preferences(self, user_id: str, preferences: List[str]) -> Optional[Profile]:
        profile = await self.profile_service.update_preferences(user_id, preferences)
        if profile:
            self.cache.invalidate_for(Mutation.UPDATE_PROFILE, user_id=user_id)
        return profile

    async def sign_in(
        self,
        google_id: str,
        email: Optional[str],
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ):
        """OAuth 로그인 - 새 프로필이 생기면 유저네임 확인 결과도 무효화"""
        profile, created = await self.profile_service.get_or_create_from_oauth(
            google_id=google_id, email=email, name=name, avatar_url=avatar_url
        )
        if created:
            self.cache.invalidate_for(Mutation.UPDATE_PROFILE, user_id=profile.id)
        return profile, created

    # ----- 평점 -----

    async def get_user_rating(self, user_id: str, movie_id: int) -> Optional[Rating]:
        return await self.cache.fetch(
            ("rating", "user", user_id, movie_id),
            lambda: self.rating_service.get_user_rating(user_id, movie_id),
        )

    async def get_movie_ratings(self, movie_id: int) -> List[Rating]:
        return await self.cache.fetch(
            ("ratings", "movie", movie_id),
            lambda: self.rating_service.get_movie_ratings(movie_id),
        )

    async def get_movie_rating_summary(self, movie_id: int) -> MovieRatingSummary:
        return await self.cache.fetch(
            ("ratings", "movie", movie_id, "summary"),
            lambda: self.rating_service.get_movie_rating_summary(movie_id),
        )

    async def get_recent_ratings(self, movie_id: int, limit: int = 5) -> List[RatingWithAuthor]:
        return await self.cache.fetch(
            ("ratings", "recent", movie_id, limit),
            lambda: self.rating_service.get_recent_ratings(movie_id, limit),
        )

    async def get_user_ratings(self, user_id: str) -> List[Rating]:
        return await self.cache.fetch(
            ("ratings", "user", user_id),
            lambda: self.rating_service.get_user_ratings(user_id),
        )

    async def get_visible_ratings(self, user_id: str, viewer_authenticated: bool) -> VisibleRatingList:
        return await self.cache.fetch(
            ("ratings", "user", user_id, "visible", viewer_authenticated),
            lambda: self.rating_service.get_visible_ratings(user_id, viewer_authenticated),
        )

    async def rate_movie(self, user_id: str, payload: RateMoviePayload) -> Rating:
        rating = await self.rating_service.rate_movie(user_id, payload)
        self.cache.invalidate_for(Mutation.RATE_MOVIE, user_id=user_id, movie_id=payload.movie_id)
        return rating

    async def delete_rating(self, rating_id: str, user_id: str) -> Optional[Rating]:
        rating = await self.rating_service.delete_rating(rating_id, user_id)
        if rating:
            self.cache.invalidate_for(Mutation.DELETE_RATING, user_id=user_id, movie_id=rating.movie_id)
        return rating

    # ----- 왓치리스트 -----

    async def get_watchlist(self, user_id: str) -> List[WatchlistMovie]:
        return await self.cache.fetch(
            ("watchlist", user_id),
            lambda: self.watchlist_service.get_watchlist(user_id),
        )

    async def get_visible_watchlist(self, user_id: str, viewer_authenticated: bool) -> VisibleWatchlist:
        return await self.cache.fetch(
            ("watchlist", user_id, "visible", viewer_authenticated),
            lambda: self.watchlist_service.get_visible_watchlist(user_id, viewer_authenticated),
        )

    async def is_in_watchlist(self, user_id: str, tmdb_id: int) -> bool:
        return await self.cache.fetch(
            ("watchlist", "check", user_id, tmdb_id),
            lambda: self.watchlist_service.is_in_watchlist(user_id, tmdb_id),
        )

    async def add_to_watchlist(self, user_id: str, payload: AddToWatchlistPayload) -> WatchlistMovie:
        entry = await self.watchlist_service.add_to_watchlist(user_id, payload)
        self.cache.invalidate_for(Mutation.ADD_TO_WATCHLIST, user_id=user_id)
        return entry

    async def remove_from_watchlist(self, watchlist_id: str, user_id: str) -> Optional[WatchlistMovie]:
        entry = await self.watchlist_service.remove_from_watchlist(watchlist_id, user_id)
        if entry:
            self.cache.invalidate_for(Mutation.REMOVE_FROM_WATCHLIST, user_id=user_id)
        return entry

    async def update_watchlist_movie(
        self, watchlist_id: str, user_id: str, payload: UpdateWatchlistMoviePayload
    ) -> Optional[WatchlistMovie]:
        entry = await self.watchlist_service.update_watchlist_movie(watchlist_id, user_id, payload)
        if entry:
            self.cache.invalidate_for(Mutation.UPDATE_WATCHLIST_MOVIE, user_id=user_id)
        return entry

    # ----- 커뮤니티 왓치리스트 -----

    async def get_all_watchlists(self, viewer_id: Optional[str] = None) -> List[WatchlistItem]:
        return await self.cache.fetch(
            ("watchlists", "all", viewer_id),
            lambda: self.watchlists_service.get_all_watchlists(viewer_id),
            ALL_WATCHLISTS_STALE_TIME,
        )

    async def like_watchlist(self, user_id: str, watchlist_owner_id: str) -> WatchlistLike:
        like = await self.watchlists_service.like_watchlist(user_id, watchlist_owner_id)
        self.cache.invalidate_for(Mutation.LIKE_WATCHLIST)
        return like

    async def unlike_watchlist(self, user_id: str, watchlist_owner_id: str) -> bool:
        removed = await self.watchlists_service.unlike_watchlist(user_id, watchlist_owner_id)
        if removed:
            self.cache.invalidate_for(Mutation.UNLIKE_WATCHLIST)
        return removed

    # ----- 팔로우 -----

    async def get_followers(self, user_id: str) -> List[ProfileSummary]:
        return await self.cache.fetch(
            ("followers", user_id),
            lambda: self.follow_service.get_followers(user_id),
        )

    async def get_following(self, user_id: str) -> List[ProfileSummary]:
        return await self.cache.fetch(
            ("following", user_id),
            lambda: self.follow_service.get_following(user_id),
        )

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        return await self.cache.fetch(
            ("isFollowing", follower_id, following_id),
            lambda: self.follow_service.is_following(follower_id, following_id),
        )

    async def get_follow_stats(self, user_id: str) -> FollowStats:
        followers_count = await self.cache.fetch(
            ("followerCount", user_id),
            lambda: self.follow_service.get_follower_count(user_id),
        )
        following_count = await self.cache.fetch(
            ("followingCount", user_id),
            lambda: self.follow_service.get_following_count(user_id),
        )
        return FollowStats(
            user_id=user_id,
            followers_count=followers_count,
            following_count=following_count,
        )

    async def follow_user(self, follower_id: str, following_id: str) -> Follow:
        follow = await self.follow_service.follow_user(follower_id, following_id)
        self.cache.invalidate_for(Mutation.FOLLOW, user_id=follower_id, target_user_id=following_id)
        return follow

    async def unfollow_user(self, follower_id: str, following_id: str) -> bool:
        removed = await self.follow_service.unfollow_user(follower_id, following_id)
        if removed:
            self.cache.invalidate_for(Mutation.UNFOLLOW, user_id=follower_id, target_user_id=following_id)
        return removed

    # ----- 활동 피드 -----

    async def get_following_activity(self, user_id: str) -> List[ActivityItem]:
        return await self.cache.fetch(
            ("activity", "following", user_id),
            lambda: self.activity_service.get_following_activity(user_id),
            ACTIVITY_STALE_TIME,
        )

    async def get_unread_count(self, user_id: str) -> int:
        return await self.cache.fetch(
            ("activity", "unread", user_id),
            lambda: self.activity_service.get_unread_count(user_id),
            UNREAD_STALE_TIME,
        )

    def poll_following_activity(
        self, user_id: str, interval: float = ACTIVITY_REFETCH_INTERVAL
    ) -> AsyncIterator[List[ActivityItem]]:
        return self.cache.poll(
            ("activity", "following", user_id),
            lambda: self.activity_service.get_following_activity(user_id),
            interval,
            ACTIVITY_STALE_TIME,
        )

    def poll_unread_count(
        self, user_id: str, interval: float = UNREAD_REFETCH_INTERVAL
    ) -> AsyncIterator[int]:
        return self.cache.poll(
            ("activity", "unread", user_id),
            lambda: self.activity_service.get_unread_count(user_id),
            interval,
            UNREAD_STALE_TIME,
        )
