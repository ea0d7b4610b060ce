# app/schemas/__init__.py

from .movie import Genre, MovieSummary, MovieDetails, MoviePage, MovieRef
from .profile import (
    Profile,
    ProfileSummary,
    UpdateProfilePayload,
    UpdatePreferencesPayload,
    ProfileStats,
    UsernameCheck,
)
from .rating import (
    Rating,
    RateMoviePayload,
    RatingWithAuthor,
    MovieRatingSummary,
    VisibleRating,
    VisibleRatingList,
)
from .watchlist import (
    WatchlistMovie,
    AddToWatchlistPayload,
    UpdateWatchlistMoviePayload,
    VisibleWatchlist,
    RecentMovie,
    WatchlistItem,
    WatchlistLike,
    WatchlistLikeRequest,
)
from .follow import Follow, FollowRequest, FollowStats
from .activity import ActivityItem, UnreadCount
from .auth import TokenResponse

__all__ = [
    "Genre",
    "MovieSummary",
    "MovieDetails",
    "MoviePage",
    "MovieRef",
    "Profile",
    "ProfileSummary",
    "UpdateProfilePayload",
    "UpdatePreferencesPayload",
    "ProfileStats",
    "UsernameCheck",
    "Rating",
    "RateMoviePayload",
    "RatingWithAuthor",
    "MovieRatingSummary",
    "VisibleRating",
    "VisibleRatingList",
    "WatchlistMovie",
    "AddToWatchlistPayload",
    "UpdateWatchlistMoviePayload",
    "VisibleWatchlist",
    "RecentMovie",
    "WatchlistItem",
    "WatchlistLike",
    "WatchlistLikeRequest",
    "Follow",
    "FollowRequest",
    "FollowStats",
    "ActivityItem",
    "UnreadCount",
    "TokenResponse",
]
