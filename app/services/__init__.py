# app/services/__init__.py

from .tmdb_service import TMDBService
from .profile_service import ProfileService
from .rating_service import RatingService
from .watchlist_service import WatchlistService
from .watchlists_service import WatchlistsService
from .follow_service import FollowService
from .activity_service import ActivityService
from .google_oauth_service import GoogleOAuthService
from .query_service import QueryService

__all__ = [
    "TMDBService",
    "ProfileService",
    "RatingService",
    "WatchlistService",
    "WatchlistsService",
    "FollowService",
    "ActivityService",
    "GoogleOAuthService",
    "QueryService",
]
