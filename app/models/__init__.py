# app/models/__init__.py

from .profile import ProfileModel
from .rating import RatingModel
from .watchlist_movie import WatchlistMovieModel
from .follow import FollowModel
from .watchlist_like import WatchlistLikeModel


__all__ = [
    "ProfileModel",
    "RatingModel",
    "WatchlistMovieModel",
    "FollowModel",
    "WatchlistLikeModel",
]
