# app/api/v1/__init__.py

from fastapi import APIRouter
from . import (
    activity,
    auth,
    follows,
    movies,
    profiles,
    ratings,
    search,
    system,
    watchlist,
    watchlists,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["인증"])
api_router.include_router(movies.router, prefix="/movies", tags=["영화"])
api_router.include_router(search.router, prefix="/search", tags=["검색"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["프로필"])
api_router.include_router(ratings.router, prefix="/ratings", tags=["평점"])
api_router.include_router(watchlist.router, prefix="/watchlist", tags=["왓치리스트"])
api_router.include_router(follows.router, prefix="/follows", tags=["팔로우"])
api_router.include_router(activity.router, prefix="/activity", tags=["활동"])
api_router.include_router(watchlists.router, prefix="/watchlists", tags=["커뮤니티 왓치리스트"])
api_router.include_router(system.router, prefix="/system", tags=["시스템"])
