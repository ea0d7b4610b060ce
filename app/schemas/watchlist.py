# app/schemas/watchlist.py

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from app.schemas.profile import ProfileSummary


class WatchlistMovie(BaseModel):
    id: str = Field(description="왓치리스트 항목 ID")
    user_id: str = Field(description="사용자 ID")
    movie_id: int = Field(description="영화 ID")
    tmdb_id: int = Field(description="TMDB 영화 ID")
    title: str = Field(description="영화 제목")
    poster_path: Optional[str] = Field(default=None, description="포스터 경로")
    rating: Optional[float] = Field(default=None, description="추가 시점 평점 (재평가 시 동기화)")
    watched: bool = Field(default=False, description="시청 여부")
    added_at: Optional[datetime] = Field(default=None, description="추가일시")

    class Config:
        from_attributes = True


class AddToWatchlistPayload(BaseModel):
    """왓치리스트 추가 요청 - 평점은 저장된 평점에서 복사"""

    tmdb_id: int = Field(description="TMDB 영화 ID")
    title: Optional[str] = Field(default=None, description="영화 제목 (없으면 TMDB 조회)")
    poster_path: Optional[str] = Field(default=None, description="포스터 경로")


class UpdateWatchlistMoviePayload(BaseModel):
    rating: Optional[float] = Field(default=None, ge=0, le=10, description="평점")
    watched: Optional[bool] = Field(default=None, description="시청 여부")


class VisibleWatchlist(BaseModel):
    """프로필에 노출되는 왓치리스트 (비로그인 시 절반, 평점 제거)"""

    items: List[WatchlistMovie] = Field(description="노출 항목")
    total: int = Field(description="전체 항목 수")
    hidden_count: int = Field(description="숨겨진 항목 수")
    is_limited: bool = Field(description="제한된 보기 여부")


class RecentMovie(BaseModel):
    movie_id: int = Field(description="TMDB 영화 ID")
    rating_value: float = Field(description="평점")
    created_at: Optional[datetime] = Field(default=None, description="평가일시")


class WatchlistItem(BaseModel):
    """커뮤니티 왓치리스트 순위 항목"""

    id: str = Field(description="왓치리스트 소유자 ID")
    owner: ProfileSummary = Field(description="소유자 정보")
    total_ratings: int = Field(description="평가한 영화 수")
    like_count: int = Field(description="좋아요 수")
    is_liked_by_current_user: bool = Field(description="현재 사용자 좋아요 여부")
    is_own: bool = Field(default=False, description="현재 사용자 본인 여부")
    recent_movies: List[RecentMovie] = Field(description="최근 평가한 영화 (최대 4개)")


class WatchlistLike(BaseModel):
    user_id: str = Field(description="좋아요 누른 사용자 ID")
    watchlist_owner_id: str = Field(description="왓치리스트 소유자 ID")
    created_at: Optional[datetime] = Field(default=None, description="좋아요 일시")

    class Config:
        from_attributes = True


class WatchlistLikeRequest(BaseModel):
    watchlist_owner_id: str = Field(description="좋아요할 왓치리스트 소유자 ID")
