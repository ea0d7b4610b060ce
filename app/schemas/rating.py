# app/schemas/rating.py

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from app.schemas.movie import MovieRef


class Rating(BaseModel):
    id: str = Field(description="평점 ID")
    user_id: str = Field(description="작성자 ID")
    movie_id: int = Field(description="TMDB 영화 ID")
    rating_value: float = Field(description="평점", ge=0, le=10)
    created_at: Optional[datetime] = Field(default=None, description="작성일시")

    class Config:
        from_attributes = True


class RateMoviePayload(BaseModel):
    movie_id: int = Field(description="TMDB 영화 ID")
    rating_value: float = Field(description="평점 (0~10, 소수 허용)", ge=0, le=10)


class RatingWithAuthor(Rating):
    """작성자 유저네임이 포함된 평점 (최근 평점 목록용)"""

    username: Optional[str] = Field(default=None, description="작성자 유저네임")
    avatar_url: Optional[str] = Field(default=None, description="작성자 프로필 이미지")


class MovieRatingSummary(BaseModel):
    movie_id: int = Field(description="TMDB 영화 ID")
    global_average: Optional[float] = Field(default=None, description="전체 평균 평점")
    total_ratings: int = Field(description="전체 평점 수")


class VisibleRating(BaseModel):
    """공개 범위가 적용된 평점 항목 (비로그인 시 수치/날짜 제거)"""

    id: str = Field(description="평점 ID")
    movie: MovieRef = Field(description="영화 정보")
    rating_value: Optional[float] = Field(default=None, description="평점 (비로그인 시 None)")
    created_at: Optional[datetime] = Field(default=None, description="작성일시 (비로그인 시 None)")


class VisibleRatingList(BaseModel):
    items: List[VisibleRating] = Field(description="노출되는 평점 목록 (평점 높은 순)")
    total: int = Field(description="전체 평점 수")
    hidden_count: int = Field(description="숨겨진 평점 수")
    is_limited: bool = Field(description="제한된 보기 여부")
