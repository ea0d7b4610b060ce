# app/schemas/activity.py

from pydantic import BaseModel, Field
from datetime import datetime
from app.schemas.movie import MovieRef
from app.schemas.profile import ProfileSummary


class ActivityItem(BaseModel):
    """팔로우한 사용자의 평점 활동"""

    id: str = Field(description="평점 ID")
    user: ProfileSummary = Field(description="작성자 정보")
    movie: MovieRef = Field(description="영화 정보")
    rating: float = Field(description="평점")
    created_at: datetime = Field(description="평가일시")


class UnreadCount(BaseModel):
    count: int = Field(description="최근 24시간 내 활동 수")
