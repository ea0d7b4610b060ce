# app/schemas/follow.py

from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime


class Follow(BaseModel):
    id: str = Field(description="팔로우 ID")
    follower_id: str = Field(description="팔로워 ID")
    following_id: str = Field(description="팔로잉 ID")
    created_at: Optional[datetime] = Field(default=None, description="팔로우 시작일")

    class Config:
        from_attributes = True


class FollowRequest(BaseModel):
    following_id: str = Field(description="팔로우할 사용자 ID")


class FollowStats(BaseModel):
    user_id: str = Field(description="사용자 ID")
    followers_count: int = Field(description="팔로워 수")
    following_count: int = Field(description="팔로잉 수")
