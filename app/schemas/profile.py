# app/schemas/profile.py

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class Profile(BaseModel):
    id: str = Field(description="프로필 ID")
    username: str = Field(description="유저네임")
    email: Optional[str] = Field(default=None, description="이메일")
    avatar_url: Optional[str] = Field(default=None, description="프로필 이미지 URL")
    bio: Optional[str] = Field(default=None, description="자기소개")
    preferences: Optional[List[str]] = Field(default=None, description="선호 장르/분위기 태그")
    created_at: Optional[datetime] = Field(default=None, description="가입일시")

    class Config:
        from_attributes = True


class ProfileSummary(BaseModel):
    """목록/피드에 노출되는 프로필 요약"""

    id: str = Field(description="프로필 ID")
    username: str = Field(description="유저네임")
    avatar_url: Optional[str] = Field(default=None, description="프로필 이미지 URL")

    class Config:
        from_attributes = True


class UpdateProfilePayload(BaseModel):
    """프로필 수정 요청"""

    username: Optional[str] = Field(default=None, min_length=3, max_length=50, description="변경할 유저네임")
    avatar_url: Optional[str] = Field(default=None, description="프로필 이미지 URL")
    bio: Optional[str] = Field(default=None, max_length=500, description="자기소개")


class UpdatePreferencesPayload(BaseModel):
    preferences: List[str] = Field(description="선호 장르/분위기 태그 (순서 유지)")


class ProfileStats(BaseModel):
    movies_rated: int = Field(description="평가한 영화 수")
    avg_rating: str = Field(description="평균 평점 (소수점 한 자리)")
    followers: int = Field(description="팔로워 수")


class UsernameCheck(BaseModel):
    username: str = Field(description="확인한 유저네임 (정규화 후)")
    exists: bool = Field(description="이미 사용 중인지 여부")
    valid: bool = Field(description="형식이 올바른지 여부")
