# app/schemas/auth.py

from pydantic import BaseModel, Field
from app.schemas.profile import Profile


class TokenResponse(BaseModel):
    access_token: str = Field(description="액세스 토큰")
    token_type: str = Field(default="bearer", description="토큰 타입")
    user: Profile = Field(description="사용자 정보")
    is_new_user: bool = Field(default=False, description="이번 로그인으로 프로필이 생성되었는지 여부")
