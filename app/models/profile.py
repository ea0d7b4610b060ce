# app/models/profile.py

from sqlalchemy import Column, String, Text, DateTime, JSON
from app.database import Base, new_id, utcnow


class ProfileModel(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    google_id = Column(String(255), unique=True, nullable=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    preferences = Column(JSON, nullable=True)  # 장르/분위기 태그 목록
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<ProfileModel(id={self.id}, username='{self.username}')>"
