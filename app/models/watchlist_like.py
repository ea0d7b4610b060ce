# app/models/watchlist_like.py

from sqlalchemy import Column, String, DateTime, ForeignKey
from app.database import Base, utcnow


class WatchlistLikeModel(Base):
    __tablename__ = "watchlist_likes"

    # 복합 기본키로 중복 좋아요 방지
    user_id = Column(String(36), ForeignKey("profiles.id"), primary_key=True)
    watchlist_owner_id = Column(String(36), ForeignKey("profiles.id"), primary_key=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<WatchlistLikeModel(user_id={self.user_id}, owner_id={self.watchlist_owner_id})>"
