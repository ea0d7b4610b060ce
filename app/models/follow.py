# app/models/follow.py

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from app.database import Base, new_id, utcnow


class FollowModel(Base):
    __tablename__ = "follows"

    id = Column(String(36), primary_key=True, default=new_id)
    follower_id = Column(
        String(36), ForeignKey("profiles.id"), nullable=False, index=True
    )  # 팔로우하는 사람
    following_id = Column(
        String(36), ForeignKey("profiles.id"), nullable=False, index=True
    )  # 팔로우 당하는 사람
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="unique_follow"),
        CheckConstraint("follower_id <> following_id", name="no_self_follow"),
    )

    def __repr__(self):
        return f"<FollowModel(follower_id={self.follower_id}, following_id={self.following_id})>"
