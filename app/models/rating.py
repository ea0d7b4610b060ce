# app/models/rating.py

from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, UniqueConstraint
from app.database import Base, new_id, utcnow


class RatingModel(Base):
    __tablename__ = "ratings"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False, index=True)  # TMDB 영화 ID
    rating_value = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # 사용자당 영화 하나에 평점 하나
    __table_args__ = (UniqueConstraint("user_id", "movie_id", name="unique_user_rating"),)

    def __repr__(self):
        return f"<RatingModel(user_id={self.user_id}, movie_id={self.movie_id}, value={self.rating_value})>"
