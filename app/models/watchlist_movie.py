# app/models/watchlist_movie.py

from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from app.database import Base, new_id, utcnow


class WatchlistMovieModel(Base):
    __tablename__ = "watchlist_movies"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False)
    tmdb_id = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    poster_path = Column(String(255), nullable=True)
    rating = Column(Float, nullable=True)  # ratings.rating_value 의 비정규화 사본
    watched = Column(Boolean, default=False, nullable=False)
    added_at = Column(DateTime, default=utcnow)

    __table_args__ = (UniqueConstraint("user_id", "tmdb_id", name="unique_watchlist_movie"),)

    def __repr__(self):
        return f"<WatchlistMovieModel(user_id={self.user_id}, tmdb_id={self.tmdb_id})>"
