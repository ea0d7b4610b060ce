# app/services/activity_service.py

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from app.models.rating import RatingModel
from app.models.profile import ProfileModel
from app.schemas.activity import ActivityItem
from app.schemas.profile import ProfileSummary
from app.schemas.rating import Rating
from app.services.follow_service import FollowService
from app.services.tmdb_service import TMDBService
from app.core.config import get_settings
from app.core.exceptions import StoreError
from app.core.logging_config import get_logger
from app.database import SessionLocal

logger = get_logger(__name__)


def as_utc(value: datetime) -> datetime:
    """timezone 정보가 없는 타임스탬프는 UTC로 간주"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ActivityService:

    def __init__(
        self,
        follow_service: Optional[FollowService] = None,
        tmdb_service: Optional[TMDBService] = None,
    ):
        self.settings = get_settings()
        self.follow_service = follow_service or FollowService()
        self.tmdb_service = tmdb_service or TMDBService()

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return SessionLocal()

    async def get_following_activity(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[ActivityItem]:
        """팔로우한 사용자들의 최근 평점 (최신순)"""
        if limit is None:
            limit = self.settings.activity_feed_limit

        following_ids = await self.follow_service.get_following_ids(user_id)
        if not following_ids:
            # 팔로우한 사람이 없으면 빈 피드 반환
            return []

        db = self._get_db()
        try:
            stmt = (
                select(RatingModel, ProfileModel)
                .join(ProfileModel, RatingModel.user_id == ProfileModel.id)
                .where(RatingModel.user_id.in_(following_ids))
                .order_by(desc(RatingModel.created_at), RatingModel.id)
                .limit(limit)
            )
            rows = db.execute(stmt).all()
            ratings = [
                (Rating.model_validate(rating), ProfileSummary.model_validate(author))
                for rating, author in rows
            ]

        except SQLAlchemyError as e:
            raise StoreError(f"팔로잉 활동 조회 실패: {str(e)}") from e
        finally:
            db.close()

        if not ratings:
            return []

        # 영화 정보는 항목별로 동시에 조회하고, 실패한 항목만 대체 제목으로 표시
        movies = await self.tmdb_service.resolve_movie_refs([rating.movie_id for rating, _ in ratings])

        return [
            ActivityItem(
                id=rating.id,
                user=author,
                movie=movies[rating.movie_id],
                rating=rating.rating_value,
                created_at=rating.created_at,
            )
            for rating, author in ratings
        ]

    async def get_unread_count(self, user_id: str, now: Optional[datetime] = None) -> int:
        """
        최근 24시간 내 팔로잉 활동 수.

        읽음 상태는 저장하지 않으며, 최근 활동 최대 50개 중 시간 범위 안에
        있는 항목 수를 센다. 50개보다 적게 조회되어도 그대로 센다.
        """
        now = as_utc(now) if now else datetime.now(timezone.utc)
        threshold = now - timedelta(hours=self.settings.unread_window_hours)

        activities = await self.get_following_activity(user_id, limit=self.settings.unread_sample_size)
        return sum(1 for activity in activities if as_utc(activity.created_at) > threshold)
