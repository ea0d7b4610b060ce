# app/services/watchlists_service.py

from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, and_
from sqlalchemy.exc import SQLAlchemyError
from app.models.profile import ProfileModel
from app.models.watchlist_like import WatchlistLikeModel
from app.schemas.rating import Rating
from app.schemas.watchlist import WatchlistItem, WatchlistLike, RecentMovie
from app.services.profile_service import ProfileService
from app.services.rating_service import RatingService
from app.services.activity_service import as_utc
from app.core.exceptions import StoreError, ValidationFailure
from app.core.logging_config import get_logger
from app.database import SessionLocal

logger = get_logger(__name__)

RECENT_MOVIES_LIMIT = 4
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class WatchlistsService:
    """커뮤니티 왓치리스트 순위와 좋아요"""

    def __init__(
        self,
        profile_service: Optional[ProfileService] = None,
        rating_service: Optional[RatingService] = None,
    ):
        self.profile_service = profile_service or ProfileService()
        self.rating_service = rating_service or RatingService()

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return SessionLocal()

    async def get_all_watchlists(self, current_user_id: Optional[str] = None) -> List[WatchlistItem]:
        """
        전체 사용자의 왓치리스트를 좋아요 순으로 정렬해 반환.

        요청마다 전체 프로필/평점/좋아요를 읽어 다시 계산한다. 평점이 없는
        사용자는 제외되고, 좋아요 수가 같으면 평점 수가 많은 쪽이 앞선다.
        """
        profiles = await self.profile_service.list_profiles()
        ratings = await self.rating_service.list_all_ratings()
        likes = await self.list_likes()

        ratings_by_user: Dict[str, List[Rating]] = defaultdict(list)
        for rating in ratings:
            ratings_by_user[rating.user_id].append(rating)

        like_counts = Counter(like.watchlist_owner_id for like in likes)
        liked_by_current_user = {
            like.watchlist_owner_id
            for like in likes
            if current_user_id and like.user_id == current_user_id
        }

        watchlists = []
        for profile in profiles:
            user_ratings = ratings_by_user.get(profile.id)
            if not user_ratings:
                continue

            recent = sorted(
                user_ratings,
                key=lambda r: as_utc(r.created_at) if r.created_at else _OLDEST,
                reverse=True,
            )[:RECENT_MOVIES_LIMIT]

            watchlists.append(
                WatchlistItem(
                    id=profile.id,
                    owner=profile,
                    total_ratings=len(user_ratings),
                    like_count=like_counts.get(profile.id, 0),
                    is_liked_by_current_user=profile.id in liked_by_current_user,
                    is_own=profile.id == current_user_id,
                    recent_movies=[
                        RecentMovie(
                            movie_id=r.movie_id,
                            rating_value=r.rating_value,
                            created_at=r.created_at,
                        )
                        for r in recent
                    ],
                )
            )

        # 프로필은 유저네임 순이고 정렬은 안정적이므로 동점이면 유저네임 순
        watchlists.sort(key=lambda w: (-w.like_count, -w.total_ratings))
        return watchlists

    async def list_likes(self) -> List[WatchlistLike]:
        db = self._get_db()
        try:
            likes = db.execute(select(WatchlistLikeModel)).scalars().all()
            return [WatchlistLike.model_validate(like) for like in likes]

        except SQLAlchemyError as e:
            raise StoreError(f"좋아요 목록 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def like_watchlist(self, user_id: str, watchlist_owner_id: str) -> WatchlistLike:
        """왓치리스트 좋아요"""
        if user_id == watchlist_owner_id:
            raise ValidationFailure("자신의 왓치리스트에는 좋아요를 누를 수 없습니다")

        db = self._get_db()
        try:
            if db.get(ProfileModel, watchlist_owner_id) is None:
                raise ValidationFailure("왓치리스트 소유자를 찾을 수 없습니다")

            if db.get(WatchlistLikeModel, (user_id, watchlist_owner_id)) is not None:
                raise ValidationFailure("이미 좋아요한 왓치리스트입니다")

            like = WatchlistLikeModel(user_id=user_id, watchlist_owner_id=watchlist_owner_id)
            db.add(like)
            db.commit()
            db.refresh(like)

            logger.info("watchlist_liked", user_id=user_id, owner_id=watchlist_owner_id)
            return WatchlistLike.model_validate(like)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"좋아요 실패: {str(e)}") from e
        finally:
            db.close()

    async def unlike_watchlist(self, user_id: str, watchlist_owner_id: str) -> bool:
        """왓치리스트 좋아요 취소 (좋아요가 없으면 False)"""
        db = self._get_db()
        try:
            stmt = select(WatchlistLikeModel).where(
                and_(
                    WatchlistLikeModel.user_id == user_id,
                    WatchlistLikeModel.watchlist_owner_id == watchlist_owner_id,
                )
            )
            like = db.execute(stmt).scalar_one_or_none()
            if not like:
                return False

            db.delete(like)
            db.commit()
            return True

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"좋아요 취소 실패: {str(e)}") from e
        finally:
            db.close()
