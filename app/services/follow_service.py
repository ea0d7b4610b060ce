# app/services/follow_service.py

from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select, func, and_, desc
from sqlalchemy.exc import SQLAlchemyError
from app.models.follow import FollowModel
from app.models.profile import ProfileModel
from app.schemas.follow import Follow, FollowStats
from app.schemas.profile import ProfileSummary
from app.core.exceptions import StoreError, ValidationFailure
from app.core.logging_config import get_logger
from app.database import SessionLocal

logger = get_logger(__name__)


class FollowService:

    def __init__(self):
        pass

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return SessionLocal()

    async def follow_user(self, follower_id: str, following_id: str) -> Follow:
        """사용자 팔로우"""
        # 자기 자신 팔로우 방지
        if follower_id == following_id:
            raise ValidationFailure("자기 자신을 팔로우할 수 없습니다")

        db = self._get_db()
        try:
            # 팔로우할 사용자 존재 확인
            if db.get(ProfileModel, following_id) is None:
                raise ValidationFailure("팔로우할 사용자를 찾을 수 없습니다")

            # 이미 팔로우 중인지 확인
            if self._is_following_with_db(follower_id, following_id, db):
                raise ValidationFailure("이미 팔로우 중인 사용자입니다")

            new_follow = FollowModel(follower_id=follower_id, following_id=following_id)
            db.add(new_follow)
            db.commit()
            db.refresh(new_follow)

            logger.info("user_followed", follower_id=follower_id, following_id=following_id)
            return Follow.model_validate(new_follow)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"팔로우 실패: {str(e)}") from e
        finally:
            db.close()

    async def unfollow_user(self, follower_id: str, following_id: str) -> bool:
        """사용자 언팔로우 (관계가 없으면 False)"""
        db = self._get_db()
        try:
            stmt = select(FollowModel).where(
                and_(
                    FollowModel.follower_id == follower_id,
                    FollowModel.following_id == following_id,
                )
            )
            follow = db.execute(stmt).scalar_one_or_none()
            if not follow:
                return False

            db.delete(follow)
            db.commit()
            return True

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"언팔로우 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_followers(self, user_id: str) -> List[ProfileSummary]:
        """팔로워 목록 조회"""
        db = self._get_db()
        try:
            stmt = (
                select(ProfileModel)
                .join(FollowModel, ProfileModel.id == FollowModel.follower_id)
                .where(FollowModel.following_id == user_id)
                .order_by(desc(FollowModel.created_at))
            )
            return [ProfileSummary.model_validate(p) for p in db.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            raise StoreError(f"팔로워 목록 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_following(self, user_id: str) -> List[ProfileSummary]:
        """팔로잉 목록 조회"""
        db = self._get_db()
        try:
            stmt = (
                select(ProfileModel)
                .join(FollowModel, ProfileModel.id == FollowModel.following_id)
                .where(FollowModel.follower_id == user_id)
                .order_by(desc(FollowModel.created_at))
            )
            return [ProfileSummary.model_validate(p) for p in db.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            raise StoreError(f"팔로잉 목록 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_following_ids(self, user_id: str) -> List[str]:
        db = self._get_db()
        try:
            stmt = select(FollowModel.following_id).where(FollowModel.follower_id == user_id)
            return [row[0] for row in db.execute(stmt).all()]

        except SQLAlchemyError as e:
            raise StoreError(f"팔로잉 ID 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def is_following(self, follower_id: str, following_id: str) -> bool:
        """팔로우 관계 확인"""
        db = self._get_db()
        try:
            return self._is_following_with_db(follower_id, following_id, db)
        except SQLAlchemyError as e:
            raise StoreError(f"팔로우 관계 확인 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_follower_count(self, user_id: str) -> int:
        db = self._get_db()
        try:
            stmt = select(func.count(FollowModel.id)).where(FollowModel.following_id == user_id)
            return db.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            raise StoreError(f"팔로워 수 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_following_count(self, user_id: str) -> int:
        db = self._get_db()
        try:
            stmt = select(func.count(FollowModel.id)).where(FollowModel.follower_id == user_id)
            return db.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            raise StoreError(f"팔로잉 수 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_follow_stats(self, user_id: str) -> FollowStats:
        """사용자의 팔로우 통계"""
        return FollowStats(
            user_id=user_id,
            followers_count=await self.get_follower_count(user_id),
            following_count=await self.get_following_count(user_id),
        )

    def _is_following_with_db(self, follower_id: str, following_id: str, db: Session) -> bool:
        stmt = select(FollowModel.id).where(
            and_(
                FollowModel.follower_id == follower_id,
                FollowModel.following_id == following_id,
            )
        )
        return db.execute(stmt).first() is not None
