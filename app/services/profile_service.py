# app/services/profile_service.py

import re
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from app.models.profile import ProfileModel
from app.models.rating import RatingModel
from app.models.follow import FollowModel
from app.schemas.profile import (
    Profile,
    ProfileSummary,
    ProfileStats,
    UpdateProfilePayload,
    UsernameCheck,
)
from app.core.exceptions import StoreError, ValidationFailure
from app.core.logging_config import get_logger
from app.database import SessionLocal

logger = get_logger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
_USERNAME_INVALID_CHARS = re.compile(r"[^a-z0-9_]")


def normalize_username(value: str) -> str:
    """유저네임 정규화 - 소문자, 영문/숫자/밑줄만 허용"""
    return _USERNAME_INVALID_CHARS.sub("", (value or "").lower())[:USERNAME_MAX_LENGTH]


def is_valid_username(value: str) -> bool:
    return len(value) >= USERNAME_MIN_LENGTH


class ProfileService:

    def __init__(self):
        pass

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return SessionLocal()

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        db = self._get_db()
        try:
            profile = db.get(ProfileModel, user_id)
            return Profile.model_validate(profile) if profile else None

        except SQLAlchemyError as e:
            raise StoreError(f"프로필 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_profile_by_username(self, username: str) -> Optional[Profile]:
        db = self._get_db()
        try:
            stmt = select(ProfileModel).where(ProfileModel.username == username)
            profile = db.execute(stmt).scalar_one_or_none()
            return Profile.model_validate(profile) if profile else None

        except SQLAlchemyError as e:
            raise StoreError(f"프로필 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def list_profiles(self) -> List[ProfileSummary]:
        """전체 프로필 (유저네임 순)"""
        db = self._get_db()
        try:
            stmt = select(ProfileModel).order_by(ProfileModel.username)
            profiles = db.execute(stmt).scalars().all()
            return [ProfileSummary.model_validate(p) for p in profiles]

        except SQLAlchemyError as e:
            raise StoreError(f"프로필 목록 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def check_username_exists(self, username: str) -> bool:
        db = self._get_db()
        try:
            return self._username_taken(username, db)
        except SQLAlchemyError as e:
            raise StoreError(f"유저네임 확인 실패: {str(e)}") from e
        finally:
            db.close()

    async def check_username(self, raw_username: str) -> UsernameCheck:
        """입력값을 정규화한 뒤 사용 가능 여부 확인 (짧은 값은 조회하지 않음)"""
        username = normalize_username(raw_username)
        if not is_valid_username(username):
            return UsernameCheck(username=username, exists=False, valid=False)

        exists = await self.check_username_exists(username)
        return UsernameCheck(username=username, exists=exists, valid=True)

    async def update_profile(self, user_id: str, payload: UpdateProfilePayload) -> Optional[Profile]:
        db = self._get_db()
        try:
            profile = db.get(ProfileModel, user_id)
            if not profile:
                return None

            updates = payload.model_dump(exclude_unset=True)

            if "username" in updates:
                username = normalize_username(updates["username"])
                if not is_valid_username(username):
                    raise ValidationFailure("유저네임은 3자 이상의 영문 소문자, 숫자, 밑줄만 가능합니다")
                if username != profile.username and self._username_taken(username, db):
                    raise ValidationFailure("이미 사용 중인 유저네임입니다")
                updates["username"] = username

            for field, value in updates.items():
                setattr(profile, field, value)

            db.commit()
            db.refresh(profile)
            logger.info("profile_updated", user_id=user_id, fields=sorted(updates))
            return Profile.model_validate(profile)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"프로필 수정 실패: {str(e)}") from e
        finally:
            db.close()

    async def update_preferences(self, user_id: str, preferences: List[str]) -> Optional[Profile]:
        db = self._get_db()
        try:
            profile = db.get(ProfileModel, user_id)
            if not profile:
                return None

            # 중복 제거, 선택 순서 유지
            profile.preferences = list(dict.fromkeys(preferences))
            db.commit()
            db.refresh(profile)
            return Profile.model_validate(profile)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"선호 태그 수정 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_profile_stats(self, user_id: str) -> ProfileStats:
        """평가한 영화 수, 평균 평점, 팔로워 수"""
        db = self._get_db()
        try:
            stmt = select(func.count(RatingModel.id), func.avg(RatingModel.rating_value)).where(
                RatingModel.user_id == user_id
            )
            movies_rated, avg_rating = db.execute(stmt).one()

            followers_stmt = select(func.count(FollowModel.id)).where(
                FollowModel.following_id == user_id
            )
            followers = db.execute(followers_stmt).scalar() or 0

            return ProfileStats(
                movies_rated=movies_rated or 0,
                avg_rating=f"{avg_rating:.1f}" if movies_rated else "0.0",
                followers=followers,
            )

        except SQLAlchemyError as e:
            raise StoreError(f"프로필 통계 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_or_create_from_oauth(
        self,
        google_id: str,
        email: Optional[str],
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> tuple[Profile, bool]:
        """OAuth 로그인 시 프로필 조회, 없으면 최초 로그인으로 보고 생성"""
        db = self._get_db()
        try:
            stmt = select(ProfileModel).where(ProfileModel.google_id == google_id)
            profile = db.execute(stmt).scalar_one_or_none()
            if profile:
                return Profile.model_validate(profile), False

            seed = (email or "").split("@")[0] or name or "user"
            profile = ProfileModel(
                google_id=google_id,
                username=self._unique_username(seed, db),
                email=email,
                avatar_url=avatar_url,
                preferences=[],
            )
            db.add(profile)
            db.commit()
            db.refresh(profile)

            logger.info("profile_created", user_id=profile.id, username=profile.username)
            return Profile.model_validate(profile), True

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"프로필 생성 실패: {str(e)}") from e
        finally:
            db.close()

    def _username_taken(self, username: str, db: Session) -> bool:
        stmt = select(ProfileModel.id).where(ProfileModel.username == username)
        return db.execute(stmt).first() is not None

    def _unique_username(self, seed: str, db: Session) -> str:
        base = normalize_username(seed)
        if not is_valid_username(base):
            base = (base + "user")[:USERNAME_MAX_LENGTH]

        candidate = base
        suffix = 1
        while self._username_taken(candidate, db):
            suffix += 1
            candidate = f"{base[:USERNAME_MAX_LENGTH - len(str(suffix))]}{suffix}"
        return candidate
