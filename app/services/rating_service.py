# app/services/rating_service.py

import math
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, update, delete, and_, desc
from sqlalchemy.exc import SQLAlchemyError
from app.models.rating import RatingModel
from app.models.profile import ProfileModel
from app.models.watchlist_movie import WatchlistMovieModel
from app.schemas.rating import (
    Rating,
    RateMoviePayload,
    RatingWithAuthor,
    MovieRatingSummary,
    VisibleRating,
    VisibleRatingList,
)
from app.services.tmdb_service import TMDBService
from app.core.exceptions import StoreError, ValidationFailure
from app.core.logging_config import get_logger
from app.database import SessionLocal

logger = get_logger(__name__)


def visible_count(total: int, viewer_authenticated: bool) -> int:
    """비로그인 사용자에게는 절반(올림)만 노출"""
    if viewer_authenticated:
        return total
    return math.ceil(total / 2)


class RatingService:

    def __init__(self, tmdb_service: Optional[TMDBService] = None):
        self.tmdb_service = tmdb_service or TMDBService()

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return SessionLocal()

    async def get_user_rating(self, user_id: str, movie_id: int) -> Optional[Rating]:
        """사용자의 특정 영화 평점 (없으면 None)"""
        db = self._get_db()
        try:
            rating = self._find_rating(user_id, movie_id, db)
            return Rating.model_validate(rating) if rating else None

        except SQLAlchemyError as e:
            raise StoreError(f"평점 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def rate_movie(self, user_id: str, payload: RateMoviePayload) -> Rating:
        """평점 등록 또는 수정 - 왓치리스트의 비정규화 평점도 같은 트랜잭션에서 동기화"""
        db = self._get_db()
        try:
            rating = self._find_rating(user_id, payload.movie_id, db)

            if rating:
                rating.rating_value = payload.rating_value
            else:
                rating = RatingModel(
                    user_id=user_id,
                    movie_id=payload.movie_id,
                    rating_value=payload.rating_value,
                )
                db.add(rating)

            db.execute(
                update(WatchlistMovieModel)
                .where(
                    and_(
                        WatchlistMovieModel.user_id == user_id,
                        WatchlistMovieModel.tmdb_id == payload.movie_id,
                    )
                )
                .values(rating=payload.rating_value)
            )

            db.commit()
            db.refresh(rating)

            logger.info(
                "rating_upserted",
                user_id=user_id,
                movie_id=payload.movie_id,
                rating_value=payload.rating_value,
            )
            return Rating.model_validate(rating)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"평점 저장 실패: {str(e)}") from e
        finally:
            db.close()

    async def delete_rating(self, rating_id: str, user_id: str) -> Optional[Rating]:
        """평점 삭제 - 같은 영화의 왓치리스트 항목도 함께 삭제 (없으면 무시)"""
        db = self._get_db()
        try:
            rating = db.get(RatingModel, rating_id)
            if not rating:
                return None

            if rating.user_id != user_id:
                raise ValidationFailure("본인의 평점만 삭제할 수 있습니다")

            deleted = Rating.model_validate(rating)

            db.execute(
                delete(WatchlistMovieModel).where(
                    and_(
                        WatchlistMovieModel.user_id == rating.user_id,
                        WatchlistMovieModel.tmdb_id == rating.movie_id,
                    )
                )
            )
            db.delete(rating)
            db.commit()

            logger.info("rating_deleted", user_id=user_id, movie_id=deleted.movie_id)
            return deleted

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"평점 삭제 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_movie_ratings(self, movie_id: int) -> List[Rating]:
        db = self._get_db()
        try:
            stmt = (
                select(RatingModel)
                .where(RatingModel.movie_id == movie_id)
                .order_by(desc(RatingModel.created_at))
            )
            return [Rating.model_validate(r) for r in db.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            raise StoreError(f"영화 평점 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_movie_rating_summary(self, movie_id: int) -> MovieRatingSummary:
        """영화 전체 평균 평점"""
        ratings = await self.get_movie_ratings(movie_id)
        total = len(ratings)
        average = sum(r.rating_value for r in ratings) / total if total else None
        return MovieRatingSummary(movie_id=movie_id, global_average=average, total_ratings=total)

    async def get_recent_ratings(self, movie_id: int, limit: int = 5) -> List[RatingWithAuthor]:
        """영화의 최근 평점 (작성자 유저네임 포함)"""
        db = self._get_db()
        try:
            stmt = (
                select(RatingModel, ProfileModel.username, ProfileModel.avatar_url)
                .join(ProfileModel, RatingModel.user_id == ProfileModel.id)
                .where(RatingModel.movie_id == movie_id)
                .order_by(desc(RatingModel.created_at))
                .limit(limit)
            )
            rows = db.execute(stmt).all()

            return [
                RatingWithAuthor(
                    **Rating.model_validate(rating).model_dump(),
                    username=username,
                    avatar_url=avatar_url,
                )
                for rating, username, avatar_url in rows
            ]

        except SQLAlchemyError as e:
            raise StoreError(f"최근 평점 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_user_ratings(self, user_id: str) -> List[Rating]:
        db = self._get_db()
        try:
            stmt = (
                select(RatingModel)
                .where(RatingModel.user_id == user_id)
                .order_by(desc(RatingModel.created_at))
            )
            return [Rating.model_validate(r) for r in db.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            raise StoreError(f"사용자 평점 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def list_all_ratings(self) -> List[Rating]:
        """전체 평점 (최신순)"""
        db = self._get_db()
        try:
            stmt = select(RatingModel).order_by(desc(RatingModel.created_at), RatingModel.id)
            return [Rating.model_validate(r) for r in db.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            raise StoreError(f"전체 평점 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_visible_ratings(
        self, user_id: str, viewer_authenticated: bool
    ) -> VisibleRatingList:
        """
        프로필 평점 목록 (평점 높은 순).

        비로그인 사용자는 상위 절반(올림)만 받고, 평점 수치와 작성일은 제거된다.
        잘라내기는 여기서 수행되므로 숨겨진 항목은 응답에 포함되지 않는다.
        """
        ratings = await self.get_user_ratings(user_id)

        # 최신순 목록을 안정 정렬하므로 같은 평점이면 최신 항목이 앞선다
        ranked = sorted(ratings, key=lambda r: r.rating_value, reverse=True)
        shown = ranked[: visible_count(len(ranked), viewer_authenticated)]

        movies = await self.tmdb_service.resolve_movie_refs([r.movie_id for r in shown])

        items = [
            VisibleRating(
                id=rating.id,
                movie=movies[rating.movie_id],
                rating_value=rating.rating_value if viewer_authenticated else None,
                created_at=rating.created_at if viewer_authenticated else None,
            )
            for rating in shown
        ]

        return VisibleRatingList(
            items=items,
            total=len(ranked),
            hidden_count=len(ranked) - len(shown),
            is_limited=not viewer_authenticated,
        )

    def _find_rating(self, user_id: str, movie_id: int, db: Session) -> Optional[RatingModel]:
        stmt = select(RatingModel).where(
            and_(RatingModel.user_id == user_id, RatingModel.movie_id == movie_id)
        )
        return db.execute(stmt).scalar_one_or_none()
