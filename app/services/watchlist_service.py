# app/services/watchlist_service.py

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, and_, desc
from sqlalchemy.exc import SQLAlchemyError
from app.models.watchlist_movie import WatchlistMovieModel
from app.models.rating import RatingModel
from app.schemas.watchlist import (
    WatchlistMovie,
    AddToWatchlistPayload,
    UpdateWatchlistMoviePayload,
    VisibleWatchlist,
)
from app.services.rating_service import visible_count
from app.services.tmdb_service import TMDBService
from app.core.exceptions import StoreError, ValidationFailure
from app.core.logging_config import get_logger
from app.database import SessionLocal

logger = get_logger(__name__)


class WatchlistService:

    def __init__(self, tmdb_service: Optional[TMDBService] = None):
        self.tmdb_service = tmdb_service or TMDBService()

    def _get_db(self) -> Session:
        """데이터베이스 세션 생성"""
        return SessionLocal()

    async def get_watchlist(self, user_id: str) -> List[WatchlistMovie]:
        """왓치리스트 조회 (최근 추가순)"""
        db = self._get_db()
        try:
            stmt = (
                select(WatchlistMovieModel)
                .where(WatchlistMovieModel.user_id == user_id)
                .order_by(desc(WatchlistMovieModel.added_at))
            )
            return [WatchlistMovie.model_validate(m) for m in db.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            raise StoreError(f"왓치리스트 조회 실패: {str(e)}") from e
        finally:
            db.close()

    async def get_visible_watchlist(
        self, user_id: str, viewer_authenticated: bool
    ) -> VisibleWatchlist:
        """프로필용 왓치리스트 - 비로그인 사용자는 평점 높은 절반만, 평점 없이"""
        entries = await self.get_watchlist(user_id)
        ranked = sorted(entries, key=lambda m: m.rating if m.rating is not None else -1, reverse=True)
        shown = ranked[: visible_count(len(ranked), viewer_authenticated)]

        if not viewer_authenticated:
            shown = [entry.model_copy(update={"rating": None}) for entry in shown]

        return VisibleWatchlist(
            items=shown,
            total=len(ranked),
            hidden_count=len(ranked) - len(shown),
            is_limited=not viewer_authenticated,
        )

    async def add_to_watchlist(self, user_id: str, payload: AddToWatchlistPayload) -> WatchlistMovie:
        """왓치리스트 추가 - 먼저 평가한 영화만 추가 가능"""
        title = payload.title
        poster_path = payload.poster_path

        db = self._get_db()
        try:
            rating_stmt = select(RatingModel).where(
                and_(RatingModel.user_id == user_id, RatingModel.movie_id == payload.tmdb_id)
            )
            rating = db.execute(rating_stmt).scalar_one_or_none()
            if not rating:
                raise ValidationFailure("왓치리스트에 추가하려면 먼저 영화를 평가해 주세요")

            if self._find_entry(user_id, payload.tmdb_id, db):
                raise ValidationFailure("이미 왓치리스트에 있는 영화입니다")

            if not title:
                movie = await self.tmdb_service.resolve_movie_ref(payload.tmdb_id)
                title = movie.title
                poster_path = poster_path or movie.poster_path

            entry = WatchlistMovieModel(
                user_id=user_id,
                movie_id=payload.tmdb_id,
                tmdb_id=payload.tmdb_id,
                title=title,
                poster_path=poster_path,
                rating=rating.rating_value,
                watched=False,
            )
            db.add(entry)
            db.commit()
            db.refresh(entry)

            logger.info("watchlist_added", user_id=user_id, tmdb_id=payload.tmdb_id)
            return WatchlistMovie.model_validate(entry)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"왓치리스트 추가 실패: {str(e)}") from e
        finally:
            db.close()

    async def remove_from_watchlist(self, watchlist_id: str, user_id: str) -> Optional[WatchlistMovie]:
        db = self._get_db()
        try:
            entry = self._get_owned_entry(watchlist_id, user_id, db)
            if not entry:
                return None

            removed = WatchlistMovie.model_validate(entry)
            db.delete(entry)
            db.commit()
            return removed

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"왓치리스트 삭제 실패: {str(e)}") from e
        finally:
            db.close()

    async def update_watchlist_movie(
        self, watchlist_id: str, user_id: str, payload: UpdateWatchlistMoviePayload
    ) -> Optional[WatchlistMovie]:
        db = self._get_db()
        try:
            entry = self._get_owned_entry(watchlist_id, user_id, db)
            if not entry:
                return None

            for field, value in payload.model_dump(exclude_unset=True).items():
                setattr(entry, field, value)

            db.commit()
            db.refresh(entry)
            return WatchlistMovie.model_validate(entry)

        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"왓치리스트 수정 실패: {str(e)}") from e
        finally:
            db.close()

    async def is_in_watchlist(self, user_id: str, tmdb_id: int) -> bool:
        db = self._get_db()
        try:
            return self._find_entry(user_id, tmdb_id, db) is not None
        except SQLAlchemyError as e:
            raise StoreError(f"왓치리스트 확인 실패: {str(e)}") from e
        finally:
            db.close()

    def _find_entry(self, user_id: str, tmdb_id: int, db: Session) -> Optional[WatchlistMovieModel]:
        stmt = select(WatchlistMovieModel).where(
            and_(WatchlistMovieModel.user_id == user_id, WatchlistMovieModel.tmdb_id == tmdb_id)
        )
        return db.execute(stmt).scalar_one_or_none()

    def _get_owned_entry(
        self, watchlist_id: str, user_id: str, db: Session
    ) -> Optional[WatchlistMovieModel]:
        entry = db.get(WatchlistMovieModel, watchlist_id)
        if entry and entry.user_id != user_id:
            raise ValidationFailure("본인의 왓치리스트만 수정할 수 있습니다")
        return entry
