from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy import extract, func, or_, select
from sqlalchemy.orm import Session

from app.core.errors import InvalidQuery, UserNotFound
from app.crud.user import get_active_user
from app.db.session import get_session
from app.models.book import Book
from app.models.review import Review
from app.models.user import User
from app.schemas.book import BookOut
from app.schemas.common import UserBrief
from app.schemas.stats import GenreAffinity, LeaderboardEntry, MonthlyActivity, UserStats
from app.services.book_service import BookService
from app.services.rating_service import active_review_filter, round_rating
from app.services.review_service import ReviewService

logger = logging.getLogger(__name__)

LEADERBOARD_LIMIT = 10
SEARCH_LIMIT = 10
MIN_SEARCH_LENGTH = 2
FAVORITE_GENRES_LIMIT = 5
PROFILE_ITEMS_LIMIT = 6


@dataclass
class PublicProfileResult:
    user: User
    books: list[BookOut]
    reviews: list[Review]
    books_count: int
    reviews_count: int


class StatsService:
    """Read-only aggregation over books and reviews, per user or platform-wide."""

    def __init__(self, db: Session):
        self.db = db

    def _get_active_user(self, user_id: str) -> User:
        user = get_active_user(user_id, self.db)
        if user is None:
            logger.warning("User not found: %s", user_id)
            raise UserNotFound()
        return user

    def _count_books(self, owner_id: str) -> int:
        stmt = select(func.count(Book.id)).where(Book.added_by == owner_id, Book.is_active.is_(True))
        return self.db.execute(stmt).scalar_one()

    def _count_reviews(self, author_id: str) -> int:
        stmt = (
            select(func.count(Review.id))
            .join(Book, Book.id == Review.book_id)
            .where(Review.user_id == author_id, *active_review_filter())
        )
        return self.db.execute(stmt).scalar_one()

    def user_stats(self, user_id: str) -> UserStats:
        authored = (Review.user_id == user_id, *active_review_filter())

        given = self.db.execute(
            select(func.avg(Review.rating)).join(Book, Book.id == Review.book_id).where(*authored)
        ).scalar_one()
        received = self.db.execute(
            select(func.avg(Review.rating))
            .join(Book, Book.id == Review.book_id)
            .where(Book.added_by == user_id, *active_review_filter())
        ).scalar_one()

        year = extract("year", Review.created_at)
        month = extract("month", Review.created_at)
        activity_rows = self.db.execute(
            select(year.label("year"), month.label("month"), func.count(Review.id))
            .join(Book, Book.id == Review.book_id)
            .where(*authored)
            .group_by(year, month)
            .order_by(year, month)
        ).all()

        mean_rating = func.avg(Review.rating)
        genre_rows = self.db.execute(
            select(Book.genre, mean_rating, func.count(Review.id))
            .join(Book, Book.id == Review.book_id)
            .where(*authored)
            .group_by(Book.genre)
            .order_by(mean_rating.desc(), func.count(Review.id).desc(), Book.genre)
            .limit(FAVORITE_GENRES_LIMIT)
        ).all()

        return UserStats(
            books_added=self._count_books(user_id),
            reviews_written=self._count_reviews(user_id),
            average_rating_given=round_rating(given),
            average_rating_received=round_rating(received),
            reading_activity=[
                MonthlyActivity(year=int(y), month=int(m), count=count)
                for y, m, count in activity_rows
            ],
            favorite_genres=[
                GenreAffinity(genre=genre, average_rating=round_rating(avg), count=count)
                for genre, avg, count in genre_rows
            ],
        )

    def leaderboard(self, board_type: str = "books", limit: int = LEADERBOARD_LIMIT) -> list[LeaderboardEntry]:
        """Top contributors by active books added or active reviews written."""
        if board_type == "reviews":
            count = func.count(Review.id).label("count")
            stmt = (
                select(User, count)
                .join(Review, Review.user_id == User.id)
                .join(Book, Book.id == Review.book_id)
                .where(*active_review_filter())
            )
        else:
            count = func.count(Book.id).label("count")
            stmt = select(User, count).join(Book, Book.added_by == User.id).where(Book.is_active.is_(True))

        stmt = (
            stmt.where(User.is_active.is_(True))
            .group_by(User.id)
            .order_by(count.desc(), User.name.asc())
            .limit(limit)
        )
        return [
            LeaderboardEntry(user=UserBrief.model_validate(user), count=total)
            for user, total in self.db.execute(stmt).all()
        ]

    def search_users(self, query: str, limit: int = SEARCH_LIMIT) -> list[User]:
        term = (query or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise InvalidQuery(f"Search query must be at least {MIN_SEARCH_LENGTH} characters.")

        pattern = f"%{term}%"
        stmt = (
            select(User)
            .where(
                User.is_active.is_(True),
                or_(User.name.ilike(pattern), User.bio.ilike(pattern)),
            )
            .order_by(User.name.asc(), User.id.asc())
            .limit(limit)
        )
        users = list(self.db.execute(stmt).scalars().all())
        logger.info("User search for %r matched %d users", term, len(users))
        return users

    def public_profile(self, user_id: str) -> PublicProfileResult:
        user = self._get_active_user(user_id)
        books = BookService(self.db).books_by_owner(user.id, limit=PROFILE_ITEMS_LIMIT)
        reviews = ReviewService(self.db).list_reviews_by_user(user.id, limit=PROFILE_ITEMS_LIMIT)
        return PublicProfileResult(
            user=user,
            books=books,
            reviews=reviews.reviews,
            books_count=self._count_books(user.id),
            reviews_count=reviews.total_reviews,
        )


def get_stats_service(db: Session = Depends(get_session)) -> StatsService:
    return StatsService(db)
