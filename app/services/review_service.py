from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.errors import BookNotFound, DuplicateReview, ReviewNotFound
from app.db.session import get_session
from app.models.book import Book
from app.models.review import Review, ReviewLike
from app.models.user import User, utcnow
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.security.access import authorize
from app.services.rating_service import RatingSummary, active_review_filter, summarize_book

logger = logging.getLogger(__name__)

RECENT_REVIEWS_LIMIT = 10


@dataclass
class ReviewPage:
    reviews: list[Review]
    total_reviews: int


@dataclass
class LikeState:
    like_count: int
    is_liked: bool


class ReviewService:
    """Review lifecycle, one-review-per-book rule, rating statistics and likes."""

    SORT_COLUMNS = {
        "createdAt": Review.created_at,
        "updatedAt": Review.updated_at,
        "rating": Review.rating,
    }

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _active_reviews(self):
        return (
            select(Review)
            .join(Book, Book.id == Review.book_id)
            .options(
                joinedload(Review.user),
                joinedload(Review.book),
                selectinload(Review.likes),
            )
            .where(*active_review_filter())
        )

    def _count_active(self, *conditions) -> int:
        stmt = (
            select(func.count(Review.id))
            .join(Book, Book.id == Review.book_id)
            .where(*active_review_filter(), *conditions)
        )
        return self.db.execute(stmt).scalar_one()

    def _get_active_review(self, review_id: str) -> Review:
        stmt = self._active_reviews().where(Review.id == review_id)
        review = self.db.execute(stmt).unique().scalar_one_or_none()
        if review is None:
            logger.warning("Review not found: %s", review_id)
            raise ReviewNotFound()
        return review

    def _has_active_review(self, book_id: str, user_id: str) -> bool:
        stmt = select(Review.id).where(
            Review.book_id == book_id,
            Review.user_id == user_id,
            Review.is_active.is_(True),
        )
        return self.db.execute(stmt.limit(1)).first() is not None

    def _like_count(self, review_id: str) -> int:
        stmt = select(func.count()).select_from(ReviewLike).where(ReviewLike.review_id == review_id)
        return self.db.execute(stmt).scalar_one()

    # ------------------------------------------------------------------ #
    # Public interface
    # ------------------------------------------------------------------ #
    def create_review(self, payload: ReviewCreate, author: User) -> Review:
        book = self.db.execute(
            select(Book).where(Book.id == payload.book_id, Book.is_active.is_(True))
        ).scalar_one_or_none()
        if book is None:
            logger.warning("Review creation failed - book not found: %s", payload.book_id)
            raise BookNotFound()

        # Early rejection only; the partial unique index is what guarantees it.
        if self._has_active_review(book.id, author.id):
            logger.warning("User %s already reviewed book %s", author.id, book.id)
            raise DuplicateReview()

        review = Review(
            book_id=book.id,
            user_id=author.id,
            rating=payload.rating,
            review_text=payload.review_text,
            title=payload.title,
            is_active=True,
        )
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Concurrent duplicate review for book %s by user %s", book.id, author.id)
            raise DuplicateReview() from exc

        logger.info("Review %s created for book %s by user %s", review.id, book.id, author.id)
        return self._get_active_review(review.id)

    def list_reviews_for_book(
        self,
        book_id: str,
        *,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> tuple[ReviewPage, RatingSummary]:
        column = self.SORT_COLUMNS[sort_by]
        primary = column.desc() if sort_order == "desc" else column.asc()
        stmt = (
            self._active_reviews()
            .where(Review.book_id == book_id)
            .order_by(primary, Review.created_at.desc(), Review.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        reviews = list(self.db.execute(stmt).unique().scalars().all())
        summary = summarize_book(self.db, book_id)

        logger.info("Fetched %d reviews for book %s", len(reviews), book_id)
        return ReviewPage(reviews=reviews, total_reviews=summary.total_reviews), summary

    def list_reviews_by_user(self, user_id: str, *, page: int = 1, limit: int = 10) -> ReviewPage:
        stmt = (
            self._active_reviews()
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        reviews = list(self.db.execute(stmt).unique().scalars().all())
        total = self._count_active(Review.user_id == user_id)
        return ReviewPage(reviews=reviews, total_reviews=total)

    def reviews_by_author(self, user_id: str) -> list[Review]:
        stmt = (
            self._active_reviews()
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return list(self.db.execute(stmt).unique().scalars().all())

    def recent_reviews(self, limit: int = RECENT_REVIEWS_LIMIT) -> list[Review]:
        stmt = self._active_reviews().order_by(Review.created_at.desc(), Review.id.desc()).limit(limit)
        return list(self.db.execute(stmt).unique().scalars().all())

    def update_review(self, review_id: str, payload: ReviewUpdate, current_user: User) -> Review:
        review = self._get_active_review(review_id)
        authorize(current_user, review.user_id, resource="review")

        content_changed = (
            payload.rating != review.rating or payload.review_text != review.review_text
        )
        review.rating = payload.rating
        review.review_text = payload.review_text
        if "title" in payload.model_fields_set:
            review.title = payload.title
        # Only rating or text edits count as a content edit.
        if content_changed:
            review.edited_at = utcnow()

        self.db.commit()
        logger.info("Review %s updated by user %s", review.id, current_user.id)
        return self._get_active_review(review.id)

    def delete_review(self, review_id: str, current_user: User) -> None:
        review = self._get_active_review(review_id)
        authorize(current_user, review.user_id, resource="review")

        review.is_active = False
        self.db.commit()
        logger.info("Review %s deleted by user %s", review.id, current_user.id)

    def toggle_like(self, review_id: str, current_user: User) -> LikeState:
        """Flip the caller's membership in the review's liker set.

        Removal and insertion are single statements against the
        ``review_likes`` primary key, so two racing toggles can never leave a
        duplicate row behind.
        """
        review = self._get_active_review(review_id)

        removed = self.db.execute(
            delete(ReviewLike).where(
                ReviewLike.review_id == review.id,
                ReviewLike.user_id == current_user.id,
            )
        ).rowcount
        if removed:
            self.db.commit()
            is_liked = False
        else:
            self.db.add(ReviewLike(review_id=review.id, user_id=current_user.id))
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent request inserted the same like first.
                self.db.rollback()
            is_liked = True

        self.db.expire(review, ["likes"])
        logger.info(
            "Review %s %s by user %s", review.id, "liked" if is_liked else "unliked", current_user.id
        )
        return LikeState(like_count=self._like_count(review.id), is_liked=is_liked)


def get_review_service(db: Session = Depends(get_session)) -> ReviewService:
    return ReviewService(db)
