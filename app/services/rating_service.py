"""
Live rating aggregation.

Average rating, review count and rating distribution are never stored on the
Book row; they are recomputed from the active reviews on every read, so
soft-deleting a review or a book is reflected immediately and no counter can
drift out of sync.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from sqlalchemy import Numeric, cast, func, select
from sqlalchemy.orm import Session

from app.models.book import Book
from app.models.review import Review

STAR_VALUES = (1, 2, 3, 4, 5)


def round_rating(value: Optional[float]) -> float:
    """Round a mean rating half-up to one decimal; ``None`` becomes 0."""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def empty_distribution() -> dict[int, int]:
    return {star: 0 for star in STAR_VALUES}


@dataclass
class RatingSummary:
    total_reviews: int = 0
    rating_sum: int = 0
    distribution: dict[int, int] = field(default_factory=empty_distribution)

    @property
    def average_rating(self) -> float:
        if not self.total_reviews:
            return 0.0
        return round_rating(self.rating_sum / self.total_reviews)

    def add(self, rating: int, count: int) -> None:
        self.distribution[rating] = self.distribution.get(rating, 0) + count
        self.total_reviews += count
        self.rating_sum += rating * count


def active_review_filter():
    """Predicates shared by every read path over reviews."""
    return (Review.is_active.is_(True), Book.is_active.is_(True))


def summarize_book(db: Session, book_id: str) -> RatingSummary:
    return summarize_books(db, [book_id]).get(book_id, RatingSummary())


def summarize_books(db: Session, book_ids: Iterable[str]) -> dict[str, RatingSummary]:
    """Compute one RatingSummary per book with a single grouped query."""
    ids = list(dict.fromkeys(book_ids))
    summaries = {book_id: RatingSummary() for book_id in ids}
    if not ids:
        return summaries

    stmt = (
        select(Review.book_id, Review.rating, func.count(Review.id))
        .join(Book, Book.id == Review.book_id)
        .where(Review.book_id.in_(ids), *active_review_filter())
        .group_by(Review.book_id, Review.rating)
    )
    for book_id, rating, count in db.execute(stmt):
        summaries[book_id].add(rating, count)
    return summaries


def rating_stats_subquery():
    """Per-book aggregate of active reviews, for joining onto book queries."""
    return (
        select(
            Review.book_id.label("book_id"),
            func.avg(Review.rating).label("avg_rating"),
            func.count(Review.id).label("review_count"),
        )
        .where(Review.is_active.is_(True))
        .group_by(Review.book_id)
        .subquery("rating_stats")
    )


def rounded_average_expr(stats):
    """SQL expression mirroring ``round_rating`` for filtering and sorting."""
    return func.coalesce(func.round(cast(stats.c.avg_rating, Numeric(10, 4)), 1), 0)
