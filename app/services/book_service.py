from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.errors import BookNotFound
from app.db.session import get_session
from app.models.book import Book
from app.models.review import Review
from app.models.user import User
from app.schemas.book import BookCreate, BookOut, BookUpdate, CurrentFilters, book_to_schema
from app.security.access import authorize
from app.services.rating_service import (
    RatingSummary,
    rating_stats_subquery,
    rounded_average_expr,
    summarize_book,
    summarize_books,
)

logger = logging.getLogger(__name__)

SIMILAR_BOOKS_LIMIT = 6


@dataclass
class BookPage:
    books: list[BookOut]
    total_books: int
    genres: list[str]


@dataclass
class BookDetail:
    book: BookOut
    rating_distribution: dict[int, int]
    reviews: list[Review]
    user_review: Optional[Review]


class BookService:
    """Catalog operations: listing, lookup, similarity and owner-scoped CRUD."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _get_active_book(self, book_id: str) -> Book:
        stmt = (
            select(Book)
            .options(joinedload(Book.owner))
            .where(Book.id == book_id, Book.is_active.is_(True))
        )
        book = self.db.execute(stmt).scalar_one_or_none()
        if book is None:
            logger.warning("Book not found: %s", book_id)
            raise BookNotFound()
        return book

    def _to_schemas(self, books: list[Book]) -> list[BookOut]:
        summaries = summarize_books(self.db, [book.id for book in books])
        return [self._to_schema(book, summaries[book.id]) for book in books]

    @staticmethod
    def _to_schema(book: Book, summary: RatingSummary) -> BookOut:
        return book_to_schema(
            book,
            average_rating=summary.average_rating,
            review_count=summary.total_reviews,
        )

    def available_genres(self) -> list[str]:
        stmt = select(Book.genre).where(Book.is_active.is_(True)).distinct()
        return sorted(self.db.execute(stmt).scalars().all())

    # ------------------------------------------------------------------ #
    # Public interface
    # ------------------------------------------------------------------ #
    def list_books(self, filters: CurrentFilters, page: int = 1, limit: int = 12) -> BookPage:
        """Filter, sort and paginate active books.

        The rating filter and rating sort run in SQL against the aggregated
        review subquery, before OFFSET/LIMIT, so ``totalBooks`` always equals
        the number of books reachable by paging through every page.
        """
        stats = rating_stats_subquery()
        average = rounded_average_expr(stats)

        conditions = [Book.is_active.is_(True)]
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            conditions.append(
                or_(
                    Book.title.ilike(pattern),
                    Book.author.ilike(pattern),
                    Book.description.ilike(pattern),
                )
            )
        if filters.genre and filters.genre != "all":
            conditions.append(Book.genre == filters.genre)
        if filters.author:
            conditions.append(Book.author.ilike(f"%{filters.author.strip()}%"))
        if filters.min_year is not None:
            conditions.append(Book.published_year >= filters.min_year)
        if filters.max_year is not None:
            conditions.append(Book.published_year <= filters.max_year)
        if filters.min_rating is not None:
            conditions.append(average >= filters.min_rating)

        total_books = self.db.execute(
            select(func.count(Book.id))
            .outerjoin(stats, stats.c.book_id == Book.id)
            .where(*conditions)
        ).scalar_one()

        sort_columns = {
            "title": Book.title,
            "author": Book.author,
            "publishedYear": Book.published_year,
            "averageRating": average,
            "createdAt": Book.created_at,
        }
        primary = sort_columns[filters.sort_by]
        ordering = [primary.desc() if filters.sort_order == "desc" else primary.asc()]
        if filters.sort_by != "createdAt":
            ordering.append(Book.created_at.desc())
        ordering.append(Book.id.desc())

        stmt = (
            select(Book)
            .outerjoin(stats, stats.c.book_id == Book.id)
            .options(joinedload(Book.owner))
            .where(*conditions)
            .order_by(*ordering)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        books = list(self.db.execute(stmt).scalars().unique().all())

        logger.info(
            "Listed %d books (page %d, total %d, sort %s %s)",
            len(books),
            page,
            total_books,
            filters.sort_by,
            filters.sort_order,
        )
        return BookPage(
            books=self._to_schemas(books),
            total_books=total_books,
            genres=self.available_genres(),
        )

    def get_book(self, book_id: str, viewer: Optional[User] = None) -> BookDetail:
        book = self._get_active_book(book_id)
        summary = summarize_book(self.db, book.id)

        reviews_stmt = (
            select(Review)
            .options(joinedload(Review.user), selectinload(Review.likes))
            .where(Review.book_id == book.id, Review.is_active.is_(True))
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        reviews = list(self.db.execute(reviews_stmt).scalars().unique().all())
        user_review = None
        if viewer is not None:
            user_review = next((review for review in reviews if review.user_id == viewer.id), None)

        return BookDetail(
            book=self._to_schema(book, summary),
            rating_distribution=dict(summary.distribution),
            reviews=reviews,
            user_review=user_review,
        )

    def similar_books(self, book_id: str, limit: int = SIMILAR_BOOKS_LIMIT) -> list[BookOut]:
        """Active books sharing the genre, the author or any tag, newest first.

        Tags live in a JSON column, so SQL narrows candidates with a substring
        match on the serialized list and the exact overlap is checked here.
        """
        target = self._get_active_book(book_id)
        target_tags = set(target.tags or [])

        related = [Book.genre == target.genre, Book.author == target.author]
        serialized_tags = cast(Book.tags, String)
        for tag in sorted(target_tags):
            related.append(serialized_tags.contains(json.dumps(tag), autoescape=True))

        stmt = (
            select(Book)
            .options(joinedload(Book.owner))
            .where(Book.is_active.is_(True), Book.id != target.id, or_(*related))
            .order_by(Book.created_at.desc(), Book.id.desc())
        )
        matches: list[Book] = []
        for candidate in self.db.execute(stmt).scalars():
            if (
                candidate.genre == target.genre
                or candidate.author == target.author
                or target_tags.intersection(candidate.tags or [])
            ):
                matches.append(candidate)
                if len(matches) >= limit:
                    break

        logger.info("Found %d similar books for %s", len(matches), book_id)
        return self._to_schemas(matches)

    def create_book(self, payload: BookCreate, owner: User) -> BookOut:
        book = Book(**payload.model_dump(), added_by=owner.id, is_active=True)
        self.db.add(book)
        self.db.commit()
        self.db.refresh(book)

        logger.info("Book %s (%r) created by user %s", book.id, book.title, owner.id)
        return self._to_schema(book, RatingSummary())

    def update_book(self, book_id: str, payload: BookUpdate, current_user: User) -> BookOut:
        book = self._get_active_book(book_id)
        authorize(current_user, book.added_by, resource="book")

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(book, field, value)

        self.db.commit()
        self.db.refresh(book)
        logger.info("Book %s updated by user %s", book.id, current_user.id)
        return self._to_schema(book, summarize_book(self.db, book.id))

    def delete_book(self, book_id: str, current_user: User) -> None:
        """Soft-delete a book and every review attached to it."""
        book = self._get_active_book(book_id)
        authorize(current_user, book.added_by, resource="book")

        book.is_active = False
        self.db.execute(
            update(Review)
            .where(Review.book_id == book.id, Review.is_active.is_(True))
            .values(is_active=False)
        )
        self.db.commit()
        logger.info("Book %s deleted by user %s", book.id, current_user.id)

    def books_by_owner(self, owner_id: str, limit: Optional[int] = None) -> list[BookOut]:
        stmt = (
            select(Book)
            .options(joinedload(Book.owner))
            .where(Book.added_by == owner_id, Book.is_active.is_(True))
            .order_by(Book.created_at.desc(), Book.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._to_schemas(list(self.db.execute(stmt).scalars().unique().all()))


def get_book_service(db: Session = Depends(get_session)) -> BookService:
    return BookService(db)
