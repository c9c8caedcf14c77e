from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.book import Book
from app.models.user import Base, User, utcnow


class Review(Base):
    """A reader's star rating and written opinion of a book."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        # One active review per (book, user); soft-deleted rows do not count.
        Index(
            "uq_reviews_book_user_active",
            "book_id",
            "user_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active = true"),
        ),
        Index("ix_reviews_book_id_created_at", "book_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    book_id: Mapped[str] = mapped_column(String(36), ForeignKey("books.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    book: Mapped[Book] = relationship("Book", back_populates="reviews")
    user: Mapped[User] = relationship("User", back_populates="reviews")
    likes: Mapped[list["ReviewLike"]] = relationship(
        "ReviewLike",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def liker_ids(self) -> list[str]:
        return [like.user_id for like in self.likes]

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"Review(id={self.id!r}, book_id={self.book_id!r}, "
            f"user_id={self.user_id!r}, rating={self.rating!r})"
        )


class ReviewLike(Base):
    """Membership row for the set of users who liked a review."""

    __tablename__ = "review_likes"

    review_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reviews.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
