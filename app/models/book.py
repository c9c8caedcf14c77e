from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.user import Base, User, utcnow

if TYPE_CHECKING:
    from app.models.review import Review

GENRES: tuple[str, ...] = (
    "Fiction", "Non-Fiction", "Mystery", "Romance", "Sci-Fi", "Fantasy",
    "Thriller", "Biography", "History", "Self-Help", "Business",
    "Technology", "Health", "Travel", "Cooking", "Art", "Religion",
    "Philosophy", "Poetry", "Drama", "Horror", "Adventure", "Crime",
    "Young Adult", "Children", "Comics", "Other",
)


class Book(Base):
    """SQLAlchemy model representing a catalogued book."""

    __tablename__ = "books"
    __table_args__ = (
        Index("ix_books_active_created_at", "is_active", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    genre: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    published_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    cover_image: Mapped[str] = mapped_column(String(512), nullable=False, default="", server_default="")
    page_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    language: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="English",
        server_default="English",
    )
    publisher: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    added_by: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
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

    owner: Mapped[User] = relationship("User", back_populates="books")
    reviews: Mapped[list["Review"]] = relationship("Review", back_populates="book")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Book(id={self.id!r}, title={self.title!r}, author={self.author!r})"
