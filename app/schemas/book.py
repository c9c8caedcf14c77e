from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.book import GENRES, Book
from app.schemas.common import BookPagination, UserBrief
from app.schemas.review import ReviewOut

ISBN_PATTERN = re.compile(
    r"^(?:ISBN(?:-1[03])?:? )?"
    r"(?=[0-9X]{10}$|(?=(?:[0-9]+[- ]){3})[- 0-9X]{13}$|97[89][0-9]{10}$|(?=(?:[0-9]+[- ]){4})[- 0-9]{17}$)"
    r"(?:97[89][- ]?)?[0-9]{1,5}[- ]?[0-9]+[- ]?[0-9]+[- ]?[0-9X]$"
)

BookSortField = Literal["title", "author", "publishedYear", "averageRating", "createdAt"]
SortOrder = Literal["asc", "desc"]


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=10, max_length=2000)
    genre: str
    published_year: int = Field(alias="publishedYear", ge=1000)
    isbn: Optional[str] = None
    cover_image: Optional[str] = Field(default="", alias="coverImage", max_length=512)
    page_count: Optional[int] = Field(default=None, alias="pageCount")
    language: Optional[str] = Field(default="English", max_length=64)
    publisher: Optional[str] = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, value: str) -> str:
        if value not in GENRES:
            raise ValueError("Please select a valid genre")
        return value

    @field_validator("published_year")
    @classmethod
    def validate_published_year(cls, value: int) -> int:
        if value > datetime.now(timezone.utc).year:
            raise ValueError("Published year cannot be in the future")
        return value

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not ISBN_PATTERN.match(value):
            raise ValueError("Please enter a valid ISBN")
        return value

    @field_validator("page_count")
    @classmethod
    def validate_page_count(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value <= 0:
            raise ValueError("pageCount must be a positive integer")
        return value

    @field_validator("language")
    @classmethod
    def default_language(cls, value: Optional[str]) -> str:
        return value or "English"

    @field_validator("cover_image")
    @classmethod
    def default_cover_image(cls, value: Optional[str]) -> str:
        return value or ""

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: list[str]) -> list[str]:
        tags = [tag.strip() for tag in value if tag and tag.strip()]
        for tag in tags:
            if len(tag) > 30:
                raise ValueError("Tag cannot exceed 30 characters")
        return tags


class BookCreate(BookBase):
    pass


class BookUpdate(BookBase):
    """Full replacement payload; fields that are omitted keep their value."""


class BookOut(BaseModel):
    id: str
    title: str
    author: str
    description: str
    genre: str
    published_year: int = Field(alias="publishedYear")
    isbn: Optional[str] = None
    cover_image: Optional[str] = Field(default="", alias="coverImage")
    page_count: Optional[int] = Field(default=None, alias="pageCount")
    language: Optional[str] = None
    publisher: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    owner: UserBrief = Field(alias="addedBy")
    is_active: bool = Field(alias="isActive")
    average_rating: float = Field(default=0, alias="averageRating")
    review_count: int = Field(default=0, alias="reviewCount")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class CurrentFilters(BaseModel):
    search: Optional[str] = None
    genre: Optional[str] = None
    author: Optional[str] = None
    min_year: Optional[int] = Field(default=None, alias="minYear")
    max_year: Optional[int] = Field(default=None, alias="maxYear")
    min_rating: Optional[float] = Field(default=None, alias="minRating")
    sort_by: BookSortField = Field(default="createdAt", alias="sortBy")
    sort_order: SortOrder = Field(default="desc", alias="sortOrder")

    model_config = ConfigDict(populate_by_name=True)


class BookFilters(BaseModel):
    genres: list[str]
    current_filters: CurrentFilters = Field(alias="currentFilters")

    model_config = ConfigDict(populate_by_name=True)


class BookDetailOut(BookOut):
    rating_distribution: dict[int, int] = Field(default_factory=dict, alias="ratingDistribution")


class BookDetailData(BaseModel):
    book: BookDetailOut
    reviews: list[ReviewOut]
    user_review: Optional[ReviewOut] = Field(default=None, alias="userReview")

    model_config = ConfigDict(populate_by_name=True)


class SimilarBooksData(BaseModel):
    books: list[BookOut]


class BookListOut(BaseModel):
    books: list[BookOut]
    pagination: BookPagination
    filters: BookFilters


class BookData(BaseModel):
    book: BookOut


def book_to_schema(book: Book, average_rating: float = 0, review_count: int = 0) -> BookOut:
    """Convert a Book plus its live rating aggregate into a BookOut schema."""
    out = BookOut.model_validate(book)
    out.average_rating = average_rating
    out.review_count = review_count
    return out
