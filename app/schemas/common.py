from __future__ import annotations

import math
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Standard response envelope shared by every endpoint."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class Ack(BaseModel):
    id: str


class PageInfo(BaseModel):
    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")

    model_config = ConfigDict(populate_by_name=True)


class BookPagination(PageInfo):
    total_books: int = Field(alias="totalBooks")


class ReviewPagination(PageInfo):
    total_reviews: int = Field(alias="totalReviews")


def page_fields(page: int, limit: int, total: int) -> dict[str, int | bool]:
    """Return the shared pagination fields for a 1-indexed page."""
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }


class UserBrief(BaseModel):
    id: str
    name: str
    avatar: Optional[str] = ""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class BookBrief(BaseModel):
    id: str
    title: str
    author: str
    genre: Optional[str] = None
    cover_image: Optional[str] = Field(default="", alias="coverImage")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)
