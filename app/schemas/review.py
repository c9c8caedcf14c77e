from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.models.review import Review
from app.schemas.common import BookBrief, ReviewPagination, UserBrief

ReviewSortField = Literal["createdAt", "updatedAt", "rating"]


class ReviewContent(BaseModel):
    rating: int = Field(ge=1, le=5, strict=True)
    review_text: str = Field(alias="reviewText", min_length=10, max_length=2000)
    title: Optional[str] = Field(default=None, max_length=100)

    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)


class ReviewCreate(ReviewContent):
    book_id: str = Field(alias="bookId", min_length=1)


class ReviewUpdate(ReviewContent):
    pass


class ReviewOut(BaseModel):
    id: str
    book_id: str = Field(alias="bookId")
    user: UserBrief
    book: Optional[BookBrief] = None
    rating: int
    review_text: str = Field(alias="reviewText")
    title: Optional[str] = None
    liker_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("liker_ids", "likes"),
        serialization_alias="likes",
    )
    like_count: int = Field(default=0, alias="likeCount")
    is_active: bool = Field(alias="isActive")
    edited_at: Optional[datetime] = Field(default=None, alias="editedAt")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class RatingStatistics(BaseModel):
    average_rating: float = Field(alias="averageRating")
    total_reviews: int = Field(alias="totalReviews")
    rating_distribution: dict[int, int] = Field(alias="ratingDistribution")

    model_config = ConfigDict(populate_by_name=True)


class ReviewData(BaseModel):
    review: ReviewOut


class ReviewListData(BaseModel):
    reviews: list[ReviewOut]


class BookReviewsOut(BaseModel):
    reviews: list[ReviewOut]
    pagination: ReviewPagination
    statistics: RatingStatistics


class UserReviewsOut(BaseModel):
    reviews: list[ReviewOut]
    pagination: ReviewPagination


class LikeOut(BaseModel):
    like_count: int = Field(alias="likeCount")
    is_liked: bool = Field(alias="isLiked")

    model_config = ConfigDict(populate_by_name=True)


def review_to_schema(review: Review, *, include_book: bool = True) -> ReviewOut:
    out = ReviewOut.model_validate(review)
    if not include_book:
        out.book = None
    return out
