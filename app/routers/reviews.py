from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from app.models.user import User
from app.schemas.book import SortOrder
from app.schemas.common import Ack, ApiResponse, ReviewPagination, page_fields
from app.schemas.review import (
    BookReviewsOut,
    LikeOut,
    RatingStatistics,
    ReviewCreate,
    ReviewData,
    ReviewListData,
    ReviewSortField,
    ReviewUpdate,
    UserReviewsOut,
    review_to_schema,
)
from app.security.auth import get_current_user
from app.services.review_service import RECENT_REVIEWS_LIMIT, ReviewService, get_review_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ReviewData],
)
def create_review(
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[ReviewData]:
    """Post a review; a user may hold one active review per book."""
    review = service.create_review(payload, author=current_user)
    return ApiResponse(message="Review created successfully", data=ReviewData(review=review_to_schema(review)))


@router.get("/recent", response_model=ApiResponse[ReviewListData])
def recent_reviews(
    limit: int = Query(RECENT_REVIEWS_LIMIT, ge=1, le=50),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[ReviewListData]:
    reviews = service.recent_reviews(limit=limit)
    return ApiResponse(data=ReviewListData(reviews=[review_to_schema(review) for review in reviews]))


@router.get("/book/{book_id}", response_model=ApiResponse[BookReviewsOut])
def reviews_for_book(
    book_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: ReviewSortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[BookReviewsOut]:
    """Paginated active reviews of a book plus its rating statistics."""
    result, summary = service.list_reviews_for_book(
        book_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(
        data=BookReviewsOut(
            reviews=[review_to_schema(review, include_book=False) for review in result.reviews],
            pagination=ReviewPagination(
                **page_fields(page, limit, result.total_reviews),
                total_reviews=result.total_reviews,
            ),
            statistics=RatingStatistics(
                average_rating=summary.average_rating,
                total_reviews=summary.total_reviews,
                rating_distribution=summary.distribution,
            ),
        )
    )


@router.get("/user/{user_id}", response_model=ApiResponse[UserReviewsOut])
def reviews_by_user(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[UserReviewsOut]:
    result = service.list_reviews_by_user(user_id, page=page, limit=limit)
    return ApiResponse(
        data=UserReviewsOut(
            reviews=[review_to_schema(review) for review in result.reviews],
            pagination=ReviewPagination(
                **page_fields(page, limit, result.total_reviews),
                total_reviews=result.total_reviews,
            ),
        )
    )


@router.put("/{review_id}", response_model=ApiResponse[ReviewData])
def update_review(
    review_id: str,
    payload: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[ReviewData]:
    review = service.update_review(review_id, payload, current_user=current_user)
    return ApiResponse(message="Review updated successfully", data=ReviewData(review=review_to_schema(review)))


@router.delete("/{review_id}", response_model=ApiResponse[Ack])
def delete_review(
    review_id: str,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[Ack]:
    service.delete_review(review_id, current_user=current_user)
    return ApiResponse(message="Review deleted successfully", data=Ack(id=review_id))


@router.post("/{review_id}/like", response_model=ApiResponse[LikeOut])
def toggle_like(
    review_id: str,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
) -> ApiResponse[LikeOut]:
    """Like the review, or remove the like when the caller already gave one."""
    state = service.toggle_like(review_id, current_user=current_user)
    return ApiResponse(
        message="Review liked" if state.is_liked else "Review unliked",
        data=LikeOut(like_count=state.like_count, is_liked=state.is_liked),
    )
