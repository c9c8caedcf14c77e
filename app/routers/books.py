from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.settings import get_settings
from app.models.user import User
from app.schemas.book import (
    BookCreate,
    BookData,
    BookDetailData,
    BookDetailOut,
    BookFilters,
    BookListOut,
    BookSortField,
    BookUpdate,
    CurrentFilters,
    SimilarBooksData,
    SortOrder,
)
from app.schemas.common import Ack, ApiResponse, BookPagination, page_fields
from app.schemas.review import review_to_schema
from app.security.auth import get_current_user, get_optional_user
from app.services.book_service import BookService, get_book_service

router = APIRouter(prefix="/books", tags=["books"])

_settings = get_settings()


@router.get("", response_model=ApiResponse[BookListOut])
def list_books(
    page: int = Query(1, ge=1),
    limit: int = Query(_settings.default_page_size, ge=1, le=_settings.max_page_size),
    search: Optional[str] = Query(default=None),
    genre: Optional[str] = Query(default=None),
    author: Optional[str] = Query(default=None),
    min_year: Optional[int] = Query(default=None, alias="minYear"),
    max_year: Optional[int] = Query(default=None, alias="maxYear"),
    min_rating: Optional[float] = Query(default=None, alias="minRating", ge=0, le=5),
    sort_by: BookSortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    viewer: Optional[User] = Depends(get_optional_user),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookListOut]:
    """Return a filtered, sorted and paginated page of active books."""
    # viewer is resolved only so that a malformed token is rejected.
    filters = CurrentFilters(
        search=search,
        genre=genre,
        author=author,
        min_year=min_year,
        max_year=max_year,
        min_rating=min_rating,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = service.list_books(filters, page=page, limit=limit)
    return ApiResponse(
        data=BookListOut(
            books=result.books,
            pagination=BookPagination(
                **page_fields(page, limit, result.total_books),
                total_books=result.total_books,
            ),
            filters=BookFilters(genres=result.genres, current_filters=filters),
        )
    )


@router.get("/{book_id}", response_model=ApiResponse[BookDetailData])
def get_book(
    book_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookDetailData]:
    """Return one active book with its rating distribution and reviews."""
    detail = service.get_book(book_id, viewer=viewer)
    book = BookDetailOut(
        **detail.book.model_dump(),
        rating_distribution=detail.rating_distribution,
    )
    return ApiResponse(
        data=BookDetailData(
            book=book,
            reviews=[review_to_schema(review, include_book=False) for review in detail.reviews],
            user_review=(
                review_to_schema(detail.user_review, include_book=False) if detail.user_review else None
            ),
        )
    )


@router.get("/{book_id}/similar", response_model=ApiResponse[SimilarBooksData])
def similar_books(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> ApiResponse[SimilarBooksData]:
    return ApiResponse(data=SimilarBooksData(books=service.similar_books(book_id)))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[BookData],
)
def create_book(
    payload: BookCreate,
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookData]:
    book = service.create_book(payload, owner=current_user)
    return ApiResponse(message="Book created successfully", data=BookData(book=book))


@router.put("/{book_id}", response_model=ApiResponse[BookData])
def update_book(
    book_id: str,
    payload: BookUpdate,
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[BookData]:
    """Update a book. Only the user who added it may do so."""
    book = service.update_book(book_id, payload, current_user=current_user)
    return ApiResponse(message="Book updated successfully", data=BookData(book=book))


@router.delete("/{book_id}", response_model=ApiResponse[Ack])
def delete_book(
    book_id: str,
    current_user: User = Depends(get_current_user),
    service: BookService = Depends(get_book_service),
) -> ApiResponse[Ack]:
    """Soft-delete a book together with its reviews."""
    service.delete_book(book_id, current_user=current_user)
    return ApiResponse(message="Book deleted successfully", data=Ack(id=book_id))
