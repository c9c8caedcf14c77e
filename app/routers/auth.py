from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.review import review_to_schema
from app.schemas.stats import CurrentUserData, CurrentUserProfile
from app.schemas.user import AuthPayload, TokenOut, UserCreate, UserLogin, UserOut, UserUpdate, user_to_schema
from app.security.auth import get_current_user
from app.services.auth_service import AuthService, get_auth_service
from app.services.book_service import BookService, get_book_service
from app.services.review_service import ReviewService, get_review_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthPayload],
)
def signup(payload: UserCreate, service: AuthService = Depends(get_auth_service)) -> ApiResponse[AuthPayload]:
    """Register a new account and return it with an access token."""
    result = service.register_user(payload)
    return ApiResponse(
        message="User created successfully",
        data=AuthPayload(user=result.user, token=result.token),
    )


@router.post("/login", response_model=ApiResponse[AuthPayload])
def login(payload: UserLogin, service: AuthService = Depends(get_auth_service)) -> ApiResponse[AuthPayload]:
    result = service.login(email=payload.email, password=payload.password)
    return ApiResponse(
        message="Login successful",
        data=AuthPayload(user=result.user, token=result.token),
    )


@router.get("/me", response_model=ApiResponse[CurrentUserData])
def read_current_user(
    current_user: User = Depends(get_current_user),
    books: BookService = Depends(get_book_service),
    reviews: ReviewService = Depends(get_review_service),
) -> ApiResponse[CurrentUserData]:
    """Return the caller's account with the books they added and reviews they wrote."""
    profile = CurrentUserProfile(
        **user_to_schema(current_user).model_dump(),
        books=books.books_by_owner(current_user.id),
        reviews=[review_to_schema(review) for review in reviews.reviews_by_author(current_user.id)],
    )
    return ApiResponse(data=CurrentUserData(user=profile))


@router.put("/profile", response_model=ApiResponse[UserOut])
def update_profile(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[UserOut]:
    return ApiResponse(
        message="Profile updated successfully",
        data=service.update_profile(current_user, payload),
    )


@router.post("/refresh", response_model=ApiResponse[TokenOut])
def refresh_token(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> ApiResponse[TokenOut]:
    """Issue a fresh token for an already authenticated caller."""
    return ApiResponse(message="Token refreshed", data=TokenOut(token=service.issue_token(current_user)))
