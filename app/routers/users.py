from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.review import review_to_schema
from app.schemas.stats import (
    LeaderboardData,
    LeaderboardType,
    ProfileCounts,
    PublicProfile,
    PublicProfileData,
    UserSearchResult,
    UserStatsData,
)
from app.schemas.user import PublicUserOut
from app.security.auth import get_current_user
from app.services.stats_service import LEADERBOARD_LIMIT, SEARCH_LIMIT, StatsService, get_stats_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/stats", response_model=ApiResponse[UserStatsData])
def my_stats(
    current_user: User = Depends(get_current_user),
    service: StatsService = Depends(get_stats_service),
) -> ApiResponse[UserStatsData]:
    """Reading statistics for the authenticated user."""
    return ApiResponse(data=UserStatsData(stats=service.user_stats(current_user.id)))


@router.get("/leaderboard", response_model=ApiResponse[LeaderboardData])
def leaderboard(
    board_type: LeaderboardType = Query("books", alias="type"),
    limit: int = Query(LEADERBOARD_LIMIT, ge=1, le=100),
    service: StatsService = Depends(get_stats_service),
) -> ApiResponse[LeaderboardData]:
    entries = service.leaderboard(board_type, limit=limit)
    return ApiResponse(data=LeaderboardData(leaderboard=entries, type=board_type))


@router.get("/search", response_model=ApiResponse[UserSearchResult])
def search_users(
    q: str = Query(""),
    limit: int = Query(SEARCH_LIMIT, ge=1, le=50),
    service: StatsService = Depends(get_stats_service),
) -> ApiResponse[UserSearchResult]:
    """Find active users whose name or bio contains ``q``."""
    users = service.search_users(q, limit=limit)
    return ApiResponse(
        data=UserSearchResult(users=[PublicUserOut.model_validate(user) for user in users])
    )


@router.get("/{user_id}/profile", response_model=ApiResponse[PublicProfileData])
def public_profile(
    user_id: str,
    service: StatsService = Depends(get_stats_service),
) -> ApiResponse[PublicProfileData]:
    result = service.public_profile(user_id)
    profile = PublicProfile(
        **PublicUserOut.model_validate(result.user).model_dump(),
        books=result.books,
        reviews=[review_to_schema(review) for review in result.reviews],
    )
    return ApiResponse(
        data=PublicProfileData(
            user=profile,
            stats=ProfileCounts(books_count=result.books_count, reviews_count=result.reviews_count),
        )
    )
