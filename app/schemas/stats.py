from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.book import BookOut
from app.schemas.common import UserBrief
from app.schemas.review import ReviewOut
from app.schemas.user import PublicUserOut, UserOut

LeaderboardType = Literal["books", "reviews"]


class MonthlyActivity(BaseModel):
    year: int
    month: int
    count: int


class GenreAffinity(BaseModel):
    genre: str
    average_rating: float = Field(alias="averageRating")
    count: int

    model_config = ConfigDict(populate_by_name=True)


class UserStats(BaseModel):
    books_added: int = Field(alias="booksAdded")
    reviews_written: int = Field(alias="reviewsWritten")
    average_rating_given: float = Field(alias="averageRatingGiven")
    average_rating_received: float = Field(alias="averageRatingReceived")
    reading_activity: list[MonthlyActivity] = Field(alias="readingActivity")
    favorite_genres: list[GenreAffinity] = Field(alias="favoriteGenres")

    model_config = ConfigDict(populate_by_name=True)


class UserStatsData(BaseModel):
    stats: UserStats


class LeaderboardEntry(BaseModel):
    user: UserBrief
    count: int


class LeaderboardData(BaseModel):
    leaderboard: list[LeaderboardEntry]
    type: LeaderboardType


class UserSearchResult(BaseModel):
    users: list[PublicUserOut]


class ProfileCounts(BaseModel):
    books_count: int = Field(alias="booksCount")
    reviews_count: int = Field(alias="reviewsCount")

    model_config = ConfigDict(populate_by_name=True)


class PublicProfile(PublicUserOut):
    books: list[BookOut] = Field(default_factory=list)
    reviews: list[ReviewOut] = Field(default_factory=list)


class PublicProfileData(BaseModel):
    user: PublicProfile
    stats: ProfileCounts


class CurrentUserProfile(UserOut):
    books: list[BookOut] = Field(default_factory=list)
    reviews: list[ReviewOut] = Field(default_factory=list)


class CurrentUserData(BaseModel):
    user: CurrentUserProfile
