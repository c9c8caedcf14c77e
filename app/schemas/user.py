from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.user import User


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=6, repr=False)

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, repr=False)

    model_config = ConfigDict(extra="forbid")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)
    favorite_genres: Optional[list[str]] = Field(default=None, alias="favoriteGenres")
    avatar: Optional[str] = Field(default=None, max_length=512)

    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    bio: Optional[str] = ""
    avatar: Optional[str] = ""
    favorite_genres: list[str] = Field(default_factory=list, alias="favoriteGenres")
    is_active: bool = Field(alias="isActive")
    joined_at: datetime = Field(alias="joinedAt")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class PublicUserOut(BaseModel):
    """Profile fields visible to anyone; the email address is withheld."""

    id: str
    name: str
    bio: Optional[str] = ""
    avatar: Optional[str] = ""
    favorite_genres: list[str] = Field(default_factory=list, alias="favoriteGenres")
    joined_at: datetime = Field(alias="joinedAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AuthPayload(BaseModel):
    user: UserOut
    token: str


class TokenOut(BaseModel):
    token: str


def user_to_schema(user: User) -> UserOut:
    """Convert a SQLAlchemy User instance to a UserOut schema."""
    return UserOut.model_validate(user)


def create_user_model(payload: UserCreate, password_hash: str) -> User:
    """Instantiate a User ORM object from a validated UserCreate payload."""
    return User(
        email=payload.email,
        name=payload.name,
        password_hash=password_hash,
        bio="",
        avatar="",
        favorite_genres=[],
    )
