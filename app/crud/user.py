from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.user import User


class _EmailLookup(BaseModel):
    """Internal schema used to validate inbound email lookups."""

    email: EmailStr = Field(max_length=255)


def _validated_email(email: str) -> str:
    """Validate and normalise an email string before use in queries."""
    try:
        payload = _EmailLookup(email=email.strip())
    except ValidationError as exc:
        # Raise a ValueError so callers can translate into domain-specific errors.
        raise ValueError("Invalid email address provided.") from exc
    return payload.email.lower()


def get_user_by_email(email: str, db: Session, *, active_only: bool = False) -> Optional[User]:
    """
    Fetch a User by email, case-insensitively.

    Uniqueness is global, so inactive accounts are returned unless
    ``active_only`` is set.
    """

    validated_email = _validated_email(email)
    stmt = select(User).where(func.lower(User.email) == validated_email)
    if active_only:
        stmt = stmt.where(User.is_active.is_(True))
    return db.execute(stmt).scalar_one_or_none()


def get_active_user(user_id: str, db: Session) -> Optional[User]:
    stmt = select(User).where(User.id == user_id, User.is_active.is_(True))
    return db.execute(stmt).scalar_one_or_none()
