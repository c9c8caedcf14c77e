from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AccountInactive, DuplicateEmail, Unauthenticated
from app.crud.user import get_user_by_email
from app.db.session import get_session
from app.models.user import User
from app.schemas.user import UserCreate, UserOut, UserUpdate, create_user_model, user_to_schema
from app.security.hash import hash_password, verify_password
from app.security.jwt import (
    ExpiredTokenError,
    InvalidTokenError,
    JWTSettings,
    create_access_token,
    decode_token,
    get_jwt_settings,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: UserOut
    token: str


class AuthService:
    """Business logic for authentication and the user account lifecycle."""

    def __init__(self, session: Session, settings: JWTSettings) -> None:
        self.session = session
        self.settings = settings

    def register_user(self, data: UserCreate) -> AuthResult:
        if get_user_by_email(data.email, self.session) is not None:
            logger.warning("Signup failed - user already exists: %s", data.email)
            raise DuplicateEmail()

        user = create_user_model(data, password_hash=hash_password(data.password))
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # Concurrent signup with the same address lost the race on the unique index.
            self.session.rollback()
            raise DuplicateEmail() from exc
        self.session.refresh(user)

        logger.info("User %s registered", user.id)
        return AuthResult(user=user_to_schema(user), token=self.issue_token(user))

    def login(self, email: str, password: str) -> AuthResult:
        try:
            user = get_user_by_email(email, self.session, active_only=True)
        except ValueError as exc:
            raise Unauthenticated("Invalid email or password.", code="invalid_credentials") from exc

        if not user or not verify_password(password, user.password_hash):
            logger.warning("Login failed for %s", email)
            raise Unauthenticated("Invalid email or password.", code="invalid_credentials")

        logger.info("User %s logged in", user.id)
        return AuthResult(user=user_to_schema(user), token=self.issue_token(user))

    def authenticate_token(self, token: str) -> User:
        """Resolve a bearer token to an active User."""
        try:
            payload = decode_token(token, self.settings)
        except ExpiredTokenError as exc:
            raise Unauthenticated("Token expired.", code="token_expired") from exc
        except InvalidTokenError as exc:
            raise Unauthenticated("Invalid token.", code="invalid_token") from exc

        user = self.session.get(User, payload.subject)
        if user is None:
            logger.warning("Token subject %s no longer exists", payload.subject)
            raise Unauthenticated("Invalid token or user not found.", code="user_not_found")
        if not user.is_active:
            raise AccountInactive()
        return user

    def update_profile(self, user: User, payload: UserUpdate) -> UserOut:
        update_data = payload.model_dump(exclude_unset=True)

        if update_data.get("name"):
            user.name = update_data["name"]
        if "bio" in update_data and update_data["bio"] is not None:
            user.bio = update_data["bio"]
        if update_data.get("favorite_genres") is not None:
            user.favorite_genres = list(update_data["favorite_genres"])
        if "avatar" in update_data and update_data["avatar"] is not None:
            user.avatar = update_data["avatar"]

        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        logger.info("User %s updated profile fields %s", user.id, sorted(update_data))
        return user_to_schema(user)

    def issue_token(self, user: User) -> str:
        return create_access_token(subject=user.id, settings=self.settings)


def get_auth_service(
    session: Session = Depends(get_session),
    settings: JWTSettings = Depends(get_jwt_settings),
) -> AuthService:
    return AuthService(session=session, settings=settings)
