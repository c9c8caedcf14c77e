from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, Field, ValidationError

# Tokens stay valid for 30 days.
DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 30


class JWTSettings(BaseModel):
    secret_key: str = Field(default="change-me", alias="JWT_SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_exp_minutes: int = Field(
        default=DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES,
        alias="JWT_ACCESS_TOKEN_EXPIRE_MINUTES",
        ge=1,
    )
    issuer: Optional[str] = Field(default="book-reviews-api", alias="JWT_ISSUER")
    audience: Optional[str] = Field(default=None, alias="JWT_AUDIENCE")

    @property
    def access_token_expires_delta(self) -> timedelta:
        return timedelta(minutes=self.access_token_exp_minutes)

    model_config = {"populate_by_name": True}


class TokenPayload(BaseModel):
    subject: str = Field(alias="sub")
    issued_at: Optional[int] = Field(default=None, alias="iat")
    expires_at: int = Field(alias="exp")
    issuer: Optional[str] = Field(default=None, alias="iss")
    audience: Optional[str] = Field(default=None, alias="aud")

    model_config = {"populate_by_name": True}


class InvalidTokenError(Exception):
    """Raised when a JWT cannot be decoded or validated."""


class ExpiredTokenError(InvalidTokenError):
    """Raised when a JWT is well-formed but past its expiry."""


@lru_cache
def get_jwt_settings() -> JWTSettings:
    """Load JWT configuration from environment variables."""
    return JWTSettings(
        secret_key=os.getenv("JWT_SECRET_KEY", "change-me"),
        algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_exp_minutes=int(
            os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", str(DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES))
        ),
        issuer=os.getenv("JWT_ISSUER", "book-reviews-api"),
        audience=os.getenv("JWT_AUDIENCE"),
    )


def create_access_token(
    *,
    subject: str,
    settings: JWTSettings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Generate an encoded bearer token for ``subject``."""
    now = datetime.now(timezone.utc)
    expiration = now + (expires_delta if expires_delta is not None else settings.access_token_expires_delta)
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int(expiration.timestamp()),
    }
    if settings.issuer:
        payload["iss"] = settings.issuer
    if settings.audience:
        payload["aud"] = settings.audience

    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str, settings: JWTSettings) -> TokenPayload:
    """Decode and validate an encoded JWT."""
    decode_kwargs = {
        "algorithms": [settings.algorithm],
        "options": {"verify_aud": settings.audience is not None},
    }
    if settings.audience:
        decode_kwargs["audience"] = settings.audience
    if settings.issuer:
        decode_kwargs["issuer"] = settings.issuer

    try:
        payload = jwt.decode(token, settings.secret_key, **decode_kwargs)
    except ExpiredSignatureError as exc:
        raise ExpiredTokenError(str(exc)) from exc
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    try:
        return TokenPayload.model_validate(payload)
    except ValidationError as exc:
        raise InvalidTokenError("Token payload is malformed.") from exc
