from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import Unauthenticated
from app.models.user import User
from app.services.auth_service import AuthService, get_auth_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return service.authenticate_token(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """Resolve the caller when a bearer token is sent, otherwise stay anonymous."""
    if credentials is None or not credentials.credentials:
        return None
    return service.authenticate_token(credentials.credentials)
