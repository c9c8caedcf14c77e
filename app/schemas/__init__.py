from .common import ApiResponse, BookBrief, UserBrief
from .user import (
    AuthPayload,
    PublicUserOut,
    UserCreate,
    UserLogin,
    UserOut,
    UserUpdate,
    create_user_model,
    user_to_schema,
)

__all__ = [
    "ApiResponse",
    "AuthPayload",
    "BookBrief",
    "PublicUserOut",
    "UserBrief",
    "UserCreate",
    "UserLogin",
    "UserOut",
    "UserUpdate",
    "create_user_model",
    "user_to_schema",
]
