from __future__ import annotations

import logging

from app.core.errors import Forbidden
from app.models.user import User

logger = logging.getLogger(__name__)


def is_owner(identity: User, owner_id: str) -> bool:
    return identity.id == owner_id


def authorize(identity: User, owner_id: str, *, resource: str = "resource") -> None:
    """Allow the call only when ``identity`` owns the resource.

    There is no role hierarchy or delegation: the owner reference on a Book
    or the author reference on a Review must equal the caller's id.
    """
    if not is_owner(identity, owner_id):
        logger.warning(
            "Unauthorized %s mutation attempt by user %s (owner %s)", resource, identity.id, owner_id
        )
        raise Forbidden(f"Not authorized to modify this {resource}.")
