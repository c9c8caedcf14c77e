from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from app.crud.user import get_active_user, get_user_by_email
from app.models import User
from app.security.hash import hash_password


@pytest.fixture()
def reader(db_session: Session) -> User:
    user = User(
        email="reader@example.com",
        name="Example Reader",
        password_hash=hash_password("StrongPassword!"),
    )
    db_session.add(user)
    db_session.commit()
    return user


def test_get_user_by_email_is_case_insensitive(db_session: Session, reader: User):
    user = get_user_by_email("Reader@Example.com", db_session)
    assert user is not None
    assert user.id == reader.id


def test_get_user_by_email_rejects_sql_injection_attempt(db_session: Session, reader: User):
    with pytest.raises(ValueError):
        get_user_by_email("' OR 1=1; --", db_session)


def test_inactive_users_hidden_when_requested(db_session: Session, reader: User):
    reader.is_active = False
    db_session.commit()

    assert get_user_by_email("reader@example.com", db_session) is not None
    assert get_user_by_email("reader@example.com", db_session, active_only=True) is None
    assert get_active_user(reader.id, db_session) is None
