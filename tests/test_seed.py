from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db.seed import DEMO_BOOKS, DEMO_USERS, seed_database
from app.models import Book, Review, User
from conftest import signup


def _count(session: Session, column) -> int:
    return session.execute(select(func.count(column))).scalar_one()


def test_seed_runs_once(db_session: Session):
    assert seed_database(db_session) is True
    assert _count(db_session, User.id) == len(DEMO_USERS)
    assert _count(db_session, Book.id) == len(DEMO_BOOKS)
    reviews = _count(db_session, Review.id)
    assert reviews > 0

    assert seed_database(db_session) is False
    assert _count(db_session, User.id) == len(DEMO_USERS)
    assert _count(db_session, Review.id) == reviews


def test_seed_reuses_account_registered_with_demo_email(client: TestClient, db_session: Session):
    existing = signup(client, "Early Bird", "admin@bookreviews.com")

    assert seed_database(db_session) is True
    assert _count(db_session, User.id) == len(DEMO_USERS)

    owner = db_session.execute(select(User).where(User.email == "admin@bookreviews.com")).scalar_one()
    assert owner.id == existing["user"]["id"]
    assert owner.name == "Early Bird"
    owned = db_session.execute(select(func.count(Book.id)).where(Book.added_by == owner.id)).scalar_one()
    assert owned > 0


def test_seeded_reviews_respect_one_per_user_per_book(db_session: Session):
    seed_database(db_session)

    pairs = db_session.execute(
        select(Review.book_id, Review.user_id, func.count(Review.id)).group_by(Review.book_id, Review.user_id)
    ).all()
    assert all(count == 1 for _, _, count in pairs)

    books = db_session.execute(select(Book)).scalars().all()
    for book in books:
        reviewers = db_session.execute(select(Review.user_id).where(Review.book_id == book.id)).scalars().all()
        assert book.added_by not in reviewers
