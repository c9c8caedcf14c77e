from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from app.models import Book, Review, User
from app.services.rating_service import RatingSummary, round_rating, summarize_book, summarize_books


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 0.0),
        (4, 4.0),
        (3.25, 3.3),
        (3.35, 3.4),
        (2.45, 2.5),
        (11 / 3, 3.7),
        (3.04, 3.0),
    ],
)
def test_round_rating_is_half_up(value, expected):
    assert round_rating(value) == expected


def test_empty_summary():
    summary = RatingSummary()
    assert summary.average_rating == 0.0
    assert summary.total_reviews == 0
    assert summary.distribution == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}


def _make_user(db: Session, email: str) -> User:
    user = User(email=email, name=email.split("@")[0], password_hash="x")
    db.add(user)
    db.flush()
    return user


def _make_book(db: Session, owner: User, title: str = "Some Book", active: bool = True) -> Book:
    book = Book(
        title=title,
        author="Someone",
        description="A description long enough.",
        genre="Fiction",
        published_year=2000,
        tags=[],
        added_by=owner.id,
        is_active=active,
    )
    db.add(book)
    db.flush()
    return book


def test_summary_ignores_inactive_reviews(db_session: Session):
    owner = _make_user(db_session, "owner@example.com")
    readers = [_make_user(db_session, f"reader{i}@example.com") for i in range(4)]
    book = _make_book(db_session, owner)

    for reader, rating, active in zip(readers, (5, 4, 1, 1), (True, True, False, False)):
        db_session.add(
            Review(book_id=book.id, user_id=reader.id, rating=rating, review_text="Long enough text.", is_active=active)
        )
    db_session.commit()

    summary = summarize_book(db_session, book.id)
    assert summary.total_reviews == 2
    assert summary.average_rating == 4.5
    assert summary.distribution == {1: 0, 2: 0, 3: 0, 4: 1, 5: 1}


def test_summaries_skip_inactive_books(db_session: Session):
    owner = _make_user(db_session, "owner@example.com")
    reader = _make_user(db_session, "reader@example.com")
    live = _make_book(db_session, owner, "Live")
    gone = _make_book(db_session, owner, "Gone", active=False)
    db_session.add_all(
        [
            Review(book_id=live.id, user_id=reader.id, rating=3, review_text="Long enough text."),
            Review(book_id=gone.id, user_id=reader.id, rating=5, review_text="Long enough text."),
        ]
    )
    db_session.commit()

    summaries = summarize_books(db_session, [live.id, gone.id, "unknown"])
    assert summaries[live.id].average_rating == 3.0
    assert summaries[gone.id].total_reviews == 0
    assert summaries["unknown"].total_reviews == 0
