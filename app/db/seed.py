"""Demo data for a fresh database.

``seed_database`` only writes when the catalog is empty, so it is safe to call
on every startup.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.crud.user import get_user_by_email
from app.models import Book, Review, User
from app.security.hash import hash_password

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {
        "name": "Site Admin",
        "email": "admin@bookreviews.com",
        "password": "admin123",
        "bio": "Platform administrator and book enthusiast",
        "favorite_genres": ["Fiction", "Sci-Fi", "Fantasy"],
    },
    {
        "name": "Maya Lind",
        "email": "maya@example.com",
        "password": "demo123",
        "bio": "Avid reader and literature professor",
        "favorite_genres": ["Fiction", "History", "Biography"],
    },
    {
        "name": "Omar Reyes",
        "email": "omar@example.com",
        "password": "demo123",
        "bio": "Science fiction enthusiast and tech writer",
        "favorite_genres": ["Sci-Fi", "Technology", "Fantasy"],
    },
    {
        "name": "Ines Duarte",
        "email": "ines@example.com",
        "password": "demo123",
        "bio": "Mystery novel collector and crime story fan",
        "favorite_genres": ["Mystery", "Thriller", "Crime"],
    },
]

DEMO_BOOKS = [
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "description": "A witty study of manners, marriage and first impressions in Regency England.",
        "genre": "Romance",
        "published_year": 1813,
        "page_count": 432,
        "publisher": "T. Egerton",
        "tags": ["classic", "regency", "love"],
    },
    {
        "title": "Frankenstein",
        "author": "Mary Shelley",
        "description": "A young scientist creates a living being and must face what he has made.",
        "genre": "Horror",
        "published_year": 1818,
        "page_count": 280,
        "publisher": "Lackington, Hughes",
        "tags": ["classic", "gothic", "science"],
    },
    {
        "title": "The Time Machine",
        "author": "H. G. Wells",
        "description": "A Victorian inventor travels to the distant future and finds humanity divided.",
        "genre": "Sci-Fi",
        "published_year": 1895,
        "page_count": 118,
        "publisher": "William Heinemann",
        "tags": ["classic", "time travel", "science"],
    },
    {
        "title": "The Hound of the Baskervilles",
        "author": "Arthur Conan Doyle",
        "description": "Sherlock Holmes investigates a family curse on the foggy moors of Devon.",
        "genre": "Mystery",
        "published_year": 1902,
        "page_count": 256,
        "publisher": "George Newnes",
        "tags": ["classic", "detective"],
    },
    {
        "title": "Moby-Dick",
        "author": "Herman Melville",
        "description": "Captain Ahab pursues the white whale across the oceans with obsessive fury.",
        "genre": "Fiction",
        "published_year": 1851,
        "page_count": 635,
        "publisher": "Harper & Brothers",
        "tags": ["classic", "sea", "adventure"],
    },
    {
        "title": "The War of the Worlds",
        "author": "H. G. Wells",
        "description": "Martians invade England and the narrator struggles to survive the onslaught.",
        "genre": "Sci-Fi",
        "published_year": 1898,
        "page_count": 192,
        "publisher": "William Heinemann",
        "tags": ["classic", "invasion", "science"],
    },
]

DEMO_REVIEWS = [
    {
        "rating": 5,
        "review_text": "An absolute masterpiece. The characters stay with you long after the last page.",
        "title": "Life-changing read!",
    },
    {
        "rating": 4,
        "review_text": "Really enjoyed this one. Engaging prose and a well crafted story throughout.",
        "title": "Highly recommended",
    },
    {
        "rating": 3,
        "review_text": "An okay read. Some parts were gripping while others dragged a little.",
        "title": "Decent book",
    },
]


def seed_database(session: Session) -> bool:
    """Populate demo users, books and reviews. Returns False when skipped."""
    if session.execute(select(func.count(Book.id))).scalar_one() > 0:
        logger.info("Database already seeded, skipping")
        return False

    users = []
    created_users = 0
    for data in DEMO_USERS:
        # Accounts registered under a demo address are reused as they are.
        user = get_user_by_email(data["email"], session)
        if user is None:
            fields = dict(data)
            password = fields.pop("password")
            user = User(**fields, password_hash=hash_password(password))
            session.add(user)
            created_users += 1
        users.append(user)
    session.flush()

    books = []
    for index, data in enumerate(DEMO_BOOKS):
        book = Book(**data, added_by=users[index % len(users)].id)
        session.add(book)
        books.append(book)
    session.flush()

    # Each book is reviewed by the users that did not add it, rotating the templates.
    review_count = 0
    for index, book in enumerate(books):
        reviewers = [user for user in users if user.id != book.added_by]
        for offset, reviewer in enumerate(reviewers[: 1 + index % len(DEMO_REVIEWS)]):
            template = DEMO_REVIEWS[(index + offset) % len(DEMO_REVIEWS)]
            session.add(Review(book_id=book.id, user_id=reviewer.id, **template))
            review_count += 1

    session.commit()
    logger.info(
        "Seeded %d users (%d reused), %d books and %d reviews",
        created_users,
        len(users) - created_users,
        len(books),
        review_count,
    )
    return True
