from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DATABASE"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import get_session
from app.main import app
from app.models import Base


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def _override_get_session() -> Session:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = _override_get_session

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def signup(client: TestClient, name: str, email: str, password: str = "secret1") -> dict:
    response = client.post("/auth/signup", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def book_payload(**overrides) -> dict:
    payload = {
        "title": "The Long Road",
        "author": "Ada Writer",
        "description": "A sweeping story about a family crossing a continent.",
        "genre": "Fiction",
        "publishedYear": 2020,
        "tags": ["family", "journey"],
    }
    payload.update(overrides)
    return payload


def create_book(client: TestClient, token: str, **overrides) -> dict:
    response = client.post("/books", json=book_payload(**overrides), headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]["book"]


def create_review(client: TestClient, token: str, book_id: str, rating: int = 4, **overrides) -> dict:
    payload = {
        "bookId": book_id,
        "rating": rating,
        "reviewText": "A thoughtful and engaging read overall.",
    }
    payload.update(overrides)
    response = client.post("/reviews", json=payload, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]["review"]


@pytest.fixture()
def alice(client):
    return signup(client, "Alice", "alice@example.com")


@pytest.fixture()
def bob(client):
    return signup(client, "Bob", "bob@example.com")
