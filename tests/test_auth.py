from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import User
from app.security.hash import hash_password, verify_password
from app.security.jwt import create_access_token, get_jwt_settings
from conftest import auth_headers, create_book, create_review, signup


def test_password_hashing_roundtrip():
    password = "s3cureP@ss!"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrong-password", hashed)


def test_signup_login_and_me(client: TestClient):
    created = signup(client, "A", "a@x.com", "secret1")
    assert created["user"]["name"] == "A"
    assert created["token"]
    assert "password" not in created["user"]
    assert "passwordHash" not in created["user"]

    login = client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]

    me = client.get("/auth/me", headers=auth_headers(token))
    assert me.status_code == 200
    body = me.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["name"] == "A"
    assert user["email"] == "a@x.com"
    assert user["books"] == []
    assert user["reviews"] == []


def test_me_lists_own_books_and_reviews(client: TestClient, alice):
    book = create_book(client, alice["token"])
    create_review(client, alice["token"], book["id"], rating=5)

    me = client.get("/auth/me", headers=auth_headers(alice["token"])).json()["data"]["user"]
    assert [b["id"] for b in me["books"]] == [book["id"]]
    assert me["books"][0]["averageRating"] == 5.0
    assert me["reviews"][0]["book"]["title"] == book["title"]


def test_signup_duplicate_email_is_conflict(client: TestClient):
    signup(client, "First", "dup@example.com")

    response = client.post(
        "/auth/signup",
        json={"name": "Second", "email": "DUP@example.com", "password": "secret1"},
    )
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "email_exists"


def test_signup_rejects_short_password(client: TestClient):
    response = client.post(
        "/auth/signup",
        json={"name": "Weak", "email": "weak@example.com", "password": "123"},
    )
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert any(error["field"] == "password" for error in body["errors"])


def test_login_wrong_password(client: TestClient, alice):
    response = client.post("/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["code"] == "invalid_credentials"


def test_me_requires_token(client: TestClient):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["code"] == "not_authenticated"


def test_invalid_and_expired_tokens_are_rejected(client: TestClient, alice):
    garbage = client.get("/auth/me", headers=auth_headers("not-a-jwt"))
    assert garbage.status_code == 401
    assert garbage.json()["code"] == "invalid_token"

    expired = create_access_token(
        subject=alice["user"]["id"],
        settings=get_jwt_settings(),
        expires_delta=timedelta(minutes=-5),
    )
    response = client.get("/auth/me", headers=auth_headers(expired))
    assert response.status_code == 401
    assert response.json()["code"] == "token_expired"


def test_token_for_unknown_user(client: TestClient):
    token = create_access_token(subject="missing-user", settings=get_jwt_settings())
    response = client.get("/auth/me", headers=auth_headers(token))
    assert response.status_code == 401
    assert response.json()["code"] == "user_not_found"


def test_deactivated_account_is_rejected(client: TestClient, db_session: Session, alice):
    user = db_session.get(User, alice["user"]["id"])
    user.is_active = False
    db_session.commit()

    response = client.get("/auth/me", headers=auth_headers(alice["token"]))
    assert response.status_code == 401
    assert response.json()["code"] == "account_inactive"

    login = client.post("/auth/login", json={"email": "alice@example.com", "password": "secret1"})
    assert login.status_code == 401
    assert login.json()["code"] == "invalid_credentials"


def test_update_profile(client: TestClient, alice):
    response = client.put(
        "/auth/profile",
        json={"name": "Alice Reader", "bio": "Loves mysteries", "favoriteGenres": ["Mystery"]},
        headers=auth_headers(alice["token"]),
    )
    assert response.status_code == 200
    user = response.json()["data"]
    assert user["name"] == "Alice Reader"
    assert user["bio"] == "Loves mysteries"
    assert user["favoriteGenres"] == ["Mystery"]
    assert user["email"] == "alice@example.com"


def test_update_profile_rejects_email_change(client: TestClient, alice):
    response = client.put(
        "/auth/profile",
        json={"email": "other@example.com"},
        headers=auth_headers(alice["token"]),
    )
    assert response.status_code == 422


def test_refresh_issues_working_token(client: TestClient, alice):
    response = client.post("/auth/refresh", headers=auth_headers(alice["token"]))
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    me = client.get("/auth/me", headers=auth_headers(token))
    assert me.status_code == 200
    assert me.json()["data"]["user"]["id"] == alice["user"]["id"]


def test_single_character_names_are_accepted(client: TestClient, alice):
    response = client.put("/auth/profile", json={"name": "Z"}, headers=auth_headers(alice["token"]))
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Z"

    empty = client.post("/auth/signup", json={"name": "", "email": "empty@example.com", "password": "secret1"})
    assert empty.status_code == 422
    assert empty.json()["errors"][0]["field"] == "name"
