from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import User
from conftest import auth_headers, create_book, create_review, signup


def test_user_stats(client: TestClient, alice, bob):
    mystery = create_book(client, alice["token"], title="Case Closed", genre="Mystery")
    romance = create_book(client, alice["token"], title="Summer Love", genre="Romance")
    history = create_book(client, bob["token"], title="Old Empires", genre="History")

    create_review(client, bob["token"], mystery["id"], rating=4)
    create_review(client, bob["token"], romance["id"], rating=3)
    create_review(client, alice["token"], history["id"], rating=5)
    create_review(client, alice["token"], mystery["id"], rating=2)

    response = client.get("/users/stats", headers=auth_headers(alice["token"]))
    assert response.status_code == 200
    stats = response.json()["data"]["stats"]

    assert stats["booksAdded"] == 2
    assert stats["reviewsWritten"] == 2
    assert stats["averageRatingGiven"] == 3.5
    # Reviews on Alice's books: 4, 3 and her own 2.
    assert stats["averageRatingReceived"] == 3.0

    now = datetime.now(timezone.utc)
    assert stats["readingActivity"] == [{"year": now.year, "month": now.month, "count": 2}]
    assert stats["favoriteGenres"] == [
        {"genre": "History", "averageRating": 5.0, "count": 1},
        {"genre": "Mystery", "averageRating": 2.0, "count": 1},
    ]


def test_user_stats_empty(client: TestClient, alice):
    stats = client.get("/users/stats", headers=auth_headers(alice["token"])).json()["data"]["stats"]
    assert stats == {
        "booksAdded": 0,
        "reviewsWritten": 0,
        "averageRatingGiven": 0.0,
        "averageRatingReceived": 0.0,
        "readingActivity": [],
        "favoriteGenres": [],
    }


def test_user_stats_requires_auth(client: TestClient):
    assert client.get("/users/stats").status_code == 401


def test_leaderboard(client: TestClient, db_session: Session, alice, bob):
    carol = signup(client, "Carol", "carol@example.com")
    for index in range(2):
        create_book(client, bob["token"], title=f"Bob {index}")
    create_book(client, alice["token"], title="Alice 0")
    create_book(client, carol["token"], title="Carol 0")

    books = client.get("/users/leaderboard").json()["data"]
    assert books["type"] == "books"
    assert [(entry["user"]["name"], entry["count"]) for entry in books["leaderboard"]] == [
        ("Bob", 2),
        ("Alice", 1),
        ("Carol", 1),
    ]

    user = db_session.get(User, bob["user"]["id"])
    user.is_active = False
    db_session.commit()

    books = client.get("/users/leaderboard", params={"limit": 1}).json()["data"]
    assert [entry["user"]["name"] for entry in books["leaderboard"]] == ["Alice"]


def test_review_leaderboard(client: TestClient, alice, bob):
    first = create_book(client, alice["token"], title="First")
    second = create_book(client, alice["token"], title="Second")
    create_review(client, bob["token"], first["id"])
    create_review(client, bob["token"], second["id"])
    create_review(client, alice["token"], first["id"])

    data = client.get("/users/leaderboard", params={"type": "reviews"}).json()["data"]
    assert data["type"] == "reviews"
    assert [(entry["user"]["name"], entry["count"]) for entry in data["leaderboard"]] == [
        ("Bob", 2),
        ("Alice", 1),
    ]

    assert client.get("/users/leaderboard", params={"type": "likes"}).status_code == 422


def test_search_users(client: TestClient, alice):
    signup(client, "Zoe Mystery", "zoe@example.com")
    client.put(
        "/auth/profile",
        json={"bio": "Collector of mystery paperbacks"},
        headers=auth_headers(alice["token"]),
    )

    response = client.get("/users/search", params={"q": "  MYSTERY "})
    assert response.status_code == 200
    users = response.json()["data"]["users"]
    assert [user["name"] for user in users] == ["Alice", "Zoe Mystery"]
    assert all("email" not in user for user in users)


def test_search_users_rejects_short_query(client: TestClient):
    response = client.get("/users/search", params={"q": " a "})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "invalid_query"


def test_public_profile(client: TestClient, alice, bob):
    books = [create_book(client, alice["token"], title=f"Volume {index}") for index in range(7)]
    create_review(client, alice["token"], books[0]["id"], rating=5)
    create_review(client, bob["token"], books[1]["id"], rating=3)

    response = client.get(f"/users/{alice['user']['id']}/profile")
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["user"]["name"] == "Alice"
    assert "email" not in data["user"]
    assert len(data["user"]["books"]) == 6
    assert data["user"]["books"][0]["title"] == "Volume 6"
    assert len(data["user"]["reviews"]) == 1
    assert data["stats"] == {"booksCount": 7, "reviewsCount": 1}


def test_public_profile_unknown_user(client: TestClient):
    response = client.get("/users/nobody/profile")
    assert response.status_code == 404
    assert response.json()["code"] == "user_not_found"
