# tests/v1/test_auth.py
"""Tests for registration and token endpoints."""

from fastapi import status


def _register(client, email: str = "ripley@example.com", password: str = "nostromo1979"):
    return client.post(
        "/api/v1/users",
        json={"name": "Ellen Ripley", "email": email, "password": password},
    )


def test_register_and_login(client) -> None:
    """Test that a registered user can exchange credentials for a token."""
    response = _register(client)
    assert response.status_code == status.HTTP_201_CREATED
    user = response.json()
    assert user["email"] == "ripley@example.com"
    assert "password" not in user
    assert "password_hash" not in user

    response = client.post(
        "/api/v1/auth/token",
        json={"email": "ripley@example.com", "password": "nostromo1979"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    token = response.json()
    assert token["token_type"] == "bearer"

    response = client.post(
        "/api/v1/reviews",
        json={"movie_id": 99999, "text": "Never got to see it.", "rating": 5},
        headers={"Authorization": f"Bearer {token['access_token']}"},
    )
    # Authenticated, so the failure is about the missing movie.
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_login_wrong_password(client) -> None:
    """Test that a wrong password is rejected."""
    _register(client)
    response = client.post(
        "/api/v1/auth/token",
        json={"email": "ripley@example.com", "password": "wrong-password"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "invalid authentication credentials"


def test_duplicate_email(client) -> None:
    """Test that an email address can only be registered once."""
    _register(client)
    response = _register(client, email="RIPLEY@example.com")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json() == {"error": {"email": "a user with this email address already exists"}}


def test_register_validation(client) -> None:
    """Test registration with malformed input."""
    assert _register(client, email="not-an-email").status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert _register(client, password="short").status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_invalid_token(client) -> None:
    """Test that a garbage bearer token is rejected."""
    response = client.post(
        "/api/v1/movies",
        json={"title": "Moon", "year": 2009, "runtime": 97, "genres": ["Sci-Fi"]},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
