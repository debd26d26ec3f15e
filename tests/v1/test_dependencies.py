# tests/v1/test_dependencies.py
"""Tests for API dependencies and token helpers."""

import inspect

import pytest
from fastapi import HTTPException, Request, status
from fastapi.routing import APIRoute
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from cinemesis.api.v1.dependencies import get_current_user, get_optional_user, get_session
from cinemesis.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from cinemesis.core.settings import settings


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def _request(method: str) -> Request:
    return Request({"type": "http", "method": method, "path": "/", "headers": []})


class TestTokens:
    """Test issuing and reading bearer tokens."""

    def test_round_trip(self):
        """Test a token carries the user id."""
        assert decode_access_token(create_access_token(42)) == 42

    def test_wrong_secret(self):
        """Test a token signed with another key is rejected."""
        forged = jwt.encode({"sub": "42"}, "another-secret", algorithm=settings.jwt_algorithm)
        with pytest.raises(ValueError):
            decode_access_token(forged)

    def test_non_numeric_subject(self):
        """Test a subject that is not a user id is rejected."""
        token = jwt.encode({"sub": "admin"}, settings.secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(ValueError):
            decode_access_token(token)


class TestPasswords:
    def test_verify(self):
        """Test a hash verifies only its own password."""
        encoded = hash_password("correct horse")
        assert encoded.startswith("scrypt$")
        assert verify_password("correct horse", encoded)
        assert not verify_password("battery staple", encoded)

    def test_malformed_hash(self):
        """Test a malformed stored hash never verifies."""
        assert not verify_password("anything", "not-a-real-hash")


class TestGetCurrentUser:
    """Test the user dependencies."""

    def test_success(self, db_session, test_user):
        """Test a valid token resolves to its user."""
        user = get_current_user(_credentials(create_access_token(test_user)), db_session)
        assert user.id == test_user

    def test_invalid_token(self, db_session):
        """Test a malformed token raises 401."""
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_credentials("garbage"), db_session)
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.detail == "Could not validate credentials"

    def test_deleted_user(self, db_session):
        """Test a token for a user that no longer exists raises 401."""
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(_credentials(create_access_token(99999)), db_session)
        assert exc_info.value.detail == "User not found"

    def test_optional_user(self, db_session, test_user):
        """Test anonymous callers resolve to None."""
        assert get_optional_user(None, db_session) is None
        assert get_optional_user(_credentials(create_access_token(test_user)), db_session).id == test_user


class TestGetSession:
    """Test the request session dependency."""

    @pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS"])
    def test_reads_stay_deferred(self, db_session, method):
        """Test read requests do not open a write transaction."""
        assert get_session(_request(method), db_session) is db_session
        assert not db_session.in_transaction()

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_writes_begin_immediately(self, db_session, method):
        """Test mutating requests start their transaction as a writer."""
        get_session(_request(method), db_session)
        assert db_session.in_transaction()
        db_session.rollback()


def test_route_handlers_are_sync(app) -> None:
    """Test every API handler is a plain function so FastAPI runs it in the threadpool."""
    handlers = [
        route.endpoint
        for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/v1")
    ]
    assert handlers
    assert not [handler.__name__ for handler in handlers if inspect.iscoroutinefunction(handler)]
