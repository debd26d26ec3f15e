"""Data access helpers for working with users."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cinemesis.core.errors import FailedValidationError, RecordNotFoundError
from cinemesis.core.security import hash_password, verify_password
from cinemesis.models import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user accounts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User:
        user = self.session.get(User, user_id) if user_id > 0 else None
        if user is None:
            raise RecordNotFoundError(f"user {user_id} not found")
        return user

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.lower())
        return self.session.execute(stmt).scalars().first()

    def create(self, *, name: str, email: str, password: str) -> User:
        """Register a user with a hashed password.

        Raises:
            FailedValidationError: If the email address is already registered.
        """
        user = User(name=name, email=email.lower(), password_hash=hash_password(password))
        try:
            with self.session.begin_nested():
                self.session.add(user)
        except IntegrityError as err:
            raise FailedValidationError(
                {"email": "a user with this email address already exists"}
            ) from err
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``password`` matches, otherwise None."""
        user = self.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user
