# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from datetime import datetime
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from cinemesis.core.security import create_access_token
from cinemesis.db.session import Base, configure_sqlite
from cinemesis.db.session import get_db as app_get_session
from cinemesis.main import app as fastapi_app
from cinemesis.models import Movie, Review, ReviewVote, User
from cinemesis.repositories import GenreRepository

_EMAIL_COUNTER = count(1)


@pytest.fixture()
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    # A file database lets separate sessions (and threads) hold their own connections.
    engine = configure_sqlite(
        create_engine(
            f"sqlite:///{tmp_path / 'cinemesis.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, session_factory: sessionmaker[Session]) -> Iterator[TestClient]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(app_get_session, None)


class Seeder:
    """Insert fixture rows in short committed transactions and return their ids.

    Every helper opens and closes its own session so that no test-side
    transaction holds the SQLite write lock while a request is in flight.
    """

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self.factory = factory

    def user(self, name: str = "Test User", email: str | None = None) -> int:
        email = email or f"user{next(_EMAIL_COUNTER)}@example.com"
        with self.factory() as session:
            user = User(name=name, email=email, password_hash="not-a-real-hash")
            session.add(user)
            session.commit()
            return user.id

    def movie(
        self,
        title: str,
        *,
        year: int = 2000,
        runtime: int = 100,
        genres: tuple[str, ...] = (),
    ) -> int:
        with self.factory() as session:
            movie = Movie(title=title, year=year, runtime=runtime)
            movie.genres = GenreRepository(session).upsert(genres)
            session.add(movie)
            session.commit()
            return movie.id

    def review(
        self,
        *,
        user_id: int,
        movie_id: int,
        rating: int = 7,
        text: str = "A perfectly serviceable film.",
        upvotes: int = 0,
        downvotes: int = 0,
        created_at: datetime | None = None,
    ) -> int:
        with self.factory() as session:
            review = Review(
                user_id=user_id,
                movie_id=movie_id,
                rating=rating,
                text=text,
                upvotes=upvotes,
                downvotes=downvotes,
            )
            if created_at is not None:
                review.created_at = created_at
            session.add(review)
            session.commit()
            return review.id

    def counters(self, review_id: int) -> tuple[int, int]:
        with self.factory() as session:
            review = session.get(Review, review_id)
            assert review is not None
            return review.upvotes, review.downvotes

    def vote_rows(self, review_id: int) -> dict[int, int]:
        with self.factory() as session:
            rows = session.query(ReviewVote).filter(ReviewVote.review_id == review_id).all()
            return {row.user_id: row.vote for row in rows}


@pytest.fixture()
def seed(session_factory: sessionmaker[Session]) -> Seeder:
    return Seeder(session_factory)


def auth_headers(user_id: int) -> dict[str, str]:
    """Return authorization headers for ``user_id``."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def test_user(seed: Seeder) -> int:
    """Create the primary test user and return its id."""
    return seed.user("Test User", "test@example.com")


@pytest.fixture()
def other_user(seed: Seeder) -> int:
    """Create a secondary test user and return its id."""
    return seed.user("Other User", "other@example.com")


@pytest.fixture()
def auth_token(test_user: int) -> dict[str, str]:
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: int) -> dict[str, str]:
    return auth_headers(other_user)


@pytest.fixture()
def test_movie(seed: Seeder) -> int:
    return seed.movie("Alien", year=1979, runtime=117, genres=("Horror", "Sci-Fi"))


@pytest.fixture()
def test_review(seed: Seeder, other_user: int, test_movie: int) -> int:
    """A review written by ``other_user`` so the primary user can vote on it."""
    return seed.review(user_id=other_user, movie_id=test_movie, rating=9)
