"""Data access helpers for working with genres."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cinemesis.core.errors import EditConflictError, FailedValidationError, RecordNotFoundError
from cinemesis.models import Genre, Movie, movies_genres

__all__ = ["GenreRepository", "MAX_GENRES_PER_MOVIE"]

logger = logging.getLogger(__name__)

MAX_GENRES_PER_MOVIE = 5

_DUPLICATE_NAME = {"name": "a genre with this name already exists"}


class GenreRepository:
    """Thin wrapper around database access for genre entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Genre]:
        return list(self.session.execute(select(Genre).order_by(Genre.name)).scalars())

    def get(self, genre_id: int) -> Genre:
        """Return a genre by identifier.

        Raises:
            RecordNotFoundError: If no genre has ``genre_id``.
        """
        genre = self.session.get(Genre, genre_id) if genre_id > 0 else None
        if genre is None:
            raise RecordNotFoundError(f"genre {genre_id} not found")
        return genre

    def ids_for_names(self, names: Iterable[str]) -> list[int]:
        """Return ids of the named genres that exist; unknown names are skipped."""
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        stmt = select(Genre.id).where(Genre.name.in_(wanted))
        return list(self.session.execute(stmt).scalars())

    def for_movie(self, movie_id: int) -> list[Genre]:
        stmt = (
            select(Genre)
            .join(movies_genres, movies_genres.c.genre_id == Genre.id)
            .where(movies_genres.c.movie_id == movie_id)
            .order_by(Genre.name)
        )
        return list(self.session.execute(stmt).scalars())

    def create(self, name: str) -> Genre:
        """Insert a genre.

        Raises:
            FailedValidationError: If the name is already taken.
        """
        genre = Genre(name=name)
        try:
            with self.session.begin_nested():
                self.session.add(genre)
        except IntegrityError as err:
            raise FailedValidationError(_DUPLICATE_NAME) from err
        return genre

    def upsert(self, names: Iterable[str]) -> list[Genre]:
        """Return genres for ``names``, creating the missing ones.

        Each insert runs in its own savepoint; a name created concurrently by
        another transaction is read back instead.
        """
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        existing = {
            genre.name: genre
            for genre in self.session.execute(
                select(Genre).where(Genre.name.in_(wanted))
            ).scalars()
        }
        for name in wanted:
            if name in existing:
                continue
            genre = Genre(name=name)
            try:
                with self.session.begin_nested():
                    self.session.add(genre)
            except IntegrityError:
                genre = self.session.execute(select(Genre).where(Genre.name == name)).scalar_one()
            existing[name] = genre
        return [existing[name] for name in wanted]

    def rename(self, genre: Genre, *, name: str, expected_version: int) -> Genre:
        """Rename a genre only if it is still at ``expected_version``.

        Raises:
            EditConflictError: If another update won the race.
            FailedValidationError: If another genre already has ``name``.
        """
        try:
            with self.session.begin_nested():
                result = self.session.execute(
                    update(Genre)
                    .where(Genre.id == genre.id, Genre.version == expected_version)
                    .values(name=name, version=Genre.version + 1)
                    .execution_options(synchronize_session=False)
                )
        except IntegrityError as err:
            raise FailedValidationError(_DUPLICATE_NAME) from err
        if result.rowcount == 0:
            raise EditConflictError(f"genre {genre.id} was modified concurrently")
        self.session.refresh(genre)
        return genre

    def delete(self, genre_id: int) -> None:
        """Delete a genre; it is detached from every movie that carried it.

        Raises:
            RecordNotFoundError: If no genre has ``genre_id``.
        """
        if genre_id < 1:
            raise RecordNotFoundError(f"genre {genre_id} not found")
        result = self.session.execute(delete(Genre).where(Genre.id == genre_id))
        if result.rowcount == 0:
            raise RecordNotFoundError(f"genre {genre_id} not found")

    def replace_for_movie(self, movie: Movie, names: Iterable[str]) -> list[Genre]:
        """Make ``names`` the complete genre set of ``movie``."""
        movie.genres = self.upsert(names)
        self.session.flush()
        logger.debug("Movie %s genres replaced: %s", movie.id, [g.name for g in movie.genres])
        return sorted(movie.genres, key=lambda genre: genre.name)

    def attach_to_movie(self, movie: Movie, names: Iterable[str]) -> list[Genre]:
        """Add ``names`` to the genres ``movie`` already carries.

        Raises:
            FailedValidationError: If the movie would end up with too many genres.
        """
        current = {genre.name for genre in movie.genres}
        added = [genre for genre in self.upsert(names) if genre.name not in current]
        if len(current) + len(added) > MAX_GENRES_PER_MOVIE:
            raise FailedValidationError(
                {"genres": f"must not contain more than {MAX_GENRES_PER_MOVIE} genres"}
            )
        movie.genres = [*movie.genres, *added]
        self.session.flush()
        return sorted(movie.genres, key=lambda genre: genre.name)
