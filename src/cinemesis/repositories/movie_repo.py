"""Data access helpers for working with movies."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, selectinload

from cinemesis.core.errors import EditConflictError, RecordNotFoundError
from cinemesis.filters.movies import MovieFilters, build_movie_query
from cinemesis.models import Genre, Movie
from cinemesis.models.columns import utcnow
from cinemesis.query import QueryPage, fetch_page
from cinemesis.repositories.genre_repo import GenreRepository

__all__ = ["MovieRepository"]

logger = logging.getLogger(__name__)


class MovieRepository:
    """Thin wrapper around database access for movie entities."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.genres = GenreRepository(session)

    def get(self, movie_id: int) -> Movie:
        """Return a movie with its genres loaded.

        Raises:
            RecordNotFoundError: If no movie has ``movie_id``.
        """
        if movie_id < 1:
            raise RecordNotFoundError(f"movie {movie_id} not found")
        stmt = select(Movie).options(selectinload(Movie.genres)).where(Movie.id == movie_id)
        movie = self.session.execute(stmt).scalars().first()
        if movie is None:
            raise RecordNotFoundError(f"movie {movie_id} not found")
        return movie

    def create(self, *, title: str, year: int, runtime: int, genre_names: list[str]) -> Movie:
        """Insert a movie, upserting and attaching its genres."""
        movie = Movie(title=title, year=year, runtime=runtime)
        movie.genres = self.genres.upsert(genre_names)
        self.session.add(movie)
        self.session.flush()
        return movie

    def list_filtered(self, filters: MovieFilters) -> tuple[list[dict], int]:
        """Return one page of movies matching ``filters`` and the total match count.

        Each row dict carries a ``genres`` list of ``Genre`` objects.
        """
        genre_ids: list[int] = []
        if filters.genres:
            genre_ids = self.genres.ids_for_names(filters.genres)
            if len(genre_ids) < len(set(filters.genres)):
                # An unknown genre can never be matched, so nothing qualifies.
                return [], 0

        page: QueryPage = fetch_page(self.session, build_movie_query(filters, genre_ids))
        self._attach_genres(page.rows)
        logger.debug("Movie filter matched %d rows", page.total_records)
        return page.rows, page.total_records

    def _attach_genres(self, rows: list[dict]) -> None:
        if not rows:
            return
        by_id = {row["id"]: row for row in rows}
        for row in rows:
            row["genres"] = []
        stmt = (
            select(Movie.id, Genre)
            .join(Movie.genres)
            .where(Movie.id.in_(list(by_id)))
            .order_by(Genre.name)
        )
        for movie_id, genre in self.session.execute(stmt):
            by_id[movie_id]["genres"].append(genre)

    def update(
        self,
        movie: Movie,
        *,
        expected_version: int,
        title: str,
        year: int,
        runtime: int,
        genre_names: list[str] | None = None,
    ) -> Movie:
        """Apply an update only if the stored version still equals ``expected_version``.

        Raises:
            EditConflictError: If another update won the race.
        """
        result = self.session.execute(
            update(Movie)
            .where(Movie.id == movie.id, Movie.version == expected_version)
            .values(
                title=title,
                year=year,
                runtime=runtime,
                updated_at=utcnow(),
                version=Movie.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise EditConflictError(f"movie {movie.id} was modified concurrently")

        if genre_names is not None:
            movie.genres = self.genres.upsert(genre_names)
        self.session.flush()
        self.session.refresh(movie)
        return movie

    def delete(self, movie_id: int) -> None:
        """Delete a movie; its reviews, votes and genre links cascade.

        Raises:
            RecordNotFoundError: If no movie has ``movie_id``.
        """
        if movie_id < 1:
            raise RecordNotFoundError(f"movie {movie_id} not found")
        result = self.session.execute(delete(Movie).where(Movie.id == movie_id))
        if result.rowcount == 0:
            raise RecordNotFoundError(f"movie {movie_id} not found")
