# src/cinemesis/models/movie.py
"""SQLAlchemy models for movies and their genres."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cinemesis.db.session import Base
from cinemesis.models.columns import Identifier, utcnow

# Association rows are removed with either side; the filter layer queries this table directly.
movies_genres = Table(
    "movies_genres",
    Base.metadata,
    Column("movie_id", Identifier, ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", Identifier, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
)


class Genre(Base):
    """Named category a movie can belong to.

    ``version`` guards renames the same way it guards movie edits.
    """

    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class Movie(Base):
    """Catalogue entry that reviews are written against.

    ``version`` is bumped on every update and compared on write so that two
    clients editing the same movie cannot silently overwrite each other.
    """

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    # Minutes.
    runtime: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    genres: Mapped[list[Genre]] = relationship(
        secondary=movies_genres,
        order_by=Genre.name,
        passive_deletes=True,
    )
