# src/cinemesis/models/review.py
"""SQLAlchemy model for movie reviews."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from cinemesis.db.session import Base
from cinemesis.models.columns import Identifier, utcnow


class Review(Base):
    """A user's rated review of one movie.

    ``upvotes`` and ``downvotes`` are running aggregates maintained by the
    vote ledger in the same transaction as each vote mutation.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 10", name="ck_reviews_rating"),
        CheckConstraint("upvotes >= 0 AND downvotes >= 0", name="ck_reviews_vote_counts"),
        # One review per user per movie.
        UniqueConstraint("user_id", "movie_id", name="uq_reviews_user_movie"),
        Index("ix_reviews_movie_id", "movie_id"),
    )

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    upvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    edited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    movie_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
