"""Data access helpers for working with reviews."""
from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cinemesis.core.errors import FailedValidationError, RecordNotFoundError
from cinemesis.filters.reviews import ReviewFilters, build_review_query
from cinemesis.models import Movie, Review, User
from cinemesis.query import fetch_page
from cinemesis.services.vote_ledger import vote_of

__all__ = ["ReviewRepository"]

TOP_REVIEW_EXCERPT = 300


def _review_row(review: Review, user_name: str, user_vote: int = 0) -> dict[str, Any]:
    return {
        "id": review.id,
        "user_id": review.user_id,
        "movie_id": review.movie_id,
        "text": review.text,
        "rating": review.rating,
        "upvotes": review.upvotes,
        "downvotes": review.downvotes,
        "created_at": review.created_at,
        "edited": review.edited,
        "user_name": user_name,
        "total_votes": review.upvotes + review.downvotes,
        "user_vote": user_vote,
    }


class ReviewRepository:
    """Thin wrapper around database access for review entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, review_id: int) -> Review:
        """Return a review by identifier.

        Raises:
            RecordNotFoundError: If no review has ``review_id``.
        """
        review = self.session.get(Review, review_id) if review_id > 0 else None
        if review is None:
            raise RecordNotFoundError(f"review {review_id} not found")
        return review

    def get_with_author(self, review_id: int, viewer_id: int | None = None) -> dict[str, Any]:
        """Return a review row with its author's name and the viewer's vote."""
        stmt = select(Review, User.name).join(User, User.id == Review.user_id).where(
            Review.id == review_id
        )
        row = self.session.execute(stmt).first()
        if row is None:
            raise RecordNotFoundError(f"review {review_id} not found")
        review, user_name = row
        user_vote = int(vote_of(self.session, review_id, viewer_id)) if viewer_id else 0
        return _review_row(review, user_name, user_vote)

    def create(self, *, user_id: int, movie_id: int, text: str, rating: int) -> Review:
        """Insert a review; a user may review each movie once.

        Raises:
            RecordNotFoundError: If the movie does not exist.
            FailedValidationError: If the user already reviewed the movie.
        """
        if self.session.get(Movie, movie_id) is None:
            raise RecordNotFoundError(f"movie {movie_id} not found")
        review = Review(user_id=user_id, movie_id=movie_id, text=text, rating=rating)
        try:
            with self.session.begin_nested():
                self.session.add(review)
        except IntegrityError as err:
            raise FailedValidationError(
                {"movie_id": "a review for this movie already exists"}
            ) from err
        return review

    def list_filtered(
        self,
        filters: ReviewFilters,
        viewer_id: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of reviews matching ``filters`` and the total match count."""
        page = fetch_page(self.session, build_review_query(filters, viewer_id))
        return page.rows, page.total_records

    def top_for_movie(self, movie_id: int, limit: int = 5) -> list[dict[str, Any]]:
        """Return the most upvoted reviews of a movie with their text shortened."""
        stmt = (
            select(Review, User.name)
            .join(User, User.id == Review.user_id)
            .where(Review.movie_id == movie_id, Review.upvotes > 0)
            .order_by(Review.upvotes.desc(), Review.id.asc())
            .limit(limit)
        )
        rows = []
        for review, user_name in self.session.execute(stmt):
            row = _review_row(review, user_name)
            row["text"] = row["text"][:TOP_REVIEW_EXCERPT]
            rows.append(row)
        return rows

    def update(self, review: Review, *, text: str | None, rating: int | None) -> Review:
        if text is not None:
            review.text = text
        if rating is not None:
            review.rating = rating
        review.edited = True
        self.session.flush()
        return review

    def delete(self, review_id: int) -> None:
        result = self.session.execute(delete(Review).where(Review.id == review_id))
        if result.rowcount == 0:
            raise RecordNotFoundError(f"review {review_id} not found")

