# src/cinemesis/api/v1/endpoints/reviews.py
"""Review endpoints for the Cinemesis API."""

from fastapi import APIRouter, Response, status

from cinemesis.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from cinemesis.core.errors import PermissionDeniedError
from cinemesis.models import Review, User
from cinemesis.repositories import ReviewRepository
from cinemesis.schemas.common import MessageResponse
from cinemesis.schemas.review import ReviewCreate, ReviewEnvelope, ReviewResponse, ReviewUpdate

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _ensure_author(review: Review, user: User) -> None:
    if review.user_id != user.id:
        raise PermissionDeniedError("only the author may modify this review")


@router.post("", response_model=ReviewEnvelope, status_code=status.HTTP_201_CREATED)
def create_review(
    review_data: ReviewCreate,
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewEnvelope:
    """Write a review of a movie as the current user."""
    repo = ReviewRepository(db)
    review = repo.create(
        user_id=current_user.id,
        movie_id=review_data.movie_id,
        text=review_data.text,
        rating=review_data.rating,
    )
    db.commit()
    response.headers["Location"] = f"/api/v1/reviews/{review.id}"
    return ReviewEnvelope(review=ReviewResponse.model_validate(repo.get_with_author(review.id)))


@router.get("/{review_id}", response_model=ReviewEnvelope)
def get_review(review_id: int, db: SessionDep, viewer: OptionalUserDep) -> ReviewEnvelope:
    """Return a single review; ``user_vote`` reflects the caller's vote when authenticated."""
    row = ReviewRepository(db).get_with_author(review_id, viewer.id if viewer else None)
    return ReviewEnvelope(review=ReviewResponse.model_validate(row))


@router.patch("/{review_id}", response_model=ReviewEnvelope)
def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReviewEnvelope:
    """Edit the text and/or rating of one of the caller's reviews."""
    repo = ReviewRepository(db)
    review = repo.get(review_id)
    _ensure_author(review, current_user)
    repo.update(review, text=review_data.text, rating=review_data.rating)
    db.commit()
    row = repo.get_with_author(review_id, current_user.id)
    return ReviewEnvelope(review=ReviewResponse.model_validate(row))


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete one of the caller's reviews and every vote on it."""
    repo = ReviewRepository(db)
    _ensure_author(repo.get(review_id), current_user)
    repo.delete(review_id)
    db.commit()
    return MessageResponse(message="review successfully deleted")
