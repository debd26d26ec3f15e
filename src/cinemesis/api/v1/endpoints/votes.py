# src/cinemesis/api/v1/endpoints/votes.py
"""Vote endpoints for the Cinemesis API."""

from fastapi import APIRouter

from cinemesis.api.v1.dependencies import CurrentUserDep, SessionDep
from cinemesis.schemas.vote import VoteCreate, VoteResponse
from cinemesis.services.vote_ledger import VoteDirection, cast_vote

router = APIRouter(prefix="/reviews", tags=["votes"])


@router.post("/{review_id}/vote", response_model=VoteResponse)
def vote_for_review(
    review_id: int,
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Upvote or downvote a review.

    Repeating the vote already recorded removes it.
    """
    outcome = cast_vote(
        db,
        review_id=review_id,
        voter_id=current_user.id,
        direction=VoteDirection(vote_data.direction),
    )
    message = "vote removed" if outcome.current is VoteDirection.NONE else "vote successful"
    return VoteResponse(
        message=message,
        vote=int(outcome.current),
        upvotes=outcome.upvotes,
        downvotes=outcome.downvotes,
    )
