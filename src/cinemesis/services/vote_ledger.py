"""Single-vote-per-user ledger for reviews with running aggregate counters.

Each (review, voter) pair is in one of three states: no vote, upvote or
downvote. Casting a direction moves the pair to that state, except that
casting the direction already recorded retracts the vote. The review's
``upvotes``/``downvotes`` columns are adjusted by the difference between
the old and new state inside the same transaction as the vote row, so the
counters always equal the number of matching vote rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from cinemesis.core.errors import RecordNotFoundError, StorageError
from cinemesis.db.session import begin_write
from cinemesis.models import Review, ReviewVote

logger = logging.getLogger(__name__)


class VoteDirection(IntEnum):
    """Stored value of a vote; ``NONE`` means no row exists."""

    DOWN = -1
    NONE = 0
    UP = 1


@dataclass(frozen=True)
class VoteOutcome:
    """Result of a cast: the transition taken and the review's new counters."""

    previous: VoteDirection
    current: VoteDirection
    upvotes: int
    downvotes: int


def next_direction(current: VoteDirection, requested: VoteDirection) -> VoteDirection:
    """Return the state after casting ``requested`` on top of ``current``.

    Re-casting the recorded direction toggles the vote off.
    """
    if requested == current:
        return VoteDirection.NONE
    return requested


def counter_delta(old: VoteDirection, new: VoteDirection, counter: VoteDirection) -> int:
    """Change to apply to ``counter`` when a vote moves from ``old`` to ``new``."""
    return int(new == counter) - int(old == counter)


def _floored(column: ColumnElement[int], delta: int) -> ColumnElement[int]:
    adjusted = column + delta
    return case((adjusted < 0, 0), else_=adjusted)


def _locked_vote(session: Session, review_id: int, voter_id: int) -> ReviewVote | None:
    stmt = (
        select(ReviewVote)
        .where(ReviewVote.review_id == review_id, ReviewVote.user_id == voter_id)
        .with_for_update()
    )
    return session.execute(stmt).scalars().first()


def _claim_vote_row(
    session: Session,
    review_id: int,
    voter_id: int,
    requested: VoteDirection,
) -> tuple[ReviewVote | None, VoteDirection]:
    """Return the existing vote row and its state, inserting one if absent.

    When no row exists a new one carrying ``requested`` is inserted inside a
    savepoint and ``(None, NONE)`` is returned. If a concurrent transaction
    inserted the same pair first, the primary key rejects ours and the
    winner's row is re-read under lock instead.
    """
    vote = _locked_vote(session, review_id, voter_id)
    if vote is not None:
        return vote, VoteDirection(vote.vote)

    try:
        with session.begin_nested():
            session.add(ReviewVote(review_id=review_id, user_id=voter_id, vote=int(requested)))
    except IntegrityError:
        vote = _locked_vote(session, review_id, voter_id)
        if vote is None:
            raise
        logger.debug("Lost insert race for review %s voter %s", review_id, voter_id)
        return vote, VoteDirection(vote.vote)
    return None, VoteDirection.NONE


def _apply_counter_delta(
    session: Session,
    review_id: int,
    old: VoteDirection,
    new: VoteDirection,
) -> tuple[int, int]:
    up_delta = counter_delta(old, new, VoteDirection.UP)
    down_delta = counter_delta(old, new, VoteDirection.DOWN)
    stmt = (
        update(Review)
        .where(Review.id == review_id)
        .values(
            upvotes=_floored(Review.upvotes, up_delta),
            downvotes=_floored(Review.downvotes, down_delta),
        )
        .execution_options(synchronize_session=False)
    )
    session.execute(stmt)
    row = session.execute(
        select(Review.upvotes, Review.downvotes).where(Review.id == review_id)
    ).one()
    return row.upvotes, row.downvotes


def _cast(
    session: Session,
    review_id: int,
    voter_id: int,
    requested: VoteDirection,
) -> VoteOutcome:
    exists = session.execute(select(Review.id).where(Review.id == review_id)).first()
    if exists is None:
        raise RecordNotFoundError(f"review {review_id} not found")

    vote, previous = _claim_vote_row(session, review_id, voter_id, requested)
    current = next_direction(previous, requested)

    if vote is not None:
        if current is VoteDirection.NONE:
            session.delete(vote)
        else:
            vote.vote = int(current)
        session.flush()

    upvotes, downvotes = _apply_counter_delta(session, review_id, previous, current)
    return VoteOutcome(previous=previous, current=current, upvotes=upvotes, downvotes=downvotes)


def cast_vote(
    session: Session,
    *,
    review_id: int,
    voter_id: int,
    direction: VoteDirection | int,
) -> VoteOutcome:
    """Cast, flip or retract ``voter_id``'s vote on ``review_id`` and commit.

    The read, the vote-row mutation and the counter update run in one
    transaction on ``session``; any failure rolls all of them back before
    the error propagates.

    Raises:
        ValueError: If ``direction`` is not an up or down vote.
        RecordNotFoundError: If the review does not exist.
        StorageError: If the database rejects any step.
    """
    requested = VoteDirection(direction)
    if requested is VoteDirection.NONE:
        raise ValueError("direction must be 1 (upvote) or -1 (downvote)")

    try:
        begin_write(session)
        outcome = _cast(session, review_id, voter_id, requested)
        session.commit()
    except SQLAlchemyError as err:
        session.rollback()
        logger.exception("Vote on review %s by user %s failed", review_id, voter_id)
        raise StorageError("vote could not be recorded") from err
    except Exception:
        session.rollback()
        raise

    logger.debug(
        "Vote on review %s by user %s: %s -> %s",
        review_id,
        voter_id,
        outcome.previous.name,
        outcome.current.name,
    )
    return outcome


def vote_of(session: Session, review_id: int, voter_id: int) -> VoteDirection:
    """Return ``voter_id``'s current vote on ``review_id``."""
    value = session.execute(
        select(ReviewVote.vote).where(
            ReviewVote.review_id == review_id,
            ReviewVote.user_id == voter_id,
        )
    ).scalar_one_or_none()
    return VoteDirection(value) if value is not None else VoteDirection.NONE
