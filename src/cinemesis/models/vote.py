# src/cinemesis/models/vote.py
"""Models capturing voting interactions on reviews."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, SmallInteger
from sqlalchemy.orm import Mapped, mapped_column

from cinemesis.db.session import Base
from cinemesis.models.columns import Identifier


class ReviewVote(Base):
    """Per-user vote on a review.

    A missing row means the user has no vote on the review.
    """

    __tablename__ = "review_votes"
    __table_args__ = (
        CheckConstraint("vote IN (1, -1)", name="ck_review_votes_vote"),
        Index("ix_review_votes_user_id", "user_id"),
    )

    # Composite primary key prevents duplicate votes from the same user.
    review_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("reviews.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # 1 = upvote, -1 = downvote.
    vote: Mapped[int] = mapped_column(SmallInteger, nullable=False)
