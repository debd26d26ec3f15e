# src/cinemesis/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote on a review."""

    direction: Literal[-1, 1] = Field(..., description="1 for upvote, -1 for downvote")


class VoteResponse(BaseModel):
    """Vote state after a cast and the review's updated counters."""

    message: str
    vote: Literal[-1, 0, 1] = Field(..., description="0 when the cast retracted the vote")
    upvotes: int
    downvotes: int
