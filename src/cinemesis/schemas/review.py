# src/cinemesis/schemas/review.py
"""Review-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cinemesis.schemas.common import PaginationMetadata


class ReviewCreate(BaseModel):
    """Schema for creating a new review; the author is the caller."""

    movie_id: int = Field(..., gt=0)
    text: str = Field(..., min_length=10, max_length=500)
    rating: int = Field(..., ge=1, le=10)


class ReviewUpdate(BaseModel):
    """Schema for editing the text and/or rating of a review."""

    text: str | None = Field(None, min_length=10, max_length=500)
    rating: int | None = Field(None, ge=1, le=10)


class ReviewResponse(BaseModel):
    """Review with author name and the caller's own vote (0 when none)."""

    id: int
    user_id: int
    movie_id: int
    text: str
    rating: int
    upvotes: int
    downvotes: int
    created_at: datetime
    edited: bool
    user_name: str
    total_votes: int
    user_vote: int = 0

    model_config = ConfigDict(from_attributes=True)


class ReviewEnvelope(BaseModel):
    review: ReviewResponse


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    metadata: PaginationMetadata


class TopReviewsResponse(BaseModel):
    reviews: list[ReviewResponse]
