"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field

from cinemesis.query.pagination import PaginationMetadata

__all__ = ["MessageResponse", "PaginationMetadata", "ValidationErrorResponse"]


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str


class ValidationErrorResponse(BaseModel):
    """Field-keyed validation messages returned with HTTP 422."""

    error: dict[str, str] = Field(..., description="Message per offending field")
