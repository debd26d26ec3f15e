# src/cinemesis/api/v1/endpoints/auth.py
"""Authentication endpoints for the Cinemesis API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from cinemesis.api.v1.dependencies import SessionDep
from cinemesis.core.security import create_access_token
from cinemesis.repositories import UserRepository
from cinemesis.schemas.user import TokenRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/token", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def create_token(credentials: TokenRequest, db: SessionDep) -> TokenResponse:
    """Exchange an email and password for a bearer token."""
    user = UserRepository(db).authenticate(credentials.email, credentials.password)
    if user is None:
        logger.info("Rejected login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid authentication credentials",
        )
    return TokenResponse(access_token=create_access_token(user.id))
