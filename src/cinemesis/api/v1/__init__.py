"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    genres_router,
    movies_router,
    reviews_router,
    users_router,
    votes_router,
)

__all__ = [
    "auth_router",
    "genres_router",
    "movies_router",
    "reviews_router",
    "users_router",
    "votes_router",
]
