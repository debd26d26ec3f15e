"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .genres import router as genres_router
from .movies import router as movies_router
from .reviews import router as reviews_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "auth_router",
    "genres_router",
    "movies_router",
    "reviews_router",
    "users_router",
    "votes_router",
]
