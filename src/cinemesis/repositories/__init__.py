"""Data access helpers."""

from .genre_repo import GenreRepository
from .movie_repo import MovieRepository
from .review_repo import ReviewRepository
from .user_repo import UserRepository

__all__ = ["GenreRepository", "MovieRepository", "ReviewRepository", "UserRepository"]
