# src/cinemesis/models/__init__.py
"""SQLAlchemy models for the Cinemesis application."""

from .movie import Genre, Movie, movies_genres
from .review import Review
from .user import User
from .vote import ReviewVote

__all__ = [
    "Genre", "Movie", "movies_genres",
    "Review",
    "User",
    "ReviewVote",
]
