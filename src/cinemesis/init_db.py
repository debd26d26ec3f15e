# src/cinemesis/init_db.py
"""Create the database schema and seed a starter set of genres."""

import logging

from cinemesis.db.session import SessionLocal, create_tables
from cinemesis.repositories import GenreRepository

logger = logging.getLogger(__name__)

DEFAULT_GENRES = (
    "Action", "Adventure", "Animation", "Comedy", "Crime", "Documentary",
    "Drama", "Fantasy", "Horror", "Mystery", "Romance", "Sci-Fi", "Thriller",
)


def init_db() -> None:
    """Initialize the database by creating all tables and default genres."""
    create_tables()
    with SessionLocal() as session:
        GenreRepository(session).upsert(DEFAULT_GENRES)
        session.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    logger.info("Database initialized.")
