# src/cinemesis/api/v1/endpoints/genres.py
"""Genre endpoints for the Cinemesis API."""

import logging

from fastapi import APIRouter, Response, status

from cinemesis.api.v1.dependencies import CurrentUserDep, SessionDep
from cinemesis.core.errors import EditConflictError
from cinemesis.repositories import GenreRepository
from cinemesis.schemas.common import MessageResponse
from cinemesis.schemas.movie import (
    GenreCreate,
    GenreEnvelope,
    GenreListResponse,
    GenreResponse,
    GenreUpdate,
)

router = APIRouter(prefix="/genres", tags=["genres"])
logger = logging.getLogger(__name__)


@router.get("", response_model=GenreListResponse)
def list_genres(db: SessionDep) -> GenreListResponse:
    """Return every known genre ordered by name."""
    genres = GenreRepository(db).list_all()
    return GenreListResponse(genres=[GenreResponse.model_validate(genre) for genre in genres])


@router.post("", response_model=GenreEnvelope, status_code=status.HTTP_201_CREATED)
def create_genre(
    genre_data: GenreCreate,
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> GenreEnvelope:
    """Create a genre; names are unique."""
    genre = GenreRepository(db).create(genre_data.name)
    db.commit()
    logger.info("User %s created genre %s", current_user.id, genre.id)
    response.headers["Location"] = f"/api/v1/genres/{genre.id}"
    return GenreEnvelope(genre=GenreResponse.model_validate(genre))


@router.get("/{genre_id}", response_model=GenreEnvelope)
def get_genre(genre_id: int, db: SessionDep) -> GenreEnvelope:
    return GenreEnvelope(genre=GenreResponse.model_validate(GenreRepository(db).get(genre_id)))


@router.patch("/{genre_id}", response_model=GenreEnvelope)
def update_genre(
    genre_id: int,
    genre_data: GenreUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> GenreEnvelope:
    """Rename a genre, guarded by its version like movie edits."""
    repo = GenreRepository(db)
    genre = repo.get(genre_id)
    if genre_data.version is not None and genre_data.version != genre.version:
        raise EditConflictError(f"genre {genre_id} is at version {genre.version}")

    genre = repo.rename(genre, name=genre_data.name, expected_version=genre.version)
    db.commit()
    logger.info("User %s renamed genre %s", current_user.id, genre_id)
    return GenreEnvelope(genre=GenreResponse.model_validate(genre))


@router.delete("/{genre_id}", response_model=MessageResponse)
def delete_genre(genre_id: int, current_user: CurrentUserDep, db: SessionDep) -> MessageResponse:
    """Delete a genre and detach it from every movie."""
    GenreRepository(db).delete(genre_id)
    db.commit()
    logger.info("User %s deleted genre %s", current_user.id, genre_id)
    return MessageResponse(message="genre successfully deleted")
