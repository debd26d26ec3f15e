# src/cinemesis/api/v1/endpoints/movies.py
"""Movie-related endpoints for the Cinemesis API."""

import logging

from fastapi import APIRouter, Request, Response, status

from cinemesis.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from cinemesis.core.errors import EditConflictError
from cinemesis.core.validator import Validator
from cinemesis.filters.movies import parse_movie_filters, validate_movie_filters
from cinemesis.filters.reviews import parse_review_filters, validate_review_filters
from cinemesis.query import calculate_metadata
from cinemesis.repositories import GenreRepository, MovieRepository, ReviewRepository
from cinemesis.schemas.common import MessageResponse, ValidationErrorResponse
from cinemesis.schemas.movie import (
    GenreListResponse,
    GenreResponse,
    MovieCreate,
    MovieDetailEnvelope,
    MovieEnvelope,
    MovieGenres,
    MovieListResponse,
    MovieResponse,
    MovieUpdate,
)
from cinemesis.schemas.review import ReviewListResponse, ReviewResponse, TopReviewsResponse

router = APIRouter(prefix="/movies", tags=["movies"])
logger = logging.getLogger(__name__)

TOP_REVIEWS_LIMIT = 5


@router.post("", response_model=MovieEnvelope, status_code=status.HTTP_201_CREATED)
def create_movie(
    movie_data: MovieCreate,
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MovieEnvelope:
    """Create a movie and attach its genres."""
    movie = MovieRepository(db).create(
        title=movie_data.title,
        year=movie_data.year,
        runtime=movie_data.runtime,
        genre_names=movie_data.genres,
    )
    db.commit()
    logger.info("User %s created movie %s", current_user.id, movie.id)
    response.headers["Location"] = f"/api/v1/movies/{movie.id}"
    return MovieEnvelope(movie=MovieResponse.model_validate(movie))


@router.get(
    "",
    response_model=MovieListResponse,
    responses={422: {"model": ValidationErrorResponse}},
)
def list_movies(request: Request, db: SessionDep) -> MovieListResponse:
    """List movies with title, genre, year and runtime filters plus sorting and paging."""
    v = Validator()
    filters = parse_movie_filters(request.query_params, v)
    validate_movie_filters(v, filters)
    v.raise_if_invalid()

    rows, total = MovieRepository(db).list_filtered(filters)
    return MovieListResponse(
        movies=[MovieResponse.model_validate(row) for row in rows],
        metadata=calculate_metadata(total, filters.page, filters.page_size),
    )


@router.get("/{movie_id}", response_model=MovieDetailEnvelope)
def get_movie(movie_id: int, db: SessionDep) -> MovieDetailEnvelope:
    """Return a movie with its genres and its most upvoted reviews."""
    movie = MovieRepository(db).get(movie_id)
    reviews = ReviewRepository(db).top_for_movie(movie_id, TOP_REVIEWS_LIMIT)
    return MovieDetailEnvelope(
        movie=MovieResponse.model_validate(movie),
        reviews=[ReviewResponse.model_validate(row) for row in reviews],
    )


@router.patch("/{movie_id}", response_model=MovieEnvelope)
def update_movie(
    movie_id: int,
    movie_data: MovieUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MovieEnvelope:
    """Partially update a movie.

    The write only succeeds if nobody changed the movie since it was read
    (or since ``version`` when the client supplies it).
    """
    repo = MovieRepository(db)
    movie = repo.get(movie_id)
    if movie_data.version is not None and movie_data.version != movie.version:
        raise EditConflictError(f"movie {movie_id} is at version {movie.version}")

    movie = repo.update(
        movie,
        expected_version=movie.version,
        title=movie_data.title if movie_data.title is not None else movie.title,
        year=movie_data.year if movie_data.year is not None else movie.year,
        runtime=movie_data.runtime if movie_data.runtime is not None else movie.runtime,
        genre_names=movie_data.genres,
    )
    db.commit()
    logger.info("User %s updated movie %s to version %s", current_user.id, movie.id, movie.version)
    return MovieEnvelope(movie=MovieResponse.model_validate(movie))


@router.delete("/{movie_id}", response_model=MessageResponse)
def delete_movie(
    movie_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Delete a movie together with its reviews and votes."""
    MovieRepository(db).delete(movie_id)
    db.commit()
    logger.info("User %s deleted movie %s", current_user.id, movie_id)
    return MessageResponse(message="movie successfully deleted")


@router.get(
    "/{movie_id}/reviews",
    response_model=ReviewListResponse,
    responses={422: {"model": ValidationErrorResponse}},
)
def list_movie_reviews(
    movie_id: int,
    request: Request,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> ReviewListResponse:
    """List a movie's reviews with rating, upvote and date filters plus sorting and paging."""
    MovieRepository(db).get(movie_id)

    v = Validator()
    filters = parse_review_filters(request.query_params, v, movie_id=movie_id)
    validate_review_filters(v, filters)
    v.raise_if_invalid()

    rows, total = ReviewRepository(db).list_filtered(filters, viewer.id if viewer else None)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(row) for row in rows],
        metadata=calculate_metadata(total, filters.page, filters.page_size),
    )


@router.get("/{movie_id}/reviews/top", response_model=TopReviewsResponse)
def list_top_movie_reviews(movie_id: int, db: SessionDep) -> TopReviewsResponse:
    """Return the five most upvoted reviews of a movie."""
    MovieRepository(db).get(movie_id)
    rows = ReviewRepository(db).top_for_movie(movie_id, TOP_REVIEWS_LIMIT)
    return TopReviewsResponse(reviews=[ReviewResponse.model_validate(row) for row in rows])


@router.get("/{movie_id}/genres", response_model=GenreListResponse)
def list_movie_genres(movie_id: int, db: SessionDep) -> GenreListResponse:
    MovieRepository(db).get(movie_id)
    genres = GenreRepository(db).for_movie(movie_id)
    return GenreListResponse(genres=[GenreResponse.model_validate(genre) for genre in genres])


@router.put("/{movie_id}/genres", response_model=GenreListResponse)
def replace_movie_genres(
    movie_id: int,
    genre_data: MovieGenres,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> GenreListResponse:
    """Replace a movie's genres with the given names, creating unknown ones."""
    movie = MovieRepository(db).get(movie_id)
    genres = GenreRepository(db).replace_for_movie(movie, genre_data.genres)
    db.commit()
    logger.info("User %s replaced genres of movie %s", current_user.id, movie_id)
    return GenreListResponse(genres=[GenreResponse.model_validate(genre) for genre in genres])


@router.patch("/{movie_id}/genres", response_model=GenreListResponse)
def attach_movie_genres(
    movie_id: int,
    genre_data: MovieGenres,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> GenreListResponse:
    """Add genres to a movie, keeping the ones it already has."""
    movie = MovieRepository(db).get(movie_id)
    genres = GenreRepository(db).attach_to_movie(movie, genre_data.genres)
    db.commit()
    logger.info("User %s attached genres to movie %s", current_user.id, movie_id)
    return GenreListResponse(genres=[GenreResponse.model_validate(genre) for genre in genres])
