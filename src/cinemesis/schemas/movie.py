# src/cinemesis/schemas/movie.py
"""Movie and genre Pydantic schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cinemesis.core.validator import unique
from cinemesis.schemas.common import PaginationMetadata
from cinemesis.schemas.review import ReviewResponse

EARLIEST_YEAR = 1888


def _check_year(year: int) -> int:
    if year < EARLIEST_YEAR:
        raise ValueError(f"must be greater than {EARLIEST_YEAR}")
    if year > date.today().year:
        raise ValueError("must not be in the future")
    return year


def _check_genre_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("must not be blank")
    if len(cleaned.encode("utf-8")) > 100:
        raise ValueError("must not be more than 100 bytes long")
    return cleaned


def _check_genres(names: list[str]) -> list[str]:
    cleaned = [name.strip() for name in names]
    if any(not name for name in cleaned):
        raise ValueError("must not contain empty values")
    if any(len(name.encode("utf-8")) > 100 for name in cleaned):
        raise ValueError("must not be more than 100 bytes long")
    if not unique(cleaned):
        raise ValueError("must not contain duplicate values")
    return cleaned


class GenreResponse(BaseModel):
    """Genre as returned by the API."""

    id: int
    name: str
    version: int

    model_config = ConfigDict(from_attributes=True)


class GenreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_genre_name(value)


class GenreUpdate(BaseModel):
    """Rename a genre; ``version`` pins the edit to the version the client read."""

    name: str = Field(..., min_length=1, max_length=100)
    version: int | None = Field(None, ge=1, description="Expected current version")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_genre_name(value)


class MovieGenres(BaseModel):
    """Genre names to set on, or add to, a movie."""

    genres: list[str] = Field(..., min_length=1, max_length=5)

    @field_validator("genres")
    @classmethod
    def validate_genres(cls, value: list[str]) -> list[str]:
        return _check_genres(value)


class GenreEnvelope(BaseModel):
    genre: GenreResponse


class GenreListResponse(BaseModel):
    genres: list[GenreResponse]


class MovieCreate(BaseModel):
    """Schema for creating a new movie."""

    title: str = Field(..., min_length=1, max_length=500)
    year: int
    runtime: int = Field(..., gt=0, description="Runtime in minutes")
    genres: list[str] = Field(..., min_length=1, max_length=5)

    @field_validator("year")
    @classmethod
    def validate_year(cls, value: int) -> int:
        return _check_year(value)

    @field_validator("genres")
    @classmethod
    def validate_genres(cls, value: list[str]) -> list[str]:
        return _check_genres(value)


class MovieUpdate(BaseModel):
    """Partial update; ``version`` pins the edit to the version the client read."""

    title: str | None = Field(None, min_length=1, max_length=500)
    year: int | None = None
    runtime: int | None = Field(None, gt=0)
    genres: list[str] | None = Field(None, min_length=1, max_length=5)
    version: int | None = Field(None, ge=1, description="Expected current version")

    @field_validator("year")
    @classmethod
    def validate_year(cls, value: int | None) -> int | None:
        return None if value is None else _check_year(value)

    @field_validator("genres")
    @classmethod
    def validate_genres(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _check_genres(value)


class MovieResponse(BaseModel):
    """Schema for movie information returned by the API."""

    id: int
    title: str
    year: int
    runtime: int
    genres: list[GenreResponse] = Field(default_factory=list)
    version: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MovieEnvelope(BaseModel):
    movie: MovieResponse


class MovieDetailEnvelope(BaseModel):
    """A movie together with its top reviews."""

    movie: MovieResponse
    reviews: list[ReviewResponse]


class MovieListResponse(BaseModel):
    movies: list[MovieResponse]
    metadata: PaginationMetadata
