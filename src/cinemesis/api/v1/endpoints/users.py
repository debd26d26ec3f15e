# src/cinemesis/api/v1/endpoints/users.py
"""User registration and per-user review listing."""

from fastapi import APIRouter, Request, status

from cinemesis.api.v1.dependencies import OptionalUserDep, SessionDep
from cinemesis.core.validator import Validator
from cinemesis.filters.reviews import parse_review_filters, validate_review_filters
from cinemesis.query import calculate_metadata
from cinemesis.repositories import ReviewRepository, UserRepository
from cinemesis.schemas.common import ValidationErrorResponse
from cinemesis.schemas.review import ReviewListResponse, ReviewResponse
from cinemesis.schemas.user import UserCreate, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(user_data: UserCreate, db: SessionDep) -> UserResponse:
    """Create a new account."""
    user = UserRepository(db).create(
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )
    db.commit()
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}/reviews",
    response_model=ReviewListResponse,
    responses={422: {"model": ValidationErrorResponse}},
)
def list_user_reviews(
    user_id: int,
    request: Request,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> ReviewListResponse:
    """List the reviews a user has written with filtering, sorting and paging."""
    UserRepository(db).get(user_id)

    v = Validator()
    filters = parse_review_filters(request.query_params, v, user_id=user_id)
    validate_review_filters(v, filters)
    v.raise_if_invalid()

    rows, total = ReviewRepository(db).list_filtered(filters, viewer.id if viewer else None)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(row) for row in rows],
        metadata=calculate_metadata(total, filters.page, filters.page_size),
    )
