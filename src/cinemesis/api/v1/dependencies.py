"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cinemesis.core.security import decode_access_token
from cinemesis.db.session import begin_write, get_db
from cinemesis.models import User

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def get_session(request: Request, db: Annotated[Session, Depends(get_db)]) -> Session:
    """Return the request session, started as a writer for mutating methods."""
    if request.method not in READ_METHODS:
        begin_write(db)
    return db


# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_session)]


def _user_from_token(token: str, db: Session) -> User:
    """Resolve a bearer token to a user.

    Raises:
        HTTPException: If the token is invalid or the user no longer exists.
    """
    try:
        user_id = decode_access_token(token)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err

    user = db.get(User, user_id)
    if user is None or not user.activated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token."""
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Like ``get_current_user`` but anonymous callers yield None."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


# Type aliases for user dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
