# src/cinemesis/main.py
"""Main entry point for the Cinemesis application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from cinemesis.api.v1 import (
    auth_router,
    genres_router,
    movies_router,
    reviews_router,
    users_router,
    votes_router,
)
from cinemesis.core.errors import (
    EditConflictError,
    FailedValidationError,
    PermissionDeniedError,
    RecordNotFoundError,
    StorageError,
)
from cinemesis.core.settings import settings
from cinemesis.db.session import create_tables

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"

# Initialize FastAPI app
app = FastAPI(
    title="Cinemesis API",
    description="Movie review service with genre filters and review voting",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


@app.exception_handler(FailedValidationError)
async def failed_validation_handler(request: Request, exc: FailedValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": exc.errors},
    )


@app.exception_handler(RecordNotFoundError)
async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "the requested resource could not be found"},
    )


@app.exception_handler(EditConflictError)
async def edit_conflict_handler(request: Request, exc: EditConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "unable to update the record due to an edit conflict, please try again"},
    )


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc)},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SERVER_ERROR_MESSAGE},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SERVER_ERROR_MESSAGE},
    )


# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(genres_router, prefix="/api/v1")
app.include_router(movies_router, prefix="/api/v1")
app.include_router(reviews_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    create_tables()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Cinemesis API",
        "version": settings.app_version,
        "description": "Movie review service with genre filters and review voting",
        "docs": "/docs",
        "redoc": "/redoc"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cinemesis.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
