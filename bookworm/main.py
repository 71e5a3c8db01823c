"""
FastAPI Application Entry Point

create_app() builds the application:

1. Lifespan
   - startup logging; in development the tables are created on boot
2. Middleware
   - slowapi rate limiting and CORS
3. Exception handlers
   - BookwormError subclasses map to their HTTP status
   - database errors and anything unexpected become a logged 500
4. Routers
   - every resource under /api/v1, plus /health and /
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from bookworm import __version__
from bookworm.config import get_settings
from bookworm.database import create_tables
from bookworm.exceptions import BookwormError
from bookworm.routers import (
    admin_router,
    auth_router,
    books_router,
    genres_router,
    goals_router,
    library_router,
    recommendations_router,
    reviews_router,
    social_router,
    stats_router,
    tutorials_router,
)
from bookworm.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting {settings.app_name} {__version__} ({settings.environment})")

    if settings.environment == "development":
        create_tables()
        logger.info("Database tables ensured")

    yield

    logger.info(f"Shutting down {settings.app_name}...")


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Bookworm API

Personal reading tracker.

### Features
- **Library**: shelve books (want to read, currently reading, read) and track progress
- **Stats**: shelf counts, monthly history, genre breakdown, reading streak
- **Recommendations**: picks from your favourite genres, or popular books to start with
- **Reviews**: moderated public reviews that drive each book's rating
- **Goals & Social**: yearly reading goals, follows and an activity feed

### Authentication
JWT bearer tokens from `/api/v1/auth/login`.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(BookwormError)
    async def bookworm_exception_handler(
        request: Request,
        exc: BookwormError,
    ) -> JSONResponse:
        """Map domain errors to their HTTP status with a {"detail": ...} body."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        logger.error(f"Database error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "A database error occurred. Please try again later."
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        The error text is only returned in debug mode.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={"detail": str(exc)},
            )

        return JSONResponse(
            status_code=500,
            content={"detail": "An internal error occurred."},
        )

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    api_prefix = f"/api/{settings.api_version}"

    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(books_router, prefix=api_prefix)
    app.include_router(genres_router, prefix=api_prefix)
    app.include_router(library_router, prefix=api_prefix)
    app.include_router(stats_router, prefix=api_prefix)
    app.include_router(recommendations_router, prefix=api_prefix)
    app.include_router(reviews_router, prefix=api_prefix)
    app.include_router(goals_router, prefix=api_prefix)
    app.include_router(social_router, prefix=api_prefix)
    app.include_router(tutorials_router, prefix=api_prefix)
    app.include_router(admin_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and healthy.",
    )
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": __version__,
            "environment": settings.environment,
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "default_limit": settings.rate_limit_default,
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# uvicorn bookworm.main:app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookworm.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
