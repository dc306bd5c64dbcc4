"""
FastAPI main application for the Books API.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from books_api.config import APIConfig, config
from books_api.database import BookStore, build_engine
from books_api.routes import router

# Setup logging
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Books API")

    owns_store = app.state.book_store is None
    if owns_store:
        try:
            app.state.book_store = BookStore(build_engine(app.state.settings))
        except Exception as e:
            logger.error("Failed to create database engine", error=str(e))
            raise

    yield

    # Shutdown
    logger.info("Shutting down Books API")
    if owns_store:
        app.state.book_store.close()
        app.state.book_store = None


async def add_cors_headers(request: Request, call_next):
    """Put the CORS and content type headers on every response."""
    response = await call_next(request)
    response.headers.update(request.app.state.settings.get_cors_headers())
    return response


# Exception handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Answer HTTP errors with the status code only."""
    return Response(status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """A body that does not decode into a book is a bad request."""
    logger.info("Rejected request body", path=request.url.path, errors=len(exc.errors()))
    return Response(status_code=status.HTTP_400_BAD_REQUEST)


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    # Runs outside the middleware stack, so the CORS headers are added here
    return Response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers=request.app.state.settings.get_cors_headers(),
    )


def create_app(store: Optional[BookStore] = None, settings: APIConfig = config) -> FastAPI:
    """
    Build the application.

    Args:
        store: Storage accessor to serve from; built from ``settings`` at startup when omitted
        settings: API configuration

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.book_store = store

    app.middleware("http")(add_cors_headers)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router, prefix=settings.base_path)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "books_api.main:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )
