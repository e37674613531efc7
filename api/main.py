"""
FastAPI main application for the BookStore API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import APIConfig, config
from api.handlers import BookHandlers
from api.models import HealthResponse
from api.routes import router as books_router
from store.database import MongoBookStore
from store.memory import InMemoryBookStore
from store.models import BookStore
from utilities.logger import RequestLogger, setup_logging

logger = structlog.get_logger(__name__)


def create_app(store: Optional[BookStore] = None, app_config: APIConfig = config) -> FastAPI:
    """
    Build the application.

    Args:
        store: Store to serve from; when omitted one is built from ``app_config``
        app_config: API settings

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        setup_logging(
            log_level=app_config.log_level,
            log_format=app_config.log_format,
            log_file=app_config.log_file,
            debug=app_config.debug,
        )
        logger.info("Starting BookStore API", store_backend=app_config.store_backend)

        book_store = store
        if book_store is None:
            if app_config.store_backend == "memory":
                book_store = InMemoryBookStore(authors=app_config.memory_authors)
            else:
                book_store = MongoBookStore(
                    app_config.mongodb_url,
                    app_config.mongodb_database,
                    books_collection=app_config.books_collection,
                    authors_collection=app_config.authors_collection,
                    counters_collection=app_config.counters_collection,
                )
                try:
                    await book_store.connect()
                except Exception as e:
                    logger.error("Failed to connect to database", error=str(e))
                    raise

        app.state.store = book_store
        app.state.handlers = BookHandlers(
            book_store, RequestLogger(), app_config.error_500_message
        )

        yield

        logger.info("Shutting down BookStore API")
        if isinstance(book_store, MongoBookStore):
            await book_store.disconnect()

    app = FastAPI(
        title=app_config.api_title,
        description=app_config.api_description,
        version=app_config.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_credentials=app_config.cors_allow_credentials,
        allow_methods=app_config.cors_allow_methods,
        allow_headers=app_config.cors_allow_headers,
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed input is a client error with an empty body."""
        logger.warning("Invalid request", path=request.url.path, errors=len(exc.errors()))
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=app_config.error_500_message,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        db_status = "healthy"
        book_store = getattr(request.app.state, "store", None)
        if isinstance(book_store, MongoBookStore):
            health_info = await book_store.health_check()
            db_status = health_info.get("status", "unknown")
        elif book_store is None:
            db_status = "unavailable"

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=app_config.api_version,
            database_status=db_status,
        )

    app.include_router(books_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
