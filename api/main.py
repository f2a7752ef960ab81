"""Bookstore API: FastAPI entry point.

``create_app(config)`` wires configuration, logging, tracing, the database,
middleware, error handlers and routers. Run with::

    bookstore-api                      # BookstoreConfig.from_env()
    uvicorn --factory api.main:create_app
"""

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import RequestContextMiddleware
from core.database import Database
from core.errors import AppError
from core.observability.logging import configure_logging
from core.observability.otel_setup import setup_tracing
from patterns.domain_config import BookstoreConfig

VERSION = "0.1.0"

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """User errors -> 400, system errors -> 500."""
    status_code = 400 if exc.is_user_error else 500
    if exc.is_system_error:
        logger.error("request.system_error", error=exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request.invalid", errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request data"})


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    config: BookstoreConfig | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Build the application from an explicit config."""
    config = config or BookstoreConfig.from_env()
    configure_logging(config.server.log_level, json=config.server.log_json)
    if config.server.tracing:
        setup_tracing(config.server.service_name, config.server.otlp_endpoint)

    database = database or Database(config.database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup/shutdown hooks."""
        if config.database.auto_migrate:
            await database.init_db()
        logger.info("api.started", service=config.server.service_name, version=VERSION)
        yield
        await database.close()
        logger.info("api.stopped")

    app = FastAPI(
        title="Bookstore API",
        description="User accounts, book catalog and transactional order placement",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Outermost: request id, logging context, span, failure recovery
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    from verticals.bookstore.router import router as bookstore_router

    app.include_router(bookstore_router, prefix="/api/v1", tags=["Bookstore"])

    @app.get("/health")
    async def health():
        database_ok = await database.ping()
        return {
            "status": "healthy" if database_ok else "degraded",
            "database": "ok" if database_ok else "unreachable",
            "version": VERSION,
        }

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    config = BookstoreConfig.from_env()
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level.lower(),
    )


if __name__ == "__main__":
    run()
