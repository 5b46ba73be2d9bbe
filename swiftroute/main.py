"""SwiftRoute — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from swiftroute.adapters.persistence.database import dispose_engine, get_engine
from swiftroute.config import settings
from swiftroute.domain.errors import ConfigurationError
from swiftroute.infrastructure.api.errors import register_exception_handlers
from swiftroute.infrastructure.api.routes_ai import router as ai_router
from swiftroute.infrastructure.api.routes_assignments import router as assignments_router
from swiftroute.infrastructure.api.routes_health import router as health_router
from swiftroute.infrastructure.api.routes_orders import router as orders_router
from swiftroute.infrastructure.api.routes_partners import router as partners_router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s | %(name)s | %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    missing = settings.missing_configuration()
    if missing:
        raise ConfigurationError(f"Server configuration error: {', '.join(missing)} is missing.")

    if settings.storage_backend == "postgres":
        try:
            async with get_engine().begin():
                pass  # Connection pool warmed up
            logger.info("Database connection established")
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            logger.warning("Database not available on startup: %s", e)
    else:
        logger.info("Using in-memory demo storage seeded from %s", settings.csv_data_path)

    logger.info("Suggestion backend: %s", settings.suggester_backend)
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title="SwiftRoute — Delivery Dispatch API",
        description="Order tracking, partner roster and assisted order-to-partner assignment",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(partners_router, prefix="/api")
    app.include_router(assignments_router, prefix="/api")
    app.include_router(ai_router, prefix="/api")

    return app


app = create_app()
