"""Async SQLAlchemy engine, session factory and declarative base."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from swiftroute.config import Settings, settings
from swiftroute.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(cfg: Settings) -> AsyncEngine:
    """Create the engine with bounded connect/command timeouts (asyncpg)."""
    if not cfg.database_url.strip():
        raise ConfigurationError("Server configuration error: DATABASE_URL is missing.")
    return create_async_engine(
        cfg.database_url,
        echo=cfg.debug,
        pool_pre_ping=True,
        connect_args={
            "timeout": cfg.db_connect_timeout_seconds,
            "command_timeout": cfg.db_command_timeout_seconds,
        },
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings)
        logger.info("Database engine created")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
