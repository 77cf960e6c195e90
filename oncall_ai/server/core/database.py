"""
Database Connection Management.

This module owns the process-wide asynchronous SQLAlchemy engine and session
factory. Persistence is optional: without ``DATABASE_URL`` the service keeps
runs and approvals in memory.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from oncall_ai.agent_core.repos.sql import create_all, create_engine, create_sessionmaker
from oncall_ai.core.logging_config import get_logger
from oncall_ai.server.core.config import settings

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def get_session_maker() -> Optional[async_sessionmaker[AsyncSession]]:
    """Return the shared session factory, or ``None`` when no database is configured."""
    global _engine, _session_maker
    if not settings.database_url:
        return None
    if _session_maker is None:
        _engine = create_engine(settings.database_url)
        _session_maker = create_sessionmaker(_engine)
    return _session_maker


async def init_db() -> None:
    """
    Initialize the database.

    Creates all tables defined in the agent_core ORM metadata.
    NOTE: In production, schema migrations should be applied instead.
    """
    if get_session_maker() is None:
        logger.info("DATABASE_URL not set; using in-memory run and approval storage")
        return
    assert _engine is not None
    await create_all(_engine)


async def dispose_db() -> None:
    """Close pooled connections on shutdown."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
