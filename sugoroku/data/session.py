"""
Session management for SQLAlchemy.

Provides:
- Engine and session factory
- Lifecycle management (init_db, close_db)
- A transactional session_scope context manager
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from sugoroku.data.config import get_settings
from sugoroku.data.models import Base

logger = logging.getLogger(__name__)

# Global engine and session factory (initialized once)
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    """
    Get the global engine.

    Raises:
        RuntimeError: If engine not initialized (call init_db first)
    """
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> sessionmaker:
    """
    Get the global session factory.

    Raises:
        RuntimeError: If session factory not initialized
    """
    if _session_factory is None:
        raise RuntimeError("Session factory not initialized. Call init_db() first.")
    return _session_factory


def init_db(url: Optional[str] = None) -> Engine:
    """
    Initialize the database engine and session factory.

    Args:
        url: Connection URL overriding ``SUGOROKU_DB_URL``.
    """
    global _engine, _session_factory

    settings = get_settings()
    url = url or settings.url
    logger.info(f"Initializing save database: {url.split('@')[-1]}")

    _engine = create_engine(url, **settings.get_engine_kwargs())
    _session_factory = sessionmaker(
        bind=_engine,
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine


def close_db() -> None:
    """Dispose of the engine."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing save database")
        _engine.dispose()
        _engine = None
        _session_factory = None


def create_tables() -> None:
    """Create all tables defined in Base.metadata."""
    Base.metadata.create_all(get_engine())
    logger.info("Save tables ready")


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context manager for database sessions.

    Usage:
        with session_scope() as session:
            SaveRepository(session).save("slot_1", state)

    Auto-commits on success, rolls back on exception.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
