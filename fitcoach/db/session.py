from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from fitcoach.config.settings import settings
from fitcoach.db.models import Base

# Lazy initialization to avoid import-time database connections
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {settings.database_url}")

        connect_args = {}
        if "sqlite" in settings.database_url.lower():
            connect_args = {"check_same_thread": False}
        else:
            connect_args = {"connect_timeout": 10, "application_name": "fitcoach"}

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=False,
            pool_pre_ping=True,  # Verify connections before using
        )
        logger.info("Database engine initialized")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory (lazy initialization)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
        logger.info("Database session factory initialized")
    return _SessionLocal


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine or _get_engine())


@contextmanager
def get_session(factory: sessionmaker[Session] | None = None) -> Generator[Session, None, None]:
    """Get database session context manager.

    Commits when the block exits normally, rolls back and re-raises otherwise.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("Rolling back database session")
        session.rollback()
        raise
    finally:
        session.close()
