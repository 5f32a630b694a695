"""
Dayboard Database

SQLAlchemy engine, session factory and declarative base.
Every round trip to the store is bounded by STORE_TIMEOUT_SECONDS.
"""

from typing import Any, Dict

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings


def build_connect_args(database_url: str, timeout_seconds: float) -> Dict[str, Any]:
    """Driver arguments that bound connection and statement time."""
    if database_url.startswith("sqlite"):
        # Needed for SQLite; timeout is the busy-wait on a locked database
        return {"check_same_thread": False, "timeout": timeout_seconds}
    if database_url.startswith("postgresql"):
        return {
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={int(timeout_seconds * 1000)}",
        }
    return {}


def make_engine(database_url: str, timeout_seconds: float, **engine_kwargs: Any) -> Engine:
    """Create an engine for the given URL with store timeouts applied."""
    kwargs: Dict[str, Any] = {
        "connect_args": build_connect_args(database_url, timeout_seconds),
        "pool_pre_ping": True,
    }
    if not database_url.startswith("sqlite"):
        kwargs["pool_timeout"] = timeout_seconds
    kwargs.update(engine_kwargs)
    engine = create_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# Create engine
engine = make_engine(settings.database_url, settings.store_timeout_seconds)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """Dependency for getting database sessions."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database tables."""
    from . import models  # noqa: F401  (registers tables on Base)

    Base.metadata.create_all(bind=engine)
