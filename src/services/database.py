"""
Database access for restaurant-costing.

Only two places reach the database: loading a costing snapshot and storing
physical inventory counts. Both open their transaction through
session_scope(). Everything else works on records already in memory.
"""

from typing import Optional
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..utils.config import get_config
from ..models.base import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _is_in_memory(database_url: str) -> bool:
    return ":memory:" in database_url or "mode=memory" in database_url


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL, or for the configured database.

    In-memory SQLite gets a StaticPool so every session sees the same
    database; file databases wait up to 30 seconds on a locked file.
    """
    if database_url is None:
        config = get_config()
        config.ensure_directories()
        database_url = config.database_url

    logger.info(f"Opening database {database_url}")

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo)
    if _is_in_memory(database_url):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False, "timeout": 30},
    )


def init_database(engine: Optional[Engine] = None) -> None:
    """Create any missing table. Existing tables and rows are left alone."""
    # Importing the package registers every model on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(engine or get_engine())
    logger.info("Database schema ready")


def get_engine(force_recreate: bool = False) -> Engine:
    """Shared engine, created on first use."""
    global _engine

    if _engine is None or force_recreate:
        _engine = create_database_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """Shared sessionmaker. Objects stay readable after commit."""
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope():
    """
    One unit of work: commit if the block succeeds, roll back if it raises.

    Example:
        with session_scope() as session:
            session.add(InventoryCount(count_date=utc_now()))
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def close_connections() -> None:
    """Dispose of the shared engine; the next call to get_engine() rebuilds it."""
    global _engine, _SessionFactory

    _SessionFactory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
    logger.info("Database connections closed")


def initialize_app_database() -> None:
    """Open the configured database and make sure its schema exists."""
    init_database(get_engine())
