"""
Fleet core engine and session factory for the aircraft store
"""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine as _Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool


DEFAULT_DATABASE_URL: str = "sqlite://"
"""
connection used when the store is accessed before ``init`` was called
"""

PRINT_SQLITE_WARNING: bool = True
"""
switch to log that sqlite is meant for development and tests only
"""

Base = declarative_base()
_engine: Optional[_Engine] = None
_make_session: Optional[sessionmaker] = None
_logger: logging.Logger = logging.getLogger(__name__)


def _is_in_memory(database_url: str) -> bool:
    return database_url == "sqlite://" or ":memory:" in database_url


def init(database_url: str, echo: bool = True, create_all: bool = True):
    """
    Bind the aircraft store to the database at ``database_url``

    A previously bound engine is disposed first, so calling this again
    switches the store over to another database. In-memory sqlite databases
    share one connection, otherwise every session would see an empty store.

    :param database_url: SQLAlchemy URL of the database
    :param echo: switch to log every emitted SQL statement
    :param create_all: switch to create missing tables from the ORM models
        instead of relying on the alembic migrations
    """

    global _engine, _make_session
    if _engine is not None:
        _engine.dispose()

    options = {"echo": echo}
    if database_url.startswith("sqlite:"):
        options["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(database_url):
            _logger.warning("The aircraft store lives in memory and is lost when the process exits.")
            options["poolclass"] = StaticPool
        if PRINT_SQLITE_WARNING:
            _logger.warning("sqlite is fine for development and tests, but use a database server in production.")

    _engine = create_engine(database_url, **options)
    if create_all:
        Base.metadata.create_all(bind=_engine)
    _make_session = sessionmaker(autoflush=False, bind=_engine)


def _ensure_initialized():
    if _engine is None or _make_session is None:
        _logger.warning(
            f"The aircraft store was used before 'init' was called, falling back to {DEFAULT_DATABASE_URL!r}"
        )
        init(DEFAULT_DATABASE_URL)


def get_engine() -> _Engine:
    _ensure_initialized()
    return _engine


def get_new_session() -> Session:
    _ensure_initialized()
    return _make_session()
