import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from careerflow.app.core.config import get_settings

log = logging.getLogger(__name__)

# Created on first use so importing the app never opens a connection.
_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def engine_options(database_url: str) -> dict[str, Any]:
    """Return `create_engine` keyword arguments for a CareerFlow database URL.

    Args:
        database_url (str): The configured URL, PostgreSQL assembled from the DB_*
            settings, or any URL given in `DATABASE_URL_OVERRIDE`.

    Returns:
        dict[str, Any]: `check_same_thread=False` for SQLite, since FastAPI runs
            sync handlers on worker threads. `pool_pre_ping=True` otherwise, as
            connections can sit idle through a long generation call.

    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


def get_engine() -> Engine:
    """Return the shared engine, creating it from the settings on first use."""
    global _engine
    if _engine is None:
        database_url = str(get_settings().database_url)
        _msg = f"Creating database engine for {database_url.split('://', 1)[0]}"
        log.debug(_msg)
        _engine = create_engine(database_url, **engine_options(database_url))
    return _engine


def get_session_local() -> sessionmaker:
    """Return the shared session factory used by `get_db` and `manage.py`."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Provide one session per request.

    Route logic commits its own writes. Whatever is left uncommitted when the
    request ends is discarded by `close()`.

    Yields:
        Session: The request's database session.

    """
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()
