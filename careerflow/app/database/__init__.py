"""Database configuration and session management.

Functions:
    get_engine: Returns the lazily created SQLAlchemy engine.
    get_session_local: Returns the lazily created session factory.

"""

from .database import get_engine, get_session_local

__all__ = ["get_engine", "get_session_local"]
