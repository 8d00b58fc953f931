"""Database engine utilities for the SQL configuration store.

This module centralizes database connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for configuration store access.

    Args:
        database_url: SQLAlchemy database URL, e.g. `sqlite:///hostwarden.db`.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")

    return create_engine(database_url.strip(), pool_pre_ping=True)
