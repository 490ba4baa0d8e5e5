"""
Dialect-specific statement builders.

PostgreSQL and SQLite both support ``INSERT ... ON CONFLICT``, but SQLAlchemy
exposes it through each dialect's own ``insert`` construct.  Services ask
this module for the right one instead of branching themselves.
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def dialect_name(session: Session) -> str:
    """Name of the dialect the session is bound to."""
    return session.get_bind().dialect.name


def upsert_insert(session: Session, table):
    """
    Return a dialect ``insert()`` supporting ``on_conflict_do_nothing`` and
    ``on_conflict_do_update``.

    Raises:
        NotImplementedError: for backends without ON CONFLICT support.
    """
    name = dialect_name(session)
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"ON CONFLICT is not supported on {name}")
