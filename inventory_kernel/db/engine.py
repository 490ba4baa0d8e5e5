"""
Module: inventory_kernel.db.engine
Responsibility: The process-wide engine and session factory, the
    transactional scope helper, and schema setup/teardown.
Architecture position: Kernel > DB.  create_tables/drop_tables import
    models, triggers and the sequence service lazily; nothing else here
    reaches above db/.

Backends:
    - PostgreSQL (production): QueuePool with pre-ping, READ COMMITTED, and
      explicit row locks (SELECT ... FOR UPDATE) where a read must be
      followed by a dependent write.  Immutability triggers are installed.
    - SQLite (development and tests): file database with a busy timeout.
      Every transaction opens with BEGIN IMMEDIATE and so holds the database
      write lock from its first statement.  That lock stands in for the row
      locks, since SQLite ignores FOR UPDATE.

Failure modes:
    - RuntimeError if the engine or a session is requested before
      init_engine_from_url().
    - sqlalchemy TimeoutError when pool_size + max_overflow connections are
      all checked out for longer than pool_timeout.
"""

import atexit
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from inventory_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

SQLITE_BUSY_TIMEOUT_SECONDS = 30

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."


def _on_sqlite_connect(dbapi_connection, connection_record):
    # pysqlite's own BEGIN handling is switched off; _on_sqlite_begin issues it
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def _backend_options(backend: str, pool_recycle: int) -> dict[str, Any]:
    if backend == "sqlite":
        # File databases only; each :memory: connection would be its own database
        return {
            "connect_args": {
                "timeout": SQLITE_BUSY_TIMEOUT_SECONDS,
                "check_same_thread": False,
            },
        }
    return {
        "pool_recycle": pool_recycle,
        "isolation_level": "READ COMMITTED",
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Calling it again disposes the previous engine and replaces it.

    Args:
        database_url: ``postgresql://`` or ``sqlite:///<file>`` URL.
        echo: Log every SQL statement.
        pool_size: Connections kept open in the pool.
        max_overflow: Extra connections allowed beyond pool_size.
        pool_pre_ping: Test a pooled connection before handing it out.
        pool_timeout: Seconds to wait for a free connection.
        pool_recycle: Reconnect after this many seconds (PostgreSQL).
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    backend = make_url(database_url).get_backend_name()
    _engine = create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_timeout=pool_timeout,
        **_backend_options(backend, pool_recycle),
    )
    if backend == "sqlite":
        event.listen(_engine, "connect", _on_sqlite_connect)
        event.listen(_engine, "begin", _on_sqlite_begin)

    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": backend,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "echo": echo,
        },
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """
    The session factory bound to the current engine.

    Multi-threaded callers (checkout workers, the concurrency tests) take
    one session per thread from it.
    """
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One transaction: commit on normal exit, roll back and re-raise on error.

    Usage:
        with session_scope() as session:
            LedgerService(session).reserve(location_id, product_id, 1, "order-1")
    """
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def is_postgres() -> bool:
    return _engine is not None and _engine.dialect.name == "postgresql"


def create_tables(install_triggers: bool = True) -> None:
    """
    Create the schema and seed the movement sequence counter.

    On PostgreSQL, ``install_triggers`` also installs the triggers that
    refuse UPDATE and DELETE on inventory_movements.
    """
    from inventory_kernel.db.base import Base
    from inventory_kernel.db.triggers import install_immutability_triggers
    from inventory_kernel.models import import_all_models
    from inventory_kernel.services.sequence_service import SequenceService

    engine = get_engine()
    import_all_models()
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        SequenceService(session).initialize_sequences()
        session.commit()

    with_triggers = install_triggers and is_postgres()
    if with_triggers:
        install_immutability_triggers(engine)

    logger.info(
        "schema_created",
        extra={"tables": sorted(Base.metadata.tables), "triggers": with_triggers},
    )


def drop_tables() -> None:
    """Drop the whole schema, triggers included.  Tests only."""
    from inventory_kernel.db.base import Base
    from inventory_kernel.db.triggers import uninstall_immutability_triggers
    from inventory_kernel.models import import_all_models

    engine = get_engine()
    import_all_models()
    if is_postgres():
        uninstall_immutability_triggers(engine)
    Base.metadata.drop_all(engine)


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_on_exit():
    if _engine is not None:
        _engine.dispose()
