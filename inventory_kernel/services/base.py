"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for every
    write service.  Services receive a SQLAlchemy ``Session`` and use
    ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or roll back themselves.  The caller (normally
    ``db.engine.session_scope()``) owns commit/rollback, so a ledger update
    and its movement land together or not at all.

Failure modes:
    - Backing-store failures surface as ``StorageError`` (retryable) with
      the SQLAlchemy exception chained as ``__cause__``.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base
from inventory_kernel.exceptions import StorageError
from inventory_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("services.base")


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures inside the block into StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(
            "storage_failure",
            extra={"operation": operation, "error_type": type(exc).__name__},
            exc_info=True,
        )
        raise StorageError(operation, str(exc)) from exc


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel write services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query-only methods -- those belong in
          ``inventory_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
