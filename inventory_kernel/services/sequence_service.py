"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly increasing sequence numbers for movements.  A named
    counter row is incremented in place with a single UPDATE, which takes
    the row lock (PostgreSQL) or runs under the held write lock (SQLite),
    and the new value is read back inside the same transaction.

Invariants enforced:
    - Sequence monotonicity: the locked counter row is the sole source of
      truth.  The max-plus-one aggregate over movements is never used.
    - Transactional: an increment is only visible after the caller commits.
      A rollback returns the value.

Lock order:
    Ledger services allocate a sequence after locking their ledger rows,
    never before, so every transaction acquires locks in the same order.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.sequence_counter import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Usage:
        with session_scope() as session:
            seq = SequenceService(session).next_value(SequenceService.MOVEMENT)
    """

    # Well-known sequence names
    MOVEMENT = "inventory_movement"

    WELL_KNOWN = (MOVEMENT,)

    def __init__(self, session: Session):
        self._session = session

    def _increment(self, sequence_name: str) -> bool:
        result = self._session.execute(
            update(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .values(current_value=SequenceCounter.current_value + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        The counter row is created on first use when initialize_sequences()
        has not seeded it.

        Returns:
            The next sequence value (always > 0).
        """
        if not self._increment(sequence_name):
            # First use: create the counter; another transaction may race us
            savepoint = self._session.begin_nested()
            try:
                self._session.add(SequenceCounter(name=sequence_name, current_value=0))
                self._session.flush()
                savepoint.commit()
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
            self._increment(sequence_name)

        value = self._session.execute(
            select(SequenceCounter.current_value)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one()

        assert value > 0, "sequence value must be strictly positive"
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": value},
        )
        return value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value without incrementing; None if the sequence is unknown."""
        return self._session.execute(
            select(SequenceCounter.current_value)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

    def initialize_sequences(self) -> None:
        """
        Create all well-known counters that do not exist yet.

        Called during schema setup so the hot path never has to create one.
        """
        existing = set(
            self._session.execute(
                select(SequenceCounter.name)
                .where(SequenceCounter.name.in_(self.WELL_KNOWN))
            ).scalars()
        )
        for name in self.WELL_KNOWN:
            if name not in existing:
                self._session.add(SequenceCounter(name=name, current_value=0))

        self._session.flush()
