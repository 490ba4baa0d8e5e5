"""
Movement log immutability.

Layer 1 (all backends): ORM listeners refuse to flush an UPDATE or DELETE
of an InventoryMovement.
Layer 2 (PostgreSQL): triggers refuse raw SQL that bypasses the ORM.
"""

import pytest
from sqlalchemy import delete, text, update
from sqlalchemy.exc import DBAPIError

from inventory_kernel.db.engine import get_engine
from inventory_kernel.db.immutability import (
    listeners_registered,
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from inventory_kernel.db.triggers import ALL_TRIGGER_NAMES, get_installed_triggers, triggers_installed
from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.models.movement import InventoryMovement


@pytest.fixture
def movement(session, make_location, stock, product_id):
    """One committed movement, loaded as an ORM instance."""
    location = make_location()
    stock(location.id, product_id, 10)
    session.commit()
    return session.query(InventoryMovement).filter_by(product_id=product_id).one()


class TestOrmImmutability:

    def test_listeners_registered_on_import(self, engine):
        assert listeners_registered()

    def test_register_is_idempotent(self, engine):
        register_immutability_listeners()
        register_immutability_listeners()

        assert listeners_registered()

    def test_update_blocked(self, session, movement):
        movement.quantity = 999

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.entity_type == "InventoryMovement"
        assert exc_info.value.entity_id == str(movement.id)
        session.rollback()

    def test_delete_blocked(self, session, movement):
        session.delete(movement)

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_violation_logged(self, session, movement, captured_logs):
        movement.reason = "rewritten"

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

        blocked = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert blocked[0]["operation"] == "UPDATE"
        assert blocked[0]["level"] == "ERROR"


@pytest.mark.postgres
class TestDatabaseImmutability:
    """Raw statements bypass the ORM and must hit the triggers."""

    def test_triggers_installed(self, engine):
        assert triggers_installed(engine)
        assert sorted(get_installed_triggers(engine)) == sorted(ALL_TRIGGER_NAMES)

    def test_bulk_update_blocked(self, session, movement):
        with pytest.raises(DBAPIError, match="IMMUTABILITY_VIOLATION"):
            session.execute(
                update(InventoryMovement)
                .where(InventoryMovement.id == movement.id)
                .values(quantity=1)
                .execution_options(synchronize_session=False)
            )
        session.rollback()

    def test_raw_delete_blocked(self, session, movement):
        with pytest.raises(DBAPIError, match="IMMUTABILITY_VIOLATION"):
            session.execute(text("DELETE FROM inventory_movements"))
        session.rollback()

    def test_triggers_hold_without_orm_listeners(self, session, movement):
        unregister_immutability_listeners()
        try:
            movement.quantity = 2
            with pytest.raises(DBAPIError, match="IMMUTABILITY_VIOLATION"):
                session.flush()
            session.rollback()
        finally:
            register_immutability_listeners()

    def test_bulk_delete_statement_blocked(self, movement):
        with get_engine().connect() as conn:
            with pytest.raises(DBAPIError, match="IMMUTABILITY_VIOLATION"):
                conn.execute(delete(InventoryMovement.__table__))
            conn.rollback()
