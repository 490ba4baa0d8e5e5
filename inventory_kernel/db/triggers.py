"""
Module: inventory_kernel.db.triggers
Responsibility: Installing, removing, and verifying the PostgreSQL triggers
    that keep the movement log append-only (Layer 2 of 2).  This is the
    database-level complement to the ORM listeners in db/immutability.py.
Architecture position: Kernel > DB.  MUST NOT import from models/,
    services/, selectors/, domain/, or outer layers.

Triggers:
    trg_inventory_movement_immutability_update -- no UPDATE on movements
    trg_inventory_movement_immutability_delete -- no DELETE on movements

Failure modes:
    - PostgreSQL RAISE EXCEPTION on a violation (surfaces as
      InternalError/DatabaseError through SQLAlchemy).

SQLite has no PL/pgSQL; on that backend only the ORM layer applies.
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine

TRIGGER_FUNCTION = "inventory_movement_immutable"

ALL_TRIGGER_NAMES = [
    "trg_inventory_movement_immutability_update",
    "trg_inventory_movement_immutability_delete",
]

INSTALL_SQL = f"""
CREATE OR REPLACE FUNCTION {TRIGGER_FUNCTION}() RETURNS trigger AS $$
BEGIN
    RAISE EXCEPTION 'IMMUTABILITY_VIOLATION: inventory movement % cannot be %',
        OLD.id, lower(TG_OP);
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS trg_inventory_movement_immutability_update ON inventory_movements;
CREATE TRIGGER trg_inventory_movement_immutability_update
    BEFORE UPDATE ON inventory_movements
    FOR EACH ROW EXECUTE FUNCTION {TRIGGER_FUNCTION}();

DROP TRIGGER IF EXISTS trg_inventory_movement_immutability_delete ON inventory_movements;
CREATE TRIGGER trg_inventory_movement_immutability_delete
    BEFORE DELETE ON inventory_movements
    FOR EACH ROW EXECUTE FUNCTION {TRIGGER_FUNCTION}();
"""

DROP_SQL = f"""
DROP TRIGGER IF EXISTS trg_inventory_movement_immutability_update ON inventory_movements;
DROP TRIGGER IF EXISTS trg_inventory_movement_immutability_delete ON inventory_movements;
DROP FUNCTION IF EXISTS {TRIGGER_FUNCTION}();
"""


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install the movement immutability triggers.

    Preconditions: inventory_movements exists; engine is PostgreSQL.
    Postconditions: every trigger in ALL_TRIGGER_NAMES is installed.
    """
    with engine.connect() as conn:
        conn.execute(text(INSTALL_SQL))
        conn.commit()


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove the movement immutability triggers.

    WARNING: Only for migrations and test teardown.
    """
    with engine.connect() as conn:
        conn.execute(text(DROP_SQL))
        conn.commit()


def get_installed_triggers(engine: Engine) -> list[str]:
    """Names of the movement triggers present in pg_trigger."""
    with engine.connect() as conn:
        result = conn.execute(
            text(
                "SELECT tgname FROM pg_trigger "
                "WHERE tgname = ANY(:names) ORDER BY tgname"
            ),
            {"names": ALL_TRIGGER_NAMES},
        )
        return [row[0] for row in result]


def triggers_installed(engine: Engine) -> bool:
    return sorted(get_installed_triggers(engine)) == sorted(ALL_TRIGGER_NAMES)
