"""
Module: inventory_kernel.db.base
Responsibility: Declarative bases and portable column types for every
    inventory table.
Architecture position: Kernel > DB, the bottom of the kernel.  Every model
    imports from here; nothing here imports models/, services/,
    selectors/ or domain/.

Conventions:
    - Primary keys are uuid4 values stored as String(36), so the same
      schema runs on PostgreSQL and SQLite.
    - ``int`` columns are BigInteger.  Stock is counted in whole units.
    - ``datetime`` columns are UTCDateTime and always come back UTC-aware,
      even from SQLite, which stores naive text.
    - TrackedBase rows record when and by whom they were created and last
      changed.
"""

from datetime import datetime, timezone
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID bound as its 36-character string form and read back as UUID."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(str(value))


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp normalized to UTC.

    Naive datetimes are refused on write.  On SQLite the offset is stripped
    before storage and re-attached on read, so comparisons against an
    injected Clock never mix naive and aware values.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None) if dialect.name == "sqlite" else value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):

    type_annotation_map: ClassVar[dict] = {
        datetime: UTCDateTime(),
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Base for mutable rows (locations, ledger rows, sync configs).

    created_at/updated_at default to the database clock; updated_at moves on
    every ORM update.  created_by_id is required, updated_by_id stays NULL
    until the first change.  Services that hold a Clock set these
    explicitly.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    created_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
