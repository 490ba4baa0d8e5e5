"""
Module: inventory_kernel.models.sequence_counter
Responsibility: Named counter rows backing SequenceService.  Each row is
    locked (SELECT ... FOR UPDATE) while its value is incremented.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    # Sequence name (e.g., "inventory_movement")
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )
