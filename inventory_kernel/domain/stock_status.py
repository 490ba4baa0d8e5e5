"""
Stock status classification -- pure functions.

A product's total available units fall into exactly one bucket:

    available <= 0                      -> out_of_stock
    0 < available <= low_stock          -> low_stock
    available >= overstock              -> overstock
    otherwise                           -> adequate

Thresholds are caller inputs; the kernel holds no defaults of its own
beyond the ``DEFAULT_THRESHOLDS`` convenience value.
"""

from dataclasses import dataclass
from enum import Enum

from inventory_kernel.exceptions import InvalidThresholdsError


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    ADEQUATE = "adequate"
    OVERSTOCK = "overstock"


@dataclass(frozen=True)
class StockThresholds:
    """
    Low-stock and overstock cut-offs in units.

    Raises:
        InvalidThresholdsError: if ``low_stock`` is negative or
            ``overstock`` is not strictly greater than ``low_stock``.
    """

    low_stock: int
    overstock: int

    def __post_init__(self) -> None:
        for value in (self.low_stock, self.overstock):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidThresholdsError(
                    self.low_stock, self.overstock, "thresholds must be integers"
                )
        if self.low_stock < 0:
            raise InvalidThresholdsError(
                self.low_stock, self.overstock, "low stock threshold is negative"
            )
        if self.overstock <= self.low_stock:
            raise InvalidThresholdsError(
                self.low_stock,
                self.overstock,
                "overstock threshold must exceed low stock threshold",
            )


DEFAULT_THRESHOLDS = StockThresholds(low_stock=5, overstock=100)


def stock_status(available: int, thresholds: StockThresholds) -> StockStatus:
    """Classify a total available quantity against thresholds."""
    if available <= 0:
        return StockStatus.OUT_OF_STOCK
    if available <= thresholds.low_stock:
        return StockStatus.LOW_STOCK
    if available >= thresholds.overstock:
        return StockStatus.OVERSTOCK
    return StockStatus.ADEQUATE
