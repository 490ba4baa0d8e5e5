"""
Inventory Kernel - multi-location stock ledger

A transactional, audited inventory ledger with:
- Per-location quantity / reserved / available tracking
- Oversell-safe reservations via conditional updates
- Atomic two-row transfers
- Append-only movement log for every quantity change
- Vendor-level rollups and stock classification
"""

__version__ = "0.1.0"
