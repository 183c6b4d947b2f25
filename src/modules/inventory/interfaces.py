"""Inventory ledger interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID


class IInventoryLedger(ABC):
    """Authoritative per-product stock counter."""

    @abstractmethod
    def adjust(self, product_id: UUID, delta: int) -> int:
        """Atomically add *delta* (negative to reserve) and return the new quantity.

        Raises ``ProductNotFound`` for an unknown product and
        ``InsufficientStock`` when the result would be negative; in both
        cases nothing is applied.
        """

    @abstractmethod
    def available(self, product_id: UUID) -> int:
        """Return the current quantity on hand."""
