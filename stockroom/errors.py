"""Exception types raised by the inventory core."""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for inventory core failures."""


class ValidationError(InventoryError, ValueError):
    """Raised when an operation receives values that break a record invariant."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceError(InventoryError):
    """Raised by a storage backend when a read or write cannot be completed."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
