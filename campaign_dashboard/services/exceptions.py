"""Exceptions for the campaign hierarchy store.

These exceptions are **internal**: they are raised inside the store's
helper methods and converted to ``StoreResult`` at the public boundary of
``HierarchyStore``.  They should never escape into calling code unless a
caller explicitly asks for them via ``StoreResult.unwrap()``.
"""

from __future__ import annotations

import uuid
from typing import Any


class HierarchyError(Exception):
    """Base exception for all hierarchy store errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class RecordNotFound(HierarchyError):
    """Raised when the targeted record does not exist."""


class ReferentialViolation(HierarchyError):
    """Raised when a parent reference does not resolve to a usable row."""

    @classmethod
    def for_parent(
        cls, parent_type: str, parent_id: uuid.UUID, reason: str = "not found"
    ) -> ReferentialViolation:
        return cls(
            f"{parent_type} with id {parent_id} {reason}",
            details={"parent_type": parent_type, "parent_id": str(parent_id)},
        )


class StorageFailure(HierarchyError):
    """Raised when the persistence layer rejects or fails a statement."""
