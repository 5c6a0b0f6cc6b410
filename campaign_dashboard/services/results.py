from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from campaign_dashboard.services.exceptions import (
    HierarchyError,
    RecordNotFound,
    ReferentialViolation,
    StorageFailure,
)

T = TypeVar("T")


class Outcome(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    REFERENTIAL_VIOLATION = "referential_violation"
    STORAGE_FAILURE = "storage_failure"


_OUTCOME_BY_ERROR: dict[type[HierarchyError], Outcome] = {
    RecordNotFound: Outcome.NOT_FOUND,
    ReferentialViolation: Outcome.REFERENTIAL_VIOLATION,
    StorageFailure: Outcome.STORAGE_FAILURE,
}


@dataclass
class StoreResult(Generic[T]):
    """Tagged outcome of a single hierarchy store operation."""

    outcome: Outcome
    value: T | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: T) -> StoreResult[T]:
        return cls(outcome=Outcome.OK, value=value)

    @classmethod
    def from_error(cls, exc: HierarchyError) -> StoreResult[T]:
        outcome = _OUTCOME_BY_ERROR.get(type(exc), Outcome.STORAGE_FAILURE)
        return cls(outcome=outcome, error=str(exc), details=dict(exc.details))

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def is_absent(self) -> bool:
        return self.outcome is Outcome.NOT_FOUND

    def unwrap(self) -> T:
        """Return the value, or raise the exception matching the outcome."""
        if self.ok:
            return self.value  # type: ignore[return-value]
        if self.outcome is Outcome.NOT_FOUND:
            raise RecordNotFound(self.error or "Record not found", self.details)
        if self.outcome is Outcome.REFERENTIAL_VIOLATION:
            raise ReferentialViolation(self.error or "Referential violation", self.details)
        raise StorageFailure(self.error or "Storage failure", self.details)
