"""Typed outcome of a LedgerService operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ledger_kernel.exceptions import (
    AuthorizationError,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
    OrphanedChildError,
    PartialFailureError,
)


class LedgerStatus(str, Enum):
    """Status of a ledger operation."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    STORE_FAILED = "store_failed"


@dataclass(frozen=True)
class LedgerResult:
    """
    Result of a ledger operation.

    ``value`` carries the returned DTO (or None for deletions).  On failure
    ``error_code`` is the ``code`` of the typed error that was raised.
    """

    status: LedgerStatus
    value: Any = None
    message: str | None = None
    error_code: str | None = None
    warnings: tuple[str, ...] = ()

    @property
    def is_success(self) -> bool:
        return self.status in (
            LedgerStatus.SUCCESS,
            LedgerStatus.PARTIAL_SUCCESS,
        )

    @classmethod
    def ok(cls, value: Any = None) -> "LedgerResult":
        return cls(status=LedgerStatus.SUCCESS, value=value)

    @classmethod
    def partial(cls, exc: PartialFailureError) -> "LedgerResult":
        return cls(
            status=LedgerStatus.PARTIAL_SUCCESS,
            value=exc.result,
            message=str(exc),
            error_code=exc.code,
            warnings=(str(exc),),
        )

    @classmethod
    def from_error(cls, exc: LedgerError) -> "LedgerResult":
        return cls(
            status=status_for(exc),
            message=str(exc),
            error_code=exc.code,
        )


def status_for(exc: LedgerError) -> LedgerStatus:
    """Map a typed ledger error to the result status reported to callers."""
    if isinstance(exc, LedgerValidationError):
        return LedgerStatus.INVALID
    if isinstance(exc, NotFoundError):
        return LedgerStatus.NOT_FOUND
    if isinstance(exc, OrphanedChildError):
        return LedgerStatus.CONFLICT
    if isinstance(exc, AuthorizationError):
        return LedgerStatus.FORBIDDEN
    if isinstance(exc, PartialFailureError):
        return LedgerStatus.PARTIAL_SUCCESS
    return LedgerStatus.STORE_FAILED
