"""
tour_services.results -- result objects returned by the services.

Responsibility:
    Frozen dataclasses reporting what a recompute, deletion or ledger sync
    did, unit by unit.  Only RecomputeFailureError blocks an operation;
    everything else is reported here instead of being raised.

Architecture position:
    Services.  No dependency on SQLAlchemy.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum

from tour_kernel.exceptions import PartialDeleteFailureError, TourLedgerError


class RecomputeStatus(str, Enum):
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class UnitFailure:
    """One unit (a month or a record id) that could not be processed."""

    unit: str
    code: str
    message: str

    @classmethod
    def from_error(cls, unit: str, error: Exception) -> UnitFailure:
        code = getattr(error, "code", type(error).__name__)
        return cls(unit=unit, code=code, message=str(error))


@dataclass(frozen=True)
class RecomputeResult:
    """
    Outcome of one recompute run.

    Guarantees:
        - affected lists months written, in the order they were written.
        - pending lists months computed but not written because the run
          stopped at a failure; retrying the same scope covers them.
        - status is FAILED whenever failures or error is set.
    """

    status: RecomputeStatus
    scope: str
    affected: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    pending: tuple[str, ...] = ()
    failures: tuple[UnitFailure, ...] = ()
    error: TourLedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.status is RecomputeStatus.DONE


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of deleting one period or every period of a year."""

    scope: str
    deleted: tuple[str, ...] = ()
    failures: tuple[UnitFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(f.unit for f in self.failures)

    def raise_for_failures(self, year: int) -> None:
        """
        Raises:
            PartialDeleteFailureError: If any month failed.
        """
        if self.failures:
            raise PartialDeleteFailureError(year, list(self.deleted), list(self.failed))


class RecomputeHandle:
    """
    Handle on a recompute started in the background.

    ``status`` is RUNNING until the run finishes, then the status of its
    RecomputeResult.  A run that raised instead of returning a result is
    FAILED; ``result()`` re-raises its exception.
    """

    def __init__(self, scope: str, future: Future):
        self.scope = scope
        self._future = future

    @property
    def status(self) -> RecomputeStatus:
        if not self._future.done():
            return RecomputeStatus.RUNNING
        if self._future.cancelled() or self._future.exception() is not None:
            return RecomputeStatus.FAILED
        return self._future.result().status

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> RecomputeResult:
        return self._future.result(timeout=timeout)


class SyncStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    KEPT = "kept"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of deriving (or removing) the debt of one reservation."""

    reservation_id: str
    status: SyncStatus
    debt_id: str | None = None
    placeholder_company_id: str | None = None
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not SyncStatus.FAILED


@dataclass(frozen=True)
class ReservationSaveResult:
    """
    Outcome of saving a reservation.

    The reservation is the primary record: ``saved`` is True whenever it was
    written, even when its ledger sync failed.  Sync problems surface as
    warnings.
    """

    reservation_id: str
    saved: bool
    sync: SyncResult

    @property
    def warnings(self) -> tuple[str, ...]:
        return (self.sync.warning,) if self.sync.warning else ()


@dataclass(frozen=True)
class ResyncReport:
    """Outcome of a full receivable resync pass."""

    checked: int = 0
    missing: tuple[str, ...] = ()
    created: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    failures: tuple[UnitFailure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures
