"""
tour_services.period_rollup_service -- monthly rollup recompute and deletion.

Responsibility:
    Recomputes Period rows from scratch on demand and deletes single months
    or whole years.  Computation is delegated to
    tour_engines.period_rollup; this service owns reading, ordering of
    writes, the in-progress guard and failure reporting.

Architecture position:
    Services -- orchestration over engines and repository ports.

Invariants enforced:
    - Every source read happens before the first Period write.
    - A failed source read writes nothing; prior Periods stay as they were.
    - Periods are written one month at a time in chronological order.  The
      run stops at the first failed write and reports the months written
      and the months still pending.
    - After a fully successful run the stored Periods in scope equal the
      derived ones: months that no longer have source data are deleted.
    - At most one recompute runs at a time per service instance; a
      concurrent request is rejected, not queued.

Failure modes:
    - RecomputeFailureError (reported in the result) when a source read fails.
    - RecomputeInProgressError (reported in the result) on a concurrent run.
    - StoreError / PeriodNotFoundError per month in delete results.

Consistency note:
    Source edits made while a run is reading may or may not be reflected.
    Re-running the recompute brings Periods up to date.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from uuid import uuid4

from tour_config import LedgerSettings, get_active_settings
from tour_engines.period_rollup import (
    PeriodRollupEngine,
    YearSummary,
    bucket_by_month,
    fold_year,
)
from tour_kernel.domain.clock import Clock, SystemClock
from tour_kernel.domain.dtos import Period
from tour_kernel.exceptions import (
    RecomputeFailureError,
    RecomputeInProgressError,
    StoreError,
    TourLedgerError,
)
from tour_kernel.logging_config import LogContext, get_logger
from tour_services.ports import PeriodStore, SourceReader
from tour_services.results import (
    DeleteResult,
    RecomputeHandle,
    RecomputeResult,
    RecomputeStatus,
    UnitFailure,
)

logger = get_logger("services.period_rollup")


def _scope_label(year: int | None) -> str:
    return "all" if year is None else str(year)


class PeriodRollupService:
    """
    Period Rollup Service.

    Contract:
        Receives the source reader, the period store, a Clock and settings
        via constructor injection.  recompute() is synchronous and returns a
        RecomputeResult; start_recompute() runs the same work on an executor
        and returns a RecomputeHandle.

    Guarantees:
        - Running recompute twice over unchanged sources stores equal Periods.
        - delete_year() attempts every month even after a failure.

    Non-goals:
        - No incremental maintenance; every run recomputes its scope.
        - No mid-run cancellation.
    """

    def __init__(
        self,
        sources: SourceReader,
        periods: PeriodStore,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._sources = sources
        self._periods = periods
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_settings()
        self._engine = PeriodRollupEngine(
            default_currency=self._settings.default_currency,
            tour_expense_category=self._settings.tour_expense_category,
        )
        self._guard = threading.Lock()
        self._executor = executor

    @property
    def is_running(self) -> bool:
        return self._guard.locked()

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    def recompute(self, year: int | None = None) -> RecomputeResult:
        """Recompute every Period of ``year`` (all years when None)."""
        if not self._guard.acquire(blocking=False):
            return self._rejected(year)
        try:
            return self._run(year)
        finally:
            self._guard.release()

    def start_recompute(self, year: int | None = None) -> RecomputeHandle:
        """
        Start a recompute on the executor and return immediately.

        The guard is taken before submitting, so a second call while the
        first is running yields a handle whose result is REJECTED.
        """
        scope = _scope_label(year)
        if not self._guard.acquire(blocking=False):
            future: Future = Future()
            future.set_result(self._rejected(year))
            return RecomputeHandle(scope, future)

        def task() -> RecomputeResult:
            try:
                return self._run(year)
            finally:
                self._guard.release()

        try:
            future = self._get_executor().submit(task)
        except RuntimeError:
            self._guard.release()
            raise
        return RecomputeHandle(scope, future)

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="period-recompute"
            )
        return self._executor

    def _rejected(self, year: int | None) -> RecomputeResult:
        scope = _scope_label(year)
        error = RecomputeInProgressError(scope)
        logger.warning("period_recompute_rejected", extra={"scope": scope})
        return RecomputeResult(status=RecomputeStatus.REJECTED, scope=scope, error=error)

    def _run(self, year: int | None) -> RecomputeResult:
        scope = _scope_label(year)
        with LogContext.bind(correlation_id=str(uuid4()), operation="period_recompute"):
            logger.info("period_recompute_started", extra={"scope": scope})

            # Phase 1: read everything before writing anything
            try:
                tours = self._read("tours", lambda: self._sources.list_tours(year))
                entries = self._read(
                    "financial_entries",
                    lambda: self._sources.list_financial_entries(year),
                )
                reservations = self._read(
                    "reservations", lambda: self._sources.list_reservations(year)
                )
                stored = self._read("periods", lambda: self._periods.list_periods(year))
            except RecomputeFailureError as exc:
                logger.error(
                    "period_recompute_failed",
                    extra={"scope": scope, "source": exc.source, "reason": exc.reason},
                )
                return RecomputeResult(
                    status=RecomputeStatus.FAILED, scope=scope, error=exc
                )

            # Phase 2: compute in memory
            buckets = bucket_by_month(tours, entries, reservations, year=year)
            computed = self._engine.build_all(buckets, today=self._clock.today())
            if buckets.undated:
                logger.warning(
                    "period_recompute_undated_records",
                    extra={"scope": scope, "count": buckets.undated},
                )

            # Phase 3: write month by month
            affected: list[str] = []
            for index, period in enumerate(computed):
                try:
                    self._periods.upsert_period(period)
                except TourLedgerError as exc:
                    pending = tuple(p.period_code for p in computed[index:])
                    logger.error(
                        "period_recompute_write_failed",
                        extra={
                            "scope": scope,
                            "period_code": period.period_code,
                            "written": affected,
                            "pending": list(pending),
                        },
                    )
                    return RecomputeResult(
                        status=RecomputeStatus.FAILED,
                        scope=scope,
                        affected=tuple(affected),
                        pending=pending,
                        failures=(UnitFailure.from_error(period.period_code, exc),),
                        error=exc,
                    )
                affected.append(period.period_code)

            removed, failures = self._remove_stale(stored, computed)
            status = RecomputeStatus.FAILED if failures else RecomputeStatus.DONE
            logger.info(
                "period_recompute_completed",
                extra={
                    "scope": scope,
                    "status": status.value,
                    "affected": len(affected),
                    "removed": len(removed),
                },
            )

        return RecomputeResult(
            status=status,
            scope=scope,
            affected=tuple(affected),
            removed=tuple(removed),
            failures=tuple(failures),
        )

    @staticmethod
    def _read(source: str, fn):
        try:
            return list(fn())
        except StoreError as exc:
            raise RecomputeFailureError(source, exc.reason) from exc

    def _remove_stale(
        self, stored: list[Period], computed: list[Period]
    ) -> tuple[list[str], list[UnitFailure]]:
        keep = {p.period_code for p in computed}
        removed: list[str] = []
        failures: list[UnitFailure] = []
        for period in stored:
            if period.period_code in keep:
                continue
            try:
                self._periods.delete_period(period.period_code)
            except TourLedgerError as exc:
                failures.append(UnitFailure.from_error(period.period_code, exc))
                continue
            removed.append(period.period_code)
            logger.info("period_removed_stale", extra={"period_code": period.period_code})
        return removed, failures

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_period(self, year: int, month: int) -> DeleteResult:
        """Delete exactly the (year, month) Period."""
        code = Period.code_for(year, month)
        try:
            self._periods.delete_period(code)
        except TourLedgerError as exc:
            logger.warning(
                "period_delete_failed",
                extra={"period_code": code, "error_code": exc.code},
            )
            return DeleteResult(scope=code, failures=(UnitFailure.from_error(code, exc),))
        logger.info("period_deleted", extra={"period_code": code})
        return DeleteResult(scope=code, deleted=(code,))

    def delete_year(self, year: int) -> DeleteResult:
        """
        Delete every stored Period of ``year``, one month at a time.

        A failing month does not stop the others; the result lists both.
        """
        scope = str(year)
        try:
            periods = self._periods.list_periods(year)
        except StoreError as exc:
            return DeleteResult(scope=scope, failures=(UnitFailure.from_error(scope, exc),))

        deleted: list[str] = []
        failures: list[UnitFailure] = []
        for period in sorted(periods, key=lambda p: p.month):
            code = period.period_code
            try:
                self._periods.delete_period(code)
            except TourLedgerError as exc:
                failures.append(UnitFailure.from_error(code, exc))
                continue
            deleted.append(code)

        log = logger.warning if failures else logger.info
        log(
            "period_year_deleted",
            extra={
                "year": year,
                "deleted": deleted,
                "failed": [f.unit for f in failures],
            },
        )
        return DeleteResult(scope=scope, deleted=tuple(deleted), failures=tuple(failures))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_periods(self, year: int | None = None) -> list[Period]:
        return self._periods.list_periods(year)

    def year_summary(self, year: int) -> YearSummary:
        """Fold of the stored Periods of ``year``."""
        return fold_year(year, self._periods.list_periods(year))
