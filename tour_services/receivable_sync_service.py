"""
tour_services.receivable_sync_service -- keeps the receivable ledger in step
with reservations.

Responsibility:
    Derives one Debt per ledger-eligible reservation, records collections
    against debts, applies the configured policy when a reservation is
    deleted, and reports company balances.  Debt rules live in
    tour_engines.receivables; this service owns lookups, locking and
    persistence.

Architecture position:
    Services -- orchestration over engines and repository ports.

Invariants enforced:
    - At most one Debt per reservation id: an existing debt is refreshed in
      place, keeping its id.
    - Work on one reservation is serialized by a per-reservation lock.
    - A Debt never references a missing company: a missing company is
      recreated as a placeholder before the debt is written or removed.
    - Debt status is derived on every write.
    - The reservation is the primary record.  A failed sync never undoes or
      blocks a reservation save; it is logged and returned as a warning.

Failure modes:
    - sync_reservation() / on_reservation_deleted() never raise on store
      failures; they return SyncResult(status=FAILED, warning=...).
    - save_reservation() / remove_reservation() propagate StoreError from the
      reservation write itself.
    - record_payment() / delete_debt() raise DebtNotFoundError, ValueError
      (non-positive payment) and StoreError.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import date
from uuid import uuid4

from tour_config import DebtDeletePolicy, LedgerSettings, get_active_settings
from tour_engines.aggregation import Totals, add
from tour_engines.receivables import (
    apply_payment,
    build_debt_from_reservation,
    company_balance,
    is_ledger_eligible,
)
from tour_kernel.domain.amounts import parse_monetary_string
from tour_kernel.domain.clock import Clock, SystemClock
from tour_kernel.domain.dtos import Company, CompanyBalance, Debt, Payment, Reservation
from tour_kernel.exceptions import (
    DebtNotFoundError,
    LedgerSyncError,
    OrphanCompanyReferenceError,
    StoreError,
    TourLedgerError,
)
from tour_kernel.logging_config import LogContext, get_logger
from tour_kernel.utils.keyed_lock import KeyedLock
from tour_services.ports import LedgerStore, ReservationStore, SourceReader
from tour_services.results import (
    ReservationSaveResult,
    ResyncReport,
    SyncResult,
    SyncStatus,
    UnitFailure,
)

logger = get_logger("services.receivable_sync")


def _new_id() -> str:
    return str(uuid4())


class ReceivableSyncService:
    """
    Receivable ("cari") ledger sync.

    Contract:
        Receives a LedgerStore plus optional ReservationStore (needed by
        save_reservation, remove_reservation and record_payment) and
        SourceReader (needed by resync_all).  Settings default to the
        active configuration.

    Guarantees:
        - Editing a reservation N times leaves exactly one Debt for it.
        - A placeholder company is created at most once per missing id.

    Non-goals:
        - No FX conversion; balances are per currency.
        - No ledger entries for reservations without a company.
    """

    def __init__(
        self,
        ledger: LedgerStore,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
        reservations: ReservationStore | None = None,
        sources: SourceReader | None = None,
        locks: KeyedLock | None = None,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._ledger = ledger
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_settings()
        self._reservations = reservations
        self._sources = sources
        self._locks = locks or KeyedLock()
        self._new_id = id_factory

    # ------------------------------------------------------------------
    # Reservation -> debt
    # ------------------------------------------------------------------

    def sync_reservation(self, reservation: Reservation) -> SyncResult:
        """
        Create or refresh the debt derived from ``reservation``.

        A reservation that no longer produces a debt (company removed or
        total cleared) has its existing debt handled like a deletion.
        """
        with self._locks.hold(reservation.id), LogContext.bind(
            reservation_id=reservation.id, operation="debt_sync"
        ):
            try:
                return self._sync_locked(reservation)
            except TourLedgerError as exc:
                return self._failed(reservation.id, exc)

    def _sync_locked(self, reservation: Reservation) -> SyncResult:
        existing = self._ledger.get_debt_by_reservation(reservation.id)

        if not is_ledger_eligible(reservation):
            if existing is None:
                return SyncResult(reservation.id, SyncStatus.SKIPPED)
            logger.info(
                "debt_source_ineligible",
                extra={"debt_id": existing.id, "company_id": existing.company_id},
            )
            return self._apply_delete_policy(reservation.id, existing)

        company, placeholder_id = self._ensure_company(
            reservation.company_id, reservation.company_name
        )
        debt = build_debt_from_reservation(
            reservation,
            debt_id=existing.id if existing is not None else self._new_id(),
            company_name=company.name,
            default_currency=self._settings.default_reservation_currency,
            existing=existing,
        )
        self._ledger.upsert_debt(debt)

        status = SyncStatus.CREATED if existing is None else SyncStatus.UPDATED
        logger.info(
            "debt_synced",
            extra={
                "debt_id": debt.id,
                "company_id": debt.company_id,
                "status": status.value,
                "debt_status": debt.status.value,
                "amount": str(debt.amount),
                "currency": debt.currency,
            },
        )
        return SyncResult(
            reservation.id,
            status,
            debt_id=debt.id,
            placeholder_company_id=placeholder_id,
        )

    def _failed(self, reservation_id: str, exc: TourLedgerError) -> SyncResult:
        error = LedgerSyncError(reservation_id, str(exc))
        logger.warning(
            "debt_sync_failed",
            extra={"error_code": exc.code, "reason": str(exc)},
        )
        return SyncResult(reservation_id, SyncStatus.FAILED, warning=str(error))

    def _ensure_company(
        self, company_id: str, fallback_name: str | None = None
    ) -> tuple[Company, str | None]:
        """
        Return the company, recreating a placeholder when it is missing.

        The placeholder name is taken from a surviving debt of that company,
        then ``fallback_name``, then the configured placeholder name.
        """
        company = self._ledger.get_company(company_id)
        if company is not None:
            return company, None

        reason = OrphanCompanyReferenceError(company_id)
        name = next(
            (d.company_name for d in self._ledger.list_debts(company_id) if d.company_name),
            None,
        )
        company = Company(
            id=company_id,
            name=name or fallback_name or self._settings.placeholder_company_name,
            category=self._settings.placeholder_company_category,
            is_placeholder=True,
        )
        self._ledger.upsert_company(company)
        logger.warning(
            "placeholder_company_created",
            extra={
                "company_id": company_id,
                "company_name": company.name,
                "reason": reason.code,
            },
        )
        return company, company_id

    # ------------------------------------------------------------------
    # Reservation writes
    # ------------------------------------------------------------------

    def save_reservation(self, reservation: Reservation) -> ReservationSaveResult:
        """
        Persist the reservation, then sync its debt.

        Raises:
            StoreError: If the reservation itself could not be written.
        """
        store = self._require_reservations()
        if not (reservation.currency or "").strip():
            reservation = replace(
                reservation, currency=self._settings.default_reservation_currency
            )
        store.upsert_reservation(reservation)
        sync = self.sync_reservation(reservation)
        return ReservationSaveResult(reservation.id, saved=True, sync=sync)

    def remove_reservation(self, reservation_id: str) -> SyncResult:
        """
        Delete the reservation, then apply the debt deletion policy.

        Raises:
            StoreError: If the reservation itself could not be deleted.
        """
        self._require_reservations().delete_reservation(reservation_id)
        return self.on_reservation_deleted(reservation_id)

    def on_reservation_deleted(self, reservation_id: str) -> SyncResult:
        with self._locks.hold(reservation_id), LogContext.bind(
            reservation_id=reservation_id, operation="debt_sync"
        ):
            try:
                debt = self._ledger.get_debt_by_reservation(reservation_id)
                if debt is None:
                    return SyncResult(reservation_id, SyncStatus.SKIPPED)
                return self._apply_delete_policy(reservation_id, debt)
            except TourLedgerError as exc:
                return self._failed(reservation_id, exc)

    def _apply_delete_policy(self, reservation_id: str, debt: Debt) -> SyncResult:
        policy = self._settings.debt_on_reservation_delete
        keep = policy is DebtDeletePolicy.KEEP or (
            policy is DebtDeletePolicy.UNPAID_ONLY and debt.paid_amount > 0
        )
        if keep:
            logger.info(
                "debt_kept",
                extra={"debt_id": debt.id, "policy": policy.value},
            )
            return SyncResult(reservation_id, SyncStatus.KEPT, debt_id=debt.id)

        _, placeholder_id = self._ensure_company(debt.company_id, debt.company_name)
        self._ledger.delete_debt(debt.id)
        logger.info("debt_deleted", extra={"debt_id": debt.id, "policy": policy.value})
        return SyncResult(
            reservation_id,
            SyncStatus.DELETED,
            debt_id=debt.id,
            placeholder_company_id=placeholder_id,
        )

    # ------------------------------------------------------------------
    # Debt operations
    # ------------------------------------------------------------------

    def record_payment(
        self,
        debt_id: str,
        amount: object,
        paid_on: date | None = None,
        description: str = "",
        method: str = "",
        payer: str = "",
        receipt_number: str = "",
    ) -> Debt:
        """
        Record a collection against a debt.

        Adds to the paid amount, re-derives status, stores a Payment row and
        mirrors the new paid total onto the reservation when one is known.
        If a write fails the debt and reservation are restored before the
        error propagates.

        Raises:
            MalformedAmountError: If ``amount`` is not a number.
            ValueError: If ``amount`` is not positive.
            DebtNotFoundError: If the debt does not exist.
        """
        value = parse_monetary_string(amount)
        if value <= 0:
            raise ValueError(f"Payment amount must be positive, got {value}")

        debt = self._ledger.get_debt(debt_id)
        if debt is None:
            raise DebtNotFoundError(debt_id)

        with self._locks.hold(debt.reservation_id or debt.id), LogContext.bind(
            reservation_id=debt.reservation_id, operation="record_payment"
        ):
            debt = self._ledger.get_debt(debt_id) or debt
            self._ensure_company(debt.company_id, debt.company_name)

            updated = apply_payment(debt, value)
            payment = Payment(
                id=self._new_id(),
                debt_id=debt.id,
                reservation_id=debt.reservation_id,
                amount=value,
                currency=debt.currency,
                paid_on=paid_on or self._clock.today(),
                description=description,
                method=method,
                payer=payer,
                receipt_number=receipt_number,
            )

            # The Payment row cannot be withdrawn, so it is written last.
            self._ledger.upsert_debt(updated)
            previous_reservation = None
            try:
                previous_reservation = self._mirror_paid_amount(updated)
                self._ledger.add_payment(payment)
            except TourLedgerError as exc:
                self._undo_payment(debt, previous_reservation, exc)
                raise

        logger.info(
            "debt_payment_recorded",
            extra={
                "debt_id": updated.id,
                "amount": str(value),
                "currency": updated.currency,
                "paid_amount": str(updated.paid_amount),
                "debt_status": updated.status.value,
            },
        )
        return updated

    def _mirror_paid_amount(self, debt: Debt) -> Reservation | None:
        """Copy the paid total onto the reservation; return its prior state."""
        if self._reservations is None or not debt.reservation_id:
            return None
        reservation = self._reservations.get_reservation(debt.reservation_id)
        if reservation is None:
            return None
        self._reservations.upsert_reservation(
            replace(reservation, amount_paid=debt.paid_amount)
        )
        return reservation

    def _undo_payment(
        self,
        debt: Debt,
        reservation: Reservation | None,
        cause: TourLedgerError,
    ) -> None:
        """
        Put the debt and reservation back as they were before a failed payment.

        A failure while restoring is logged; the caller re-raises ``cause``.
        """
        try:
            self._ledger.upsert_debt(debt)
            if reservation is not None and self._reservations is not None:
                self._reservations.upsert_reservation(reservation)
        except TourLedgerError as exc:
            logger.error(
                "debt_payment_rollback_failed",
                extra={
                    "debt_id": debt.id,
                    "error_code": exc.code,
                    "reason": str(exc),
                },
            )
            return
        logger.warning(
            "debt_payment_rolled_back",
            extra={"debt_id": debt.id, "error_code": cause.code, "reason": str(cause)},
        )

    def delete_debt(self, debt_id: str) -> None:
        """
        Remove a debt, repairing its company reference first.

        Raises:
            DebtNotFoundError: If the debt does not exist.
        """
        debt = self._ledger.get_debt(debt_id)
        if debt is None:
            raise DebtNotFoundError(debt_id)
        with self._locks.hold(debt.reservation_id or debt.id):
            self._ensure_company(debt.company_id, debt.company_name)
            self._ledger.delete_debt(debt_id)
        logger.info("debt_deleted", extra={"debt_id": debt_id, "policy": "manual"})

    # ------------------------------------------------------------------
    # Repair and reporting
    # ------------------------------------------------------------------

    def resync_all(self, year: int | None = None) -> ResyncReport:
        """Sync every eligible reservation; reports missing and repaired debts."""
        if self._sources is None:
            raise RuntimeError("resync_all requires a SourceReader")

        missing: list[str] = []
        created: list[str] = []
        updated: list[str] = []
        skipped: list[str] = []
        failures: list[UnitFailure] = []

        reservations = self._sources.list_reservations(year)
        for reservation in reservations:
            if not is_ledger_eligible(reservation):
                skipped.append(reservation.id)
                continue
            try:
                if self._ledger.get_debt_by_reservation(reservation.id) is None:
                    missing.append(reservation.id)
            except StoreError as exc:
                failures.append(UnitFailure.from_error(reservation.id, exc))
                continue

            result = self.sync_reservation(reservation)
            if result.status is SyncStatus.CREATED:
                created.append(reservation.id)
            elif result.status is SyncStatus.UPDATED:
                updated.append(reservation.id)
            elif result.status is SyncStatus.FAILED:
                failures.append(
                    UnitFailure(reservation.id, LedgerSyncError.code, result.warning or "")
                )

        report = ResyncReport(
            checked=len(reservations),
            missing=tuple(missing),
            created=tuple(created),
            updated=tuple(updated),
            skipped=tuple(skipped),
            failures=tuple(failures),
        )
        log = logger.warning if failures else logger.info
        log(
            "receivables_resynced",
            extra={
                "checked": report.checked,
                "missing": len(missing),
                "created": len(created),
                "failed": len(failures),
            },
        )
        return report

    def company_balance(self, company_id: str) -> CompanyBalance:
        return company_balance(company_id, self._ledger.list_debts(company_id))

    def outstanding_by_company(self) -> dict[str, CompanyBalance]:
        """Balances of companies with something left to collect, by company id."""
        by_company: dict[str, list[Debt]] = {}
        for debt in self._ledger.list_debts():
            by_company.setdefault(debt.company_id, []).append(debt)

        balances = {}
        for company_id in sorted(by_company):
            balance = company_balance(company_id, by_company[company_id])
            if balance.outstanding:
                balances[company_id] = balance
        return balances

    def _require_reservations(self) -> ReservationStore:
        if self._reservations is None:
            raise RuntimeError("This operation requires a ReservationStore")
        return self._reservations


def total_outstanding(balances: dict[str, CompanyBalance]) -> Totals:
    """Per-currency sum of outstanding amounts across companies."""
    totals: Totals = {}
    for balance in balances.values():
        totals = add(totals, balance.outstanding)
    return totals
