"""
tour_services.sql_store -- SQLAlchemy implementation of the repository ports.

Responsibility:
    Implements SourceReader, PeriodStore, LedgerStore and ReservationStore
    over the tour_kernel ORM models.  Reads go through the selectors; writes
    map DTOs onto rows.

Architecture position:
    Services -- the only place outside tour_kernel that touches a Session.

Invariants enforced:
    - Every unit write runs inside its own SAVEPOINT: a failed upsert or
      delete is rolled back on its own and never leaves a partial row.
    - Flush-only: the store never commits.  The caller owns the outer
      transaction (see tour_kernel.db.engine.session_scope).
    - SQLAlchemy errors are translated to StoreError at this boundary.

Failure modes:
    - StoreError wrapping any SQLAlchemyError.
    - PeriodNotFoundError / DebtNotFoundError when deleting a missing row.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tour_kernel.domain.amounts import coerce_amount
from tour_kernel.domain.dtos import (
    Company,
    Debt,
    FinancialEntry,
    Payment,
    Period,
    Reservation,
    Tour,
)
from tour_kernel.exceptions import DebtNotFoundError, PeriodNotFoundError, StoreError
from tour_kernel.logging_config import get_logger
from tour_kernel.models import (
    CompanyModel,
    DebtModel,
    FinancialEntryModel,
    PaymentModel,
    PeriodModel,
    ReservationModel,
    TourModel,
)
from tour_kernel.selectors import LedgerSelector, SourceSelector
from tour_kernel.selectors.mapping import (
    activity_to_json,
    breakdown_to_json,
    expense_to_json,
)

logger = get_logger("services.sql_store")

T = TypeVar("T")


class SqlAlchemyStore:
    """
    Session-backed store for every port the services use.

    Contract:
        Receives a Session from the caller and flushes within it.

    Non-goals:
        - Does not commit or roll back the outer transaction.
    """

    def __init__(self, session: Session):
        self.session = session
        self._sources = SourceSelector(session)
        self._ledger = LedgerSelector(session)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _read(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as exc:
            logger.warning(
                "store_read_failed",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StoreError(operation, str(exc)) from exc

    @contextmanager
    def _unit_write(self, operation: str) -> Iterator[None]:
        try:
            with self.session.begin_nested():
                yield
                self.session.flush()
        except SQLAlchemyError as exc:
            logger.warning(
                "store_write_failed",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StoreError(operation, str(exc)) from exc

    # ------------------------------------------------------------------
    # SourceReader
    # ------------------------------------------------------------------

    def list_tours(self, year: int | None = None) -> list[Tour]:
        return self._read("list_tours", lambda: self._sources.list_tours(year))

    def list_financial_entries(self, year: int | None = None) -> list[FinancialEntry]:
        return self._read(
            "list_financial_entries",
            lambda: self._sources.list_financial_entries(year),
        )

    def list_reservations(self, year: int | None = None) -> list[Reservation]:
        return self._read(
            "list_reservations", lambda: self._sources.list_reservations(year)
        )

    def upsert_tour(self, tour: Tour) -> None:
        with self._unit_write("upsert_tour"):
            row = self.session.get(TourModel, tour.id) or TourModel(id=tour.id)
            row.serial_number = tour.serial_number
            row.customer_name = tour.customer_name
            row.tour_date = tour.tour_date
            row.end_date = tour.end_date
            row.currency = tour.currency
            row.total_price = coerce_amount(tour.total_price)
            row.number_of_people = tour.number_of_people
            row.payment_status = tour.payment_status.value
            row.partial_payment_amount = coerce_amount(tour.partial_payment_amount)
            row.partial_payment_currency = tour.partial_payment_currency
            row.activities = [activity_to_json(a) for a in tour.activities]
            row.expenses = [expense_to_json(e) for e in tour.expenses]
            self.session.add(row)

    def upsert_financial_entry(self, entry: FinancialEntry) -> None:
        with self._unit_write("upsert_financial_entry"):
            row = self.session.get(FinancialEntryModel, entry.id) or FinancialEntryModel(
                id=entry.id
            )
            row.entry_date = entry.entry_date
            row.kind = entry.kind.value
            row.category = entry.category
            row.amount = coerce_amount(entry.amount)
            row.currency = entry.currency
            row.tour_id = entry.tour_id
            row.company_id = entry.company_id
            row.description = entry.description
            self.session.add(row)

    # ------------------------------------------------------------------
    # ReservationStore
    # ------------------------------------------------------------------

    def get_reservation(self, reservation_id: str) -> Reservation | None:
        return self._read(
            "get_reservation", lambda: self._sources.get_reservation(reservation_id)
        )

    def upsert_reservation(self, reservation: Reservation) -> None:
        with self._unit_write("upsert_reservation"):
            row = self.session.get(ReservationModel, reservation.id) or ReservationModel(
                id=reservation.id
            )
            row.serial_number = reservation.serial_number
            row.tour_date = reservation.tour_date
            row.pickup_time = reservation.pickup_time
            row.destination_id = reservation.destination_id
            row.destination_name = reservation.destination_name
            row.customer_name = reservation.customer_name
            row.customer_phone = reservation.customer_phone
            row.company_id = reservation.company_id
            row.company_name = reservation.company_name
            row.total_amount = coerce_amount(reservation.total_amount)
            row.currency = reservation.currency
            row.amount_paid = coerce_amount(reservation.amount_paid)
            row.payment_due_date = reservation.payment_due_date
            row.adults = reservation.adults
            row.children = reservation.children
            row.infants = reservation.infants
            row.tour_id = reservation.tour_id
            self.session.add(row)

    def delete_reservation(self, reservation_id: str) -> None:
        with self._unit_write("delete_reservation"):
            row = self.session.get(ReservationModel, reservation_id)
            if row is not None:
                self.session.delete(row)

    # ------------------------------------------------------------------
    # PeriodStore
    # ------------------------------------------------------------------

    def list_periods(self, year: int | None = None) -> list[Period]:
        return self._read("list_periods", lambda: self._ledger.list_periods(year))

    def upsert_period(self, period: Period) -> None:
        with self._unit_write("upsert_period"):
            row = self.session.scalars(
                select(PeriodModel).where(
                    PeriodModel.year == period.year, PeriodModel.month == period.month
                )
            ).one_or_none()
            if row is None:
                row = PeriodModel(id=period.period_code, year=period.year, month=period.month)
                self.session.add(row)

            for name in ("financial_income", "tour_income", "company_expenses", "tour_expenses"):
                setattr(row, name, breakdown_to_json(getattr(period, name)))
                legacy = getattr(period, f"{name}_legacy")
                setattr(row, f"{name}_amount", legacy.amount)
                setattr(row, f"{name}_currency", legacy.currency)

            row.tour_count = period.tour_count
            row.customer_count = period.customer_count
            row.reservation_count = period.reservation_count
            row.status = period.status.value

    def delete_period(self, period_id: str) -> None:
        with self._unit_write("delete_period"):
            row = self.session.get(PeriodModel, period_id)
            if row is None:
                raise PeriodNotFoundError(period_id)
            self.session.delete(row)

    # ------------------------------------------------------------------
    # LedgerStore
    # ------------------------------------------------------------------

    def get_company(self, company_id: str) -> Company | None:
        return self._read("get_company", lambda: self._ledger.get_company(company_id))

    def upsert_company(self, company: Company) -> None:
        with self._unit_write("upsert_company"):
            row = self.session.get(CompanyModel, company.id) or CompanyModel(id=company.id)
            row.name = company.name
            row.category = company.category
            row.contact_person = company.contact_person
            row.phone = company.phone
            row.email = company.email
            row.is_placeholder = company.is_placeholder
            self.session.add(row)

    def delete_company(self, company_id: str) -> None:
        with self._unit_write("delete_company"):
            row = self.session.get(CompanyModel, company_id)
            if row is not None:
                self.session.delete(row)

    def get_debt(self, debt_id: str) -> Debt | None:
        return self._read("get_debt", lambda: self._ledger.get_debt(debt_id))

    def get_debt_by_reservation(self, reservation_id: str) -> Debt | None:
        return self._read(
            "get_debt_by_reservation",
            lambda: self._ledger.get_debt_by_reservation(reservation_id),
        )

    def list_debts(self, company_id: str | None = None) -> list[Debt]:
        return self._read("list_debts", lambda: self._ledger.list_debts(company_id))

    def upsert_debt(self, debt: Debt) -> None:
        with self._unit_write("upsert_debt"):
            row = self.session.get(DebtModel, debt.id) or DebtModel(id=debt.id)
            row.company_id = debt.company_id
            row.company_name = debt.company_name
            row.reservation_id = debt.reservation_id
            row.reservation_serial = debt.reservation_serial
            row.tour_id = debt.tour_id
            row.amount = debt.amount
            row.currency = debt.currency
            row.paid_amount = debt.paid_amount
            row.due_date = debt.due_date
            row.status = debt.status.value
            row.description = debt.description
            self.session.add(row)

    def delete_debt(self, debt_id: str) -> None:
        with self._unit_write("delete_debt"):
            row = self.session.get(DebtModel, debt_id)
            if row is None:
                raise DebtNotFoundError(debt_id)
            self.session.delete(row)

    def add_payment(self, payment: Payment) -> None:
        with self._unit_write("add_payment"):
            self.session.add(
                PaymentModel(
                    id=payment.id,
                    debt_id=payment.debt_id,
                    reservation_id=payment.reservation_id,
                    amount=payment.amount,
                    currency=payment.currency,
                    paid_on=payment.paid_on,
                    description=payment.description,
                    method=payment.method,
                    payer=payment.payer,
                    receipt_number=payment.receipt_number,
                )
            )

    def list_payments(self, debt_id: str) -> list[Payment]:
        return self._read("list_payments", lambda: self._ledger.list_payments(debt_id))
