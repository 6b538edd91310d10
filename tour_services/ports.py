"""
tour_services.ports -- repository interfaces the services depend on.

Responsibility:
    Narrow protocols for the stores owned by the surrounding application.
    The services only ever talk to these; SqlAlchemyStore implements all of
    them, and tests substitute in-memory fakes.

Failure contract:
    Implementations raise tour_kernel.exceptions.StoreError (or a subclass
    of TourLedgerError such as PeriodNotFoundError) for any failure.  A
    failed write leaves no partial record behind.
"""

from __future__ import annotations

from typing import Protocol

from tour_kernel.domain.dtos import (
    Company,
    Debt,
    FinancialEntry,
    Payment,
    Period,
    Reservation,
    Tour,
)


class SourceReader(Protocol):
    """Read access to the records a rollup is computed from."""

    def list_tours(self, year: int | None = None) -> list[Tour]: ...

    def list_financial_entries(self, year: int | None = None) -> list[FinancialEntry]: ...

    def list_reservations(self, year: int | None = None) -> list[Reservation]: ...


class PeriodStore(Protocol):
    """Derived monthly rollups."""

    def list_periods(self, year: int | None = None) -> list[Period]: ...

    def upsert_period(self, period: Period) -> None: ...

    def delete_period(self, period_id: str) -> None: ...


class LedgerStore(Protocol):
    """Companies, debts and payments of the receivable ledger."""

    def get_company(self, company_id: str) -> Company | None: ...

    def upsert_company(self, company: Company) -> None: ...

    def get_debt(self, debt_id: str) -> Debt | None: ...

    def get_debt_by_reservation(self, reservation_id: str) -> Debt | None: ...

    def list_debts(self, company_id: str | None = None) -> list[Debt]: ...

    def upsert_debt(self, debt: Debt) -> None: ...

    def delete_debt(self, debt_id: str) -> None: ...

    def add_payment(self, payment: Payment) -> None: ...

    def list_payments(self, debt_id: str) -> list[Payment]: ...


class ReservationStore(Protocol):
    """Write access to reservations, the primary record of a booking."""

    def get_reservation(self, reservation_id: str) -> Reservation | None: ...

    def upsert_reservation(self, reservation: Reservation) -> None: ...

    def delete_reservation(self, reservation_id: str) -> None: ...
