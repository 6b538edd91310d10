"""
Data Transfer Objects -- immutable records crossing layer boundaries.

Responsibility:
    Frozen dataclasses for the source records the back office reads (tours,
    financial entries, reservations, companies) and the records it derives
    (periods, debts).  Source records keep monetary fields in their raw
    shape; engines normalize them through tour_kernel.domain.amounts.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Imported by engines, selectors,
    services and tests.

Invariants enforced:
    - Derived records (Period, Debt) hold Decimal amounts only.
    - Currency-grouped breakdowns are tuples of CurrencyAmount ordered by
      currency code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Union

RawAmount = Union[Decimal, int, float, str, None]


class EntryKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TourPaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    REFUNDED = "refunded"


class ParticipantsMode(str, Enum):
    ALL = "all"
    CUSTOM = "custom"


class PeriodStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class DebtStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class ReservationPaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


# =============================================================================
# Source records
# =============================================================================


@dataclass(frozen=True)
class Activity:
    """An optional add-on sold with a tour."""

    name: str
    price: RawAmount = None
    currency: str | None = None
    participants: int = 0
    participants_mode: ParticipantsMode = ParticipantsMode.ALL
    partial_payment_amount: RawAmount = None
    partial_payment_currency: str | None = None


@dataclass(frozen=True)
class TourExpense:
    """A cost line recorded on a tour (guide, transport, tickets...)."""

    name: str
    amount: RawAmount
    currency: str | None = None
    category: str = ""


@dataclass(frozen=True)
class Tour:
    """A sold tour with its own activities and expense lines."""

    id: str
    tour_date: date | None
    currency: str | None = None
    total_price: RawAmount = None
    number_of_people: int = 0
    serial_number: str = ""
    customer_name: str = ""
    end_date: date | None = None
    activities: tuple[Activity, ...] = ()
    expenses: tuple[TourExpense, ...] = ()
    payment_status: TourPaymentStatus = TourPaymentStatus.PENDING
    partial_payment_amount: RawAmount = None
    partial_payment_currency: str | None = None


@dataclass(frozen=True)
class FinancialEntry:
    """An ad-hoc income or expense not tied to a tour sale."""

    id: str
    entry_date: date | None
    kind: EntryKind
    amount: RawAmount
    currency: str | None = None
    category: str = ""
    tour_id: str | None = None
    company_id: str | None = None
    description: str = ""


@dataclass(frozen=True)
class Reservation:
    """A booking for a destination on a tour date."""

    id: str
    tour_date: date | None
    total_amount: RawAmount = None
    currency: str | None = None
    amount_paid: RawAmount = None
    serial_number: str = ""
    pickup_time: str | None = None
    destination_id: str | None = None
    destination_name: str | None = None
    customer_name: str = ""
    customer_phone: str = ""
    company_id: str | None = None
    company_name: str | None = None
    payment_due_date: date | None = None
    adults: int = 0
    children: int = 0
    infants: int = 0
    tour_id: str | None = None

    @property
    def head_count(self) -> int:
        return self.adults + self.children + self.infants


@dataclass(frozen=True)
class Company:
    """A counterparty (agency, supplier) that debts are recorded against."""

    id: str
    name: str
    category: str = ""
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    is_placeholder: bool = False


# =============================================================================
# Derived records
# =============================================================================


@dataclass(frozen=True)
class CurrencyAmount:
    """One bucket of a currency-grouped breakdown."""

    currency: str
    amount: Decimal


Breakdown = tuple[CurrencyAmount, ...]


def breakdown_totals(*breakdowns: Breakdown) -> dict[str, Decimal]:
    """Per-currency sum of one or more breakdowns."""
    totals: dict[str, Decimal] = {}
    for rows in breakdowns:
        for row in rows:
            totals[row.currency] = totals.get(row.currency, Decimal("0")) + row.amount
    return totals


@dataclass(frozen=True)
class LegacyTotal:
    """Single-currency scalar kept for consumers that predate breakdowns."""

    amount: Decimal
    currency: str


@dataclass(frozen=True)
class Period:
    """
    Monthly rollup of tours, financial entries and reservations.

    Contract:
        Fully derived from source records; a recompute replaces the row
        instead of editing it.

    Guarantees:
        - period_code is ``YYYY-MM`` and equals ``id``.
        - Each breakdown lists a currency at most once.
    """

    year: int
    month: int
    financial_income: Breakdown = ()
    tour_income: Breakdown = ()
    company_expenses: Breakdown = ()
    tour_expenses: Breakdown = ()
    financial_income_legacy: LegacyTotal | None = None
    tour_income_legacy: LegacyTotal | None = None
    company_expenses_legacy: LegacyTotal | None = None
    tour_expenses_legacy: LegacyTotal | None = None
    tour_count: int = 0
    customer_count: int = 0
    reservation_count: int = 0
    status: PeriodStatus = PeriodStatus.CLOSED
    updated_at: datetime | None = None

    @staticmethod
    def code_for(year: int, month: int) -> str:
        return f"{year:04d}-{month:02d}"

    @property
    def period_code(self) -> str:
        return self.code_for(self.year, self.month)

    @property
    def id(self) -> str:
        return self.period_code

    def total_income(self) -> dict[str, Decimal]:
        return breakdown_totals(self.financial_income, self.tour_income)

    def total_expenses(self) -> dict[str, Decimal]:
        return breakdown_totals(self.company_expenses, self.tour_expenses)

    def net_profit(self) -> dict[str, Decimal]:
        """Income minus expenses, per currency."""
        profit = dict(self.total_income())
        for currency, amount in self.total_expenses().items():
            profit[currency] = profit.get(currency, Decimal("0")) - amount
        return dict(sorted(profit.items()))

    def profit_margin(self) -> dict[str, Decimal]:
        """Profit as a percentage of income, for currencies with income."""
        income = self.total_income()
        margins = {}
        for currency, profit in self.net_profit().items():
            base = income.get(currency, Decimal("0"))
            if base > 0:
                margins[currency] = (profit / base * 100).quantize(
                    Decimal("0.01"), rounding=ROUND_HALF_UP
                )
        return margins


@dataclass(frozen=True)
class Debt:
    """
    Receivable ledger row derived from a reservation.

    Guarantees:
        - At most one Debt exists per reservation_id.
        - status agrees with amount and paid_amount.
    """

    id: str
    company_id: str
    amount: Decimal
    currency: str
    paid_amount: Decimal = Decimal("0")
    status: DebtStatus = DebtStatus.UNPAID
    reservation_id: str | None = None
    reservation_serial: str = ""
    company_name: str = ""
    due_date: date | None = None
    tour_id: str | None = None
    description: str = ""

    @property
    def remaining(self) -> Decimal:
        return self.amount - self.paid_amount


@dataclass(frozen=True)
class CompanyBalance:
    """Per-currency receivable position of one company."""

    company_id: str
    total_debt: dict[str, Decimal] = field(default_factory=dict)
    total_paid: dict[str, Decimal] = field(default_factory=dict)
    outstanding: dict[str, Decimal] = field(default_factory=dict)
    debt_count: int = 0

    @property
    def is_settled(self) -> bool:
        return not self.outstanding


@dataclass(frozen=True)
class Payment:
    """A collection recorded against one debt."""

    id: str
    debt_id: str
    amount: Decimal
    currency: str
    paid_on: date
    reservation_id: str | None = None
    description: str = ""
    method: str = ""
    payer: str = ""
    receipt_number: str = ""
