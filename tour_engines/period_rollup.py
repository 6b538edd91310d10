"""
Module: tour_engines.period_rollup
Responsibility:
    Buckets source records into calendar months and builds one Period per
    month with currency-grouped breakdowns, counts and legacy scalar totals.
    Folds stored Periods of one year into a yearly summary.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Today's date is passed in;
    the engine never reads the clock.

Invariants enforced:
    - Financial entries carrying the tour-expense sentinel category are
      excluded from company totals (they duplicate tour expense lines).
    - Expense entries linked to a tour are excluded from company expenses
      for the same reason.
    - Breakdowns never combine currencies.
    - Building the same bucket twice yields equal Periods.
    - A yearly summary is a fold over Period rows, never raw records.

Failure modes:
    - None raised.  Records without a date are not bucketed and are counted
      in MonthBuckets.undated.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from tour_engines.aggregation import (
    Totals,
    add,
    from_breakdown,
    subtract,
    sum_by_currency,
    to_breakdown,
)
from tour_engines.tour_economics import TourEconomicsCalculator
from tour_engines.tracer import traced_engine
from tour_kernel.domain.amounts import coerce_amount
from tour_kernel.domain.dtos import (
    EntryKind,
    FinancialEntry,
    LegacyTotal,
    Period,
    PeriodStatus,
    Reservation,
    Tour,
)

MonthKey = tuple[int, int]


@dataclass
class MonthBucket:
    tours: list[Tour] = field(default_factory=list)
    entries: list[FinancialEntry] = field(default_factory=list)
    reservations: list[Reservation] = field(default_factory=list)


@dataclass
class MonthBuckets:
    months: dict[MonthKey, MonthBucket] = field(default_factory=dict)
    undated: int = 0

    def bucket(self, key: MonthKey) -> MonthBucket:
        return self.months.setdefault(key, MonthBucket())

    def keys(self) -> list[MonthKey]:
        return sorted(self.months)


def bucket_by_month(
    tours: Iterable[Tour],
    entries: Iterable[FinancialEntry],
    reservations: Iterable[Reservation] = (),
    year: int | None = None,
) -> MonthBuckets:
    """
    Group records by (year, month) of their own date field.

    Tours by tour date, entries by entry date, reservations by tour date.
    With ``year`` set, records of other years are ignored.
    """
    buckets = MonthBuckets()

    def place(day: date | None, target: str, record: object) -> None:
        if day is None:
            buckets.undated += 1
            return
        if year is not None and day.year != year:
            return
        getattr(buckets.bucket((day.year, day.month)), target).append(record)

    for tour in tours:
        place(tour.tour_date, "tours", tour)
    for entry in entries:
        place(entry.entry_date, "entries", entry)
    for reservation in reservations:
        place(reservation.tour_date, "reservations", reservation)
    return buckets


def is_tour_expense_category(category: str | None, sentinel: str) -> bool:
    return (category or "").strip().casefold() == sentinel.strip().casefold()


def primary_currency(totals: Totals, default_currency: str) -> str:
    """
    Currency shown by single-currency consumers.

    The default currency when it has a bucket; otherwise the bucket with the
    largest absolute total, ties broken by currency code.
    """
    if not totals or default_currency in totals:
        return default_currency
    return min(totals, key=lambda c: (-abs(totals[c]), c))


def legacy_total(totals: Totals, default_currency: str) -> LegacyTotal:
    currency = primary_currency(totals, default_currency)
    return LegacyTotal(amount=totals.get(currency, Decimal("0")), currency=currency)


def period_status(year: int, month: int, today: date) -> PeriodStatus:
    if (year, month) == (today.year, today.month):
        return PeriodStatus.ACTIVE
    return PeriodStatus.CLOSED


class PeriodRollupEngine:
    """
    Builds Periods from month buckets.

    Contract:
        Pure; identical inputs yield equal Periods.

    Non-goals:
        - Persistence, locking and failure reporting live in
          tour_services.period_rollup_service.
    """

    def __init__(
        self,
        default_currency: str = "TRY",
        tour_expense_category: str = "Tour Expense",
    ):
        self.default_currency = default_currency
        self.tour_expense_category = tour_expense_category
        self.calculator = TourEconomicsCalculator(default_currency)

    def company_totals(self, entries: Sequence[FinancialEntry]) -> tuple[Totals, Totals]:
        """
        Financial income and company expenses.

        Sentinel-category entries are excluded from both.  Expense entries
        linked to a tour are already counted in that tour's expense lines;
        tour-linked income still counts as financial income.
        """
        income: list[tuple[Decimal, str | None]] = []
        expense: list[tuple[Decimal, str | None]] = []
        for entry in entries:
            if is_tour_expense_category(entry.category, self.tour_expense_category):
                continue
            if entry.kind is EntryKind.EXPENSE and entry.tour_id:
                continue
            amount = coerce_amount(entry.amount)
            if amount is None:
                continue
            target = income if entry.kind is EntryKind.INCOME else expense
            target.append((amount, entry.currency))
        return (
            sum_by_currency(income, self.default_currency),
            sum_by_currency(expense, self.default_currency),
        )

    def tour_totals(self, tours: Sequence[Tour]) -> tuple[Totals, Totals]:
        income: Totals = {}
        expense: Totals = {}
        for tour in tours:
            result = self.calculator.calculate(tour)
            income = add(income, result.income)
            expense = add(expense, result.expense)
        return income, expense

    @staticmethod
    def customer_count(tours: Sequence[Tour]) -> int:
        # A tour with no recorded head count is one customer.
        return sum(max(tour.number_of_people, 1) for tour in tours)

    @traced_engine("period_rollup", "1.0", fingerprint_fields=("year", "month"))
    def build_period(
        self,
        *,
        year: int,
        month: int,
        bucket: MonthBucket,
        today: date,
    ) -> Period:
        unique_tours = list({tour.id: tour for tour in bucket.tours}.values())
        financial_income, company_expenses = self.company_totals(bucket.entries)
        tour_income, tour_expenses = self.tour_totals(unique_tours)

        return Period(
            year=year,
            month=month,
            financial_income=to_breakdown(financial_income),
            tour_income=to_breakdown(tour_income),
            company_expenses=to_breakdown(company_expenses),
            tour_expenses=to_breakdown(tour_expenses),
            financial_income_legacy=legacy_total(financial_income, self.default_currency),
            tour_income_legacy=legacy_total(tour_income, self.default_currency),
            company_expenses_legacy=legacy_total(company_expenses, self.default_currency),
            tour_expenses_legacy=legacy_total(tour_expenses, self.default_currency),
            tour_count=len(unique_tours),
            customer_count=self.customer_count(unique_tours),
            reservation_count=len(bucket.reservations),
            status=period_status(year, month, today),
        )

    def build_all(self, buckets: MonthBuckets, today: date) -> list[Period]:
        """One Period per bucketed month, in chronological order."""
        return [
            self.build_period(year=y, month=m, bucket=buckets.months[(y, m)], today=today)
            for (y, m) in buckets.keys()
        ]


@dataclass(frozen=True)
class YearSummary:
    """Fold of one year's stored Periods."""

    year: int
    months: tuple[int, ...]
    financial_income: Totals
    tour_income: Totals
    company_expenses: Totals
    tour_expenses: Totals
    tour_count: int
    customer_count: int
    reservation_count: int

    @property
    def total_income(self) -> Totals:
        return add(self.financial_income, self.tour_income)

    @property
    def total_expenses(self) -> Totals:
        return add(self.company_expenses, self.tour_expenses)

    @property
    def net_profit(self) -> Totals:
        return subtract(self.total_income, self.total_expenses)


def fold_year(year: int, periods: Iterable[Period]) -> YearSummary:
    """Sum each breakdown across the year's Periods; other years are ignored."""
    rows = sorted((p for p in periods if p.year == year), key=lambda p: p.month)
    fi: Totals = {}
    ti: Totals = {}
    ce: Totals = {}
    te: Totals = {}
    for period in rows:
        fi = add(fi, from_breakdown(period.financial_income))
        ti = add(ti, from_breakdown(period.tour_income))
        ce = add(ce, from_breakdown(period.company_expenses))
        te = add(te, from_breakdown(period.tour_expenses))
    return YearSummary(
        year=year,
        months=tuple(p.month for p in rows),
        financial_income=fi,
        tour_income=ti,
        company_expenses=ce,
        tour_expenses=te,
        tour_count=sum(p.tour_count for p in rows),
        customer_count=sum(p.customer_count for p in rows),
        reservation_count=sum(p.reservation_count for p in rows),
    )
