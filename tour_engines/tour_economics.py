"""
Module: tour_engines.tour_economics
Responsibility:
    Per-tour income, expense, profit, paid and remaining amounts, each as a
    per-currency mapping.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - profit == income - expense per currency, over the union of currencies.
    - remaining holds only currencies with a positive unpaid balance.
    - Malformed or non-positive amounts are skipped, never raised.

Failure modes:
    - None raised.  Skipped contributions are logged at DEBUG with the
      tour id and the offending field.

Usage:
    calc = TourEconomicsCalculator(default_currency="TRY")
    economics = calc.calculate(tour)
    economics.profit        # {"EUR": Decimal("650")}
    economics.remaining     # {} when fully paid
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from tour_engines.aggregation import (
    Totals,
    add,
    normalize_currency,
    positive_only,
    subtract,
    sum_by_currency,
)
from tour_kernel.domain.amounts import coerce_positive
from tour_kernel.domain.dtos import (
    Activity,
    ParticipantsMode,
    Tour,
    TourPaymentStatus,
)
from tour_kernel.logging_config import get_logger

logger = get_logger("engines.tour_economics")


@dataclass(frozen=True)
class TourEconomics:
    """
    Result of one tour calculation.

    Guarantees:
        - Every mapping is ordered by currency code.
        - An empty income mapping means "no price recorded", not zero.
    """

    tour_id: str
    income: Totals = field(default_factory=dict)
    expense: Totals = field(default_factory=dict)
    profit: Totals = field(default_factory=dict)
    paid: Totals = field(default_factory=dict)
    remaining: Totals = field(default_factory=dict)

    @property
    def is_fully_paid(self) -> bool:
        return bool(self.income) and not self.remaining


@dataclass(frozen=True)
class EconomicsSummary:
    """Fold of many tours."""

    tour_count: int
    income: Totals
    expense: Totals
    profit: Totals
    remaining: Totals


class TourEconomicsCalculator:
    """
    Tour Economics Calculator.

    Contract:
        calculate(tour) is pure: same tour, same result.

    Non-goals:
        - No currency conversion; a tour sold in EUR with TRY expenses shows
          a positive EUR profit and a negative TRY profit.
    """

    def __init__(self, default_currency: str = "TRY"):
        self.default_currency = default_currency

    # -- helpers -------------------------------------------------------------

    def _tour_currency(self, tour: Tour) -> str:
        return normalize_currency(tour.currency, self.default_currency)

    def _activity_currency(self, tour: Tour, activity: Activity) -> str:
        if activity.currency and activity.currency.strip():
            return normalize_currency(activity.currency, self.default_currency)
        return self._tour_currency(tour)

    @staticmethod
    def activity_participants(tour: Tour, activity: Activity) -> int:
        if activity.participants_mode is ParticipantsMode.ALL:
            return max(tour.number_of_people, 0)
        return max(activity.participants, 0)

    def _skip(self, tour: Tour, what: str, raw: object) -> None:
        logger.debug(
            "tour_amount_skipped",
            extra={"tour_id": tour.id, "field": what, "raw_value": repr(raw)},
        )

    # -- components ------------------------------------------------------------

    def income(self, tour: Tour) -> Totals:
        """Tour price in the tour currency plus activity revenue in each activity's currency."""
        parts: list[tuple[Decimal, str]] = []

        price = coerce_positive(tour.total_price)
        if price is not None:
            parts.append((price, self._tour_currency(tour)))
        elif tour.total_price not in (None, ""):
            self._skip(tour, "total_price", tour.total_price)

        for activity in tour.activities:
            unit = coerce_positive(activity.price)
            participants = self.activity_participants(tour, activity)
            if unit is None or participants <= 0:
                if activity.price not in (None, ""):
                    self._skip(tour, f"activity:{activity.name}", activity.price)
                continue
            parts.append((unit * participants, self._activity_currency(tour, activity)))

        return sum_by_currency(parts, self.default_currency)

    def expense(self, tour: Tour) -> Totals:
        parts: list[tuple[Decimal, str | None]] = []
        for expense in tour.expenses:
            amount = coerce_positive(expense.amount)
            if amount is None:
                self._skip(tour, f"expense:{expense.name}", expense.amount)
                continue
            currency = expense.currency if expense.currency else tour.currency
            parts.append((amount, currency))
        return sum_by_currency(parts, self.default_currency)

    def paid(self, tour: Tour, income: Totals | None = None) -> Totals:
        """
        Amount collected so far.

        completed -> equals income.  partial -> the tour-level partial
        payment plus any per-activity partial payments.  pending and
        refunded -> nothing.
        """
        status = tour.payment_status
        if status is TourPaymentStatus.COMPLETED:
            return dict(income if income is not None else self.income(tour))
        if status is not TourPaymentStatus.PARTIAL:
            return {}

        parts: list[tuple[Decimal, str]] = []
        amount = coerce_positive(tour.partial_payment_amount)
        if amount is not None:
            currency = (
                normalize_currency(tour.partial_payment_currency, self.default_currency)
                if tour.partial_payment_currency
                else self._tour_currency(tour)
            )
            parts.append((amount, currency))

        for activity in tour.activities:
            amount = coerce_positive(activity.partial_payment_amount)
            if amount is None:
                continue
            currency = (
                normalize_currency(activity.partial_payment_currency, self.default_currency)
                if activity.partial_payment_currency
                else self._activity_currency(tour, activity)
            )
            parts.append((amount, currency))

        return sum_by_currency(parts, self.default_currency)

    # -- entry points ----------------------------------------------------------

    def calculate(self, tour: Tour) -> TourEconomics:
        income = self.income(tour)
        expense = self.expense(tour)
        paid = self.paid(tour, income)
        remaining = positive_only(
            {c: v - paid.get(c, Decimal("0")) for c, v in income.items()}
        )
        return TourEconomics(
            tour_id=tour.id,
            income=income,
            expense=expense,
            profit=subtract(income, expense),
            paid=paid,
            remaining=remaining,
        )

    def calculate_many(self, tours: Iterable[Tour]) -> EconomicsSummary:
        income: Totals = {}
        expense: Totals = {}
        remaining: Totals = {}
        count = 0
        for tour in tours:
            result = self.calculate(tour)
            income = add(income, result.income)
            expense = add(expense, result.expense)
            remaining = add(remaining, result.remaining)
            count += 1
        return EconomicsSummary(
            tour_count=count,
            income=income,
            expense=expense,
            profit=subtract(income, expense),
            remaining=remaining,
        )
