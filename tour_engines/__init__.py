"""
Module: tour_engines
Responsibility:
    Re-exports the pure calculation engines: currency-safe aggregation,
    tour economics, period rollup, receivable rules and urgency grouping.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import tour_kernel.domain and tour_kernel.logging_config only.

Invariants enforced:
    - Engines never read the clock; dates are explicit parameters.
    - Decimal-only arithmetic; amounts of different currencies are never
      added together.
"""

from tour_engines.aggregation import (
    Totals,
    add,
    format_totals,
    from_breakdown,
    normalize_currency,
    positive_only,
    subtract,
    sum_by_currency,
    to_breakdown,
)
from tour_engines.period_rollup import (
    MonthBucket,
    MonthBuckets,
    PeriodRollupEngine,
    YearSummary,
    bucket_by_month,
    fold_year,
    legacy_total,
    primary_currency,
)
from tour_engines.receivables import (
    apply_payment,
    build_debt_from_reservation,
    company_balance,
    derive_debt_status,
    is_ledger_eligible,
    reservation_payment_status,
)
from tour_engines.tour_economics import (
    EconomicsSummary,
    TourEconomics,
    TourEconomicsCalculator,
)
from tour_engines.urgency import DestinationGroup, group_by_destination

__all__ = [
    "DestinationGroup",
    "EconomicsSummary",
    "MonthBucket",
    "MonthBuckets",
    "PeriodRollupEngine",
    "Totals",
    "TourEconomics",
    "TourEconomicsCalculator",
    "YearSummary",
    "add",
    "apply_payment",
    "bucket_by_month",
    "build_debt_from_reservation",
    "company_balance",
    "derive_debt_status",
    "fold_year",
    "format_totals",
    "from_breakdown",
    "group_by_destination",
    "is_ledger_eligible",
    "legacy_total",
    "normalize_currency",
    "positive_only",
    "primary_currency",
    "reservation_payment_status",
    "subtract",
    "sum_by_currency",
    "to_breakdown",
]
