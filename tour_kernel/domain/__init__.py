"""
Pure domain layer.

Value objects, amount normalization and immutable records with no
dependency on the ORM, the database or the system clock.
"""

from tour_kernel.domain.amounts import (
    coerce_amount,
    coerce_positive,
    parse_monetary_string,
)
from tour_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from tour_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from tour_kernel.domain.dtos import (
    Activity,
    Breakdown,
    Company,
    CompanyBalance,
    CurrencyAmount,
    Debt,
    DebtStatus,
    EntryKind,
    FinancialEntry,
    LegacyTotal,
    ParticipantsMode,
    Payment,
    Period,
    PeriodStatus,
    Reservation,
    ReservationPaymentStatus,
    Tour,
    TourExpense,
    TourPaymentStatus,
)
from tour_kernel.domain.values import Currency, Money

__all__ = [
    "Activity",
    "Breakdown",
    "Clock",
    "Company",
    "CompanyBalance",
    "Currency",
    "CurrencyAmount",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Debt",
    "DebtStatus",
    "DeterministicClock",
    "EntryKind",
    "FinancialEntry",
    "LegacyTotal",
    "Money",
    "ParticipantsMode",
    "Payment",
    "Period",
    "PeriodStatus",
    "Reservation",
    "ReservationPaymentStatus",
    "SystemClock",
    "Tour",
    "TourExpense",
    "TourPaymentStatus",
    "coerce_amount",
    "coerce_positive",
    "parse_monetary_string",
]
