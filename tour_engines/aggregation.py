"""
Module: tour_engines.aggregation
Responsibility:
    Currency-safe aggregation.  Sums amounts per currency code and combines
    per-currency totals; never adds amounts of different currencies.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - A total is a mapping currency -> Decimal; one bucket per currency.
    - No implicit conversion between currencies.
    - Blank or unknown currency codes land in the default currency bucket.

Failure modes:
    - None raised.  Amounts are expected to be Decimal already; callers
      normalize raw input through tour_kernel.domain.amounts first.

Usage:
    from tour_engines.aggregation import sum_by_currency, subtract

    income = sum_by_currency([(Decimal("100"), "EUR"), (Decimal("50"), "USD")])
    profit = subtract(income, {"EUR": Decimal("30")})
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Union

from tour_kernel.domain.currency import CurrencyRegistry
from tour_kernel.domain.dtos import Breakdown, CurrencyAmount
from tour_kernel.domain.values import Money
from tour_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")

Totals = dict[str, Decimal]
AmountLike = Union[Money, tuple[Decimal, Union[str, None]]]

_ZERO = Decimal("0")


def normalize_currency(raw: str | None, default: str) -> str:
    """
    Resolve the bucket an amount belongs to.

    Blank codes resolve to ``default`` silently; unknown codes resolve to
    ``default`` with a warning, since they usually mean bad source data.
    """
    code = CurrencyRegistry.normalize(raw)
    if not code:
        return default
    if not CurrencyRegistry.is_valid(code):
        logger.warning(
            "unknown_currency_defaulted",
            extra={"raw_currency": raw, "default_currency": default},
        )
        return default
    return code


def sum_by_currency(
    amounts: Iterable[AmountLike],
    default_currency: str = "TRY",
    drop_zero: bool = False,
) -> Totals:
    """
    Sum amounts per currency.

    Args:
        amounts: Money values or ``(Decimal, currency)`` pairs.
        default_currency: Bucket for blank or unknown currency codes.
        drop_zero: Drop buckets whose total is zero or negative (alerts).

    Returns:
        Mapping currency -> total, ordered by currency code.
    """
    totals: Totals = {}
    for item in amounts:
        if isinstance(item, Money):
            amount, currency = item.amount, item.currency.code
        else:
            amount, raw_currency = item
            currency = normalize_currency(raw_currency, default_currency)
        totals[currency] = totals.get(currency, _ZERO) + amount

    if drop_zero:
        totals = {c: v for c, v in totals.items() if v > 0}
    return dict(sorted(totals.items()))


def add(a: Mapping[str, Decimal], b: Mapping[str, Decimal]) -> Totals:
    """Per-currency ``a + b`` over the union of currencies."""
    result = dict(a)
    for currency, amount in b.items():
        result[currency] = result.get(currency, _ZERO) + amount
    return dict(sorted(result.items()))


def subtract(a: Mapping[str, Decimal], b: Mapping[str, Decimal]) -> Totals:
    """
    Per-currency ``a - b`` over the union of currencies.

    A currency present only in ``b`` yields a negative entry.
    """
    result = dict(a)
    for currency, amount in b.items():
        result[currency] = result.get(currency, _ZERO) - amount
    return dict(sorted(result.items()))


def positive_only(totals: Mapping[str, Decimal]) -> Totals:
    return {c: v for c, v in sorted(totals.items()) if v > 0}


def to_breakdown(totals: Mapping[str, Decimal]) -> Breakdown:
    """Persisted form: CurrencyAmount rows ordered by currency code."""
    return tuple(
        CurrencyAmount(currency=c, amount=v) for c, v in sorted(totals.items())
    )


def from_breakdown(rows: Breakdown) -> Totals:
    return sum_by_currency((r.amount, r.currency) for r in rows)


def format_totals(totals: Mapping[str, Decimal], empty: str = "-") -> str:
    """Human readable ``"100.00 EUR + 50.00 USD"``; ``empty`` when no buckets."""
    if not totals:
        return empty
    parts = []
    for currency, amount in sorted(totals.items()):
        places = CurrencyRegistry.get_decimal_places(currency)
        parts.append(f"{amount:,.{places}f} {currency}")
    return " + ".join(parts)
