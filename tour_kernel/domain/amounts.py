"""
Amounts -- the single normalization point for monetary input.

Responsibility:
    Turns whatever shape a stored amount has (Decimal, int, float, or a
    free-text string such as ``"1.250,50 TL"``) into a Decimal.  Every
    ingestion boundary calls parse_monetary_string or coerce_amount; no call
    site parses amounts on its own.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Separator rules:
    - Currency symbols, codes, letters and whitespace are dropped.
    - When both ``.`` and ``,`` occur, the right-most one is the decimal
      separator and the other is a thousands separator.
    - When one separator occurs more than once, it is a thousands separator
      and every group after the first must have three digits.
    - A single lone separator is the decimal separator.

Failure modes:
    - MalformedAmountError when nothing numeric remains after normalization,
      or when the separators do not form a valid number.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from tour_kernel.exceptions import MalformedAmountError

_STRIP_RE = re.compile(r"[^\d.,+\-]")
_SHAPE_RE = re.compile(r"^[+-]?[\d.,]+$")


def _normalize_separators(text: str, raw: object) -> str:
    has_dot = "." in text
    has_comma = "," in text

    if has_dot and has_comma:
        decimal_sep = "." if text.rfind(".") > text.rfind(",") else ","
        group_sep = "," if decimal_sep == "." else "."
        integer_part, _, fraction = text.rpartition(decimal_sep)
        if group_sep in fraction or decimal_sep in integer_part:
            raise MalformedAmountError(raw, "ambiguous separators")
        return integer_part.replace(group_sep, "") + "." + fraction

    sep = "." if has_dot else "," if has_comma else None
    if sep is None:
        return text
    if text.count(sep) == 1:
        return text.replace(sep, ".")

    head, *groups = text.split(sep)
    if not head.lstrip("+-") or any(len(g) != 3 for g in groups):
        raise MalformedAmountError(raw, "invalid digit grouping")
    return head + "".join(groups)


def parse_monetary_string(raw: object) -> Decimal:
    """
    Normalize a monetary value to Decimal.

    Args:
        raw: Decimal, int, float or string.

    Returns:
        The parsed Decimal (sign preserved).

    Raises:
        MalformedAmountError: If the value is not numeric after normalization.
    """
    if raw is None or isinstance(raw, bool):
        raise MalformedAmountError(raw, "missing value")

    if isinstance(raw, Decimal):
        if not raw.is_finite():
            raise MalformedAmountError(raw, "not finite")
        return raw
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        value = Decimal(str(raw))
        if not value.is_finite():
            raise MalformedAmountError(raw, "not finite")
        return value
    if not isinstance(raw, str):
        raise MalformedAmountError(raw, f"unsupported type {type(raw).__name__}")

    text = _STRIP_RE.sub("", raw)
    if not text or not any(ch.isdigit() for ch in text):
        raise MalformedAmountError(raw, "no digits")
    if not _SHAPE_RE.match(text):
        raise MalformedAmountError(raw, "misplaced sign")

    normalized = _normalize_separators(text, raw)
    if normalized.endswith("."):
        normalized += "0"
    if normalized.lstrip("+-").startswith("."):
        normalized = normalized.replace(".", "0.", 1)

    try:
        return Decimal(normalized)
    except InvalidOperation as exc:
        raise MalformedAmountError(raw, "not a number") from exc


def coerce_amount(raw: object) -> Decimal | None:
    """Like parse_monetary_string, but returns None for malformed input."""
    try:
        return parse_monetary_string(raw)
    except MalformedAmountError:
        return None


def coerce_positive(raw: object) -> Decimal | None:
    """Return the parsed amount only when it is strictly positive."""
    value = coerce_amount(raw)
    if value is None or value <= 0:
        return None
    return value
