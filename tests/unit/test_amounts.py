"""
Tests for monetary input normalization (``tour_kernel.domain.amounts``).

Covers:
- Symbols, codes and whitespace are dropped
- Separator disambiguation (decimal vs thousands)
- Malformed input raises MalformedAmountError; the coerce helpers return None
"""

from decimal import Decimal

import pytest

from tour_kernel.domain.amounts import coerce_amount, coerce_positive, parse_monetary_string
from tour_kernel.exceptions import MalformedAmountError


class TestParseMonetaryString:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("100", Decimal("100")),
            ("100.50", Decimal("100.50")),
            ("1.250,50 TL", Decimal("1250.50")),
            ("1,250.50", Decimal("1250.50")),
            ("12,345,678.9", Decimal("12345678.9")),
            ("€ 100", Decimal("100")),
            ("$1,5", Decimal("1.5")),
            ("1.250.000", Decimal("1250000")),
            ("12,500,000", Decimal("12500000")),
            ("-45,00", Decimal("-45.00")),
            ("+7", Decimal("7")),
            ("5.", Decimal("5")),
            (".5", Decimal("0.5")),
            ("  300 EUR ", Decimal("300")),
        ],
    )
    def test_strings(self, raw, expected):
        assert parse_monetary_string(raw) == expected

    def test_single_separator_is_decimal(self):
        """A lone separator is always the decimal point."""
        assert parse_monetary_string("1.250") == Decimal("1.25")
        assert parse_monetary_string("1,250") == Decimal("1.25")

    def test_decimal_passes_through(self):
        value = Decimal("12.345")
        assert parse_monetary_string(value) is value

    def test_int(self):
        assert parse_monetary_string(42) == Decimal("42")

    def test_float_goes_through_str(self):
        """0.1 stays 0.1 rather than its binary expansion."""
        assert parse_monetary_string(0.1) == Decimal("0.1")

    @pytest.mark.parametrize(
        "raw",
        [None, True, "", "abc", "TL", "1-2", "1.25.0", "1.2,3.4", "--5", [], Decimal("NaN"), float("inf")],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedAmountError) as exc_info:
            parse_monetary_string(raw)
        assert exc_info.value.code == "MALFORMED_AMOUNT"
        assert exc_info.value.raw_value is raw or exc_info.value.raw_value == raw

    def test_error_carries_reason(self):
        with pytest.raises(MalformedAmountError) as exc_info:
            parse_monetary_string("abc")
        assert exc_info.value.reason == "no digits"


class TestCoerce:
    def test_coerce_amount_returns_none_for_garbage(self):
        assert coerce_amount("n/a") is None
        assert coerce_amount(None) is None

    def test_coerce_amount_keeps_sign(self):
        assert coerce_amount("-10") == Decimal("-10")

    @pytest.mark.parametrize("raw", ["0", "-5", "", None, "x"])
    def test_coerce_positive_rejects(self, raw):
        assert coerce_positive(raw) is None

    def test_coerce_positive_accepts(self):
        assert coerce_positive("1.250,00") == Decimal("1250.00")
