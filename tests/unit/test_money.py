"""
Unit tests for the Money value object.

Verifies:
- Decimal-only amounts (float constructor prohibition)
- Same-currency arithmetic
- Cross-currency arithmetic is refused
"""

from decimal import Decimal

import pytest

from tour_kernel.domain.values import Currency, Money


class TestConstruction:
    def test_from_string(self):
        money = Money.of("100.50", "TRY")
        assert money.amount == Decimal("100.50")
        assert money.currency == Currency("TRY")

    def test_from_int(self):
        assert Money.of(5, "EUR").amount == Decimal("5")

    def test_float_rejected(self):
        """Floats never enter monetary arithmetic."""
        with pytest.raises(ValueError, match="float"):
            Money(0.1, "EUR")

    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            Money(True, "EUR")

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            Money(Decimal("NaN"), "EUR")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            Money.of("abc", "EUR")

    def test_zero(self):
        zero = Money.zero("USD")
        assert zero.is_zero
        assert not zero.is_positive

    def test_immutable(self):
        money = Money.of("1", "EUR")
        with pytest.raises(AttributeError):
            money.amount = Decimal("2")


class TestArithmetic:
    def test_add_same_currency(self):
        assert Money.of("100", "EUR") + Money.of("50.25", "EUR") == Money.of("150.25", "EUR")

    def test_subtract_same_currency(self):
        assert Money.of("100", "EUR") - Money.of("150", "EUR") == Money.of("-50", "EUR")

    def test_negate(self):
        assert -Money.of("10", "USD") == Money.of("-10", "USD")

    def test_multiply_by_head_count(self):
        assert Money.of("25", "EUR") * 4 == Money.of("100", "EUR")
        assert 4 * Money.of("25", "EUR") == Money.of("100", "EUR")

    def test_multiply_by_float_refused(self):
        with pytest.raises(TypeError):
            Money.of("25", "EUR") * 1.5

    def test_compare_same_currency(self):
        assert Money.of("1", "TRY") < Money.of("2", "TRY")


class TestCurrencyMismatch:
    """Amounts of different currencies are never combined."""

    def test_add_refuses_mismatch(self):
        with pytest.raises(ValueError, match="currency mismatch"):
            Money.of("100", "TRY") + Money.of("100", "USD")

    def test_subtract_refuses_mismatch(self):
        with pytest.raises(ValueError, match="currency mismatch"):
            Money.of("100", "EUR") - Money.of("1", "GBP")

    def test_compare_refuses_mismatch(self):
        with pytest.raises(ValueError):
            Money.of("1", "EUR") < Money.of("2", "USD")

    def test_add_non_money_refused(self):
        with pytest.raises(TypeError):
            Money.of("1", "EUR") + Decimal("1")
