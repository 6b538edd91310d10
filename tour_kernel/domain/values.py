"""
Values -- Immutable, self-validating monetary value objects.

Responsibility:
    Provides Currency and Money, the typed pair every monetary amount in the
    back office travels as.  A Money never loses its currency and never
    combines with a Money of another currency.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are Decimal, never float.
    - Currency codes are ISO 4217 codes known to CurrencyRegistry.
    - Arithmetic between two Money values requires matching currencies.

Failure modes:
    - InvalidCurrencyError on construction with an unknown currency code.
    - ValueError on construction with an amount that is not a number.
    - ValueError when arithmetic mixes currencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tour_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code.

    Guarantees:
        - Code is upper case and registered.
        - Immutable and hashable.
    """

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", CurrencyRegistry.validate(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency.  Sums across currencies are
        expressed as a mapping (see tour_engines.aggregation), never as a
        single Money.

    Guarantees:
        - amount is always a Decimal.
        - Addition and subtraction refuse mismatched currencies.

    Non-goals:
        - No currency conversion.
        - No automatic rounding; call round() explicitly.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, float) or isinstance(self.amount, bool):
            raise ValueError(f"Invalid amount type: {type(self.amount).__name__}")
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e
        if not self.amount.is_finite():
            raise ValueError(f"Invalid amount: {self.amount}")

        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(
                f"currency must be Currency or str, got {type(self.currency)}"
            )

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Round to the currency's minor unit."""
        quantum = Decimal(1).scaleb(-self.currency.decimal_places)
        return Money(self.amount.quantize(quantum, rounding=rounding), self.currency)

    def _require_same_currency(self, other: object, op: str) -> Money:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {op} Money and {type(other).__name__}")
        if other.currency != self.currency:
            raise ValueError(
                f"Cannot {op} {self.currency} and {other.currency}: currency mismatch"
            )
        return other

    def __add__(self, other: Money) -> Money:
        other = self._require_same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        other = self._require_same_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, (float, Money)):
            raise TypeError(f"Cannot multiply Money by {type(factor).__name__}")
        return Money(self.amount * Decimal(factor), self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        other = self._require_same_currency(other, "compare")
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency.code!r})"
