"""Currency -- ISO 4217 registry used to validate and quantize amounts."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from tour_kernel.exceptions import InvalidCurrencyError


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def quantum(self) -> Decimal:
        """Smallest unit of the currency, usable with Decimal.quantize()."""
        return Decimal(1).scaleb(-self.decimal_places)


def _table(decimal_places: int, entries: str) -> dict[str, CurrencyInfo]:
    rows = {}
    for line in entries.strip().splitlines():
        code, name = line.strip().split(None, 1)
        rows[code] = CurrencyInfo(code, decimal_places, name.strip())
    return rows


class CurrencyRegistry:
    """
    Registry of the ISO 4217 currencies the back office accepts.

    Codes outside the table are treated as unknown; callers that must not
    fail (aggregation) fall back to the configured default currency.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        **_table(2, """
            TRY Turkish Lira
            EUR Euro
            USD US Dollar
            GBP Pound Sterling
            CHF Swiss Franc
            CAD Canadian Dollar
            AUD Australian Dollar
            NZD New Zealand Dollar
            SEK Swedish Krona
            NOK Norwegian Krone
            DKK Danish Krone
            PLN Polish Zloty
            CZK Czech Koruna
            HUF Hungarian Forint
            RON Romanian Leu
            BGN Bulgarian Lev
            RUB Russian Ruble
            UAH Ukrainian Hryvnia
            GEL Georgian Lari
            AZN Azerbaijani Manat
            AED UAE Dirham
            SAR Saudi Riyal
            QAR Qatari Riyal
            ILS Israeli New Shekel
            EGP Egyptian Pound
            MAD Moroccan Dirham
            ZAR South African Rand
            INR Indian Rupee
            CNY Yuan Renminbi
            HKD Hong Kong Dollar
            SGD Singapore Dollar
            THB Thai Baht
            MYR Malaysian Ringgit
            MXN Mexican Peso
            BRL Brazilian Real
        """),
        **_table(0, """
            JPY Japanese Yen
            KRW South Korean Won
            ISK Icelandic Krona
            CLP Chilean Peso
            VND Vietnamese Dong
        """),
        **_table(3, """
            KWD Kuwaiti Dinar
            BHD Bahraini Dinar
            OMR Rial Omani
            JOD Jordanian Dinar
            TND Tunisian Dinar
        """),
    }

    @classmethod
    def normalize(cls, code: str | None) -> str:
        return (code or "").strip().upper()

    @classmethod
    def is_valid(cls, code: str | None) -> bool:
        return cls.normalize(code) in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(cls.normalize(code))

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Decimal places for ``code``; 2 for unknown codes."""
        info = cls.get_info(code)
        return info.decimal_places if info else 2

    @classmethod
    def validate(cls, code: str | None) -> str:
        """
        Return the normalized code.

        Raises:
            InvalidCurrencyError: If the code is not in the registry.
        """
        normalized = cls.normalize(code)
        if normalized not in cls._CURRENCIES:
            raise InvalidCurrencyError(str(code))
        return normalized

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
