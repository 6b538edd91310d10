"""
Typed Exception Hierarchy for the Tour Ledger.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from TourLedgerError:

    TourLedgerError (base)
    |
    +-- AmountError
    |   +-- MalformedAmountError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |
    +-- PeriodError
    |   +-- PeriodNotFoundError
    |   +-- RecomputeFailureError
    |   +-- RecomputeInProgressError
    |   +-- PartialDeleteFailureError
    |
    +-- LedgerError
    |   +-- LedgerSyncError
    |   +-- DebtNotFoundError
    |   +-- OrphanCompanyReferenceError
    |
    +-- StoreError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category  | Code                       | When Raised
----------|----------------------------|-------------------------------------------
Amount    | MALFORMED_AMOUNT           | Value cannot be read as a decimal amount
----------|----------------------------|-------------------------------------------
Currency  | INVALID_CURRENCY           | Not a known ISO 4217 code
----------|----------------------------|-------------------------------------------
Period    | PERIOD_NOT_FOUND           | No stored period for year/month
          | RECOMPUTE_FAILURE          | Source read failed, nothing was written
          | RECOMPUTE_IN_PROGRESS      | Another recompute holds the guard
          | PARTIAL_DELETE_FAILURE     | Some months of a year delete failed
----------|----------------------------|-------------------------------------------
Ledger    | LEDGER_SYNC_FAILED         | Debt upsert for a reservation failed
          | DEBT_NOT_FOUND             | Debt id does not exist
          | ORPHAN_COMPANY_REFERENCE   | Debt points at a missing company
----------|----------------------------|-------------------------------------------
Store     | STORE_ERROR                | Repository read/write failure

===============================================================================
HANDLING PATTERNS
===============================================================================

Only RecomputeFailureError blocks an operation.  MalformedAmountError is
recovered where amounts are parsed (the contribution is skipped).  Ledger
errors are reported as warnings on result objects, never raised out of a
reservation save.

    result = rollup.recompute(year=2024)
    if result.status is RecomputeStatus.FAILED:
        notify(result.error.code, result.error.source)
"""


class TourLedgerError(Exception):
    """
    Base exception for all tour ledger errors.

    All subclasses carry a `code` class attribute for machine-readable
    identification.
    """

    code: str = "TOUR_LEDGER_ERROR"


# Amount exceptions


class AmountError(TourLedgerError):
    """Base exception for amount parsing errors."""

    code: str = "AMOUNT_ERROR"


class MalformedAmountError(AmountError):
    """A value could not be normalized to a decimal amount."""

    code: str = "MALFORMED_AMOUNT"

    def __init__(self, raw_value: object, reason: str = "not a number"):
        self.raw_value = raw_value
        self.reason = reason
        super().__init__(f"Malformed amount {raw_value!r}: {reason}")


# Currency exceptions


class CurrencyError(TourLedgerError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a known ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid currency code: {currency}")


# Period exceptions


class PeriodError(TourLedgerError):
    """Base exception for period rollup errors."""

    code: str = "PERIOD_ERROR"


class PeriodNotFoundError(PeriodError):
    """No stored period for the given year and month."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period_code: str):
        self.period_code = period_code
        super().__init__(f"Period not found: {period_code}")


class RecomputeFailureError(PeriodError):
    """Reading source records failed; no period was written."""

    code: str = "RECOMPUTE_FAILURE"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Recompute aborted while reading {source}: {reason}")


class RecomputeInProgressError(PeriodError):
    """A recompute is already running."""

    code: str = "RECOMPUTE_IN_PROGRESS"

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f"Recompute already in progress (requested scope: {scope})")


class PartialDeleteFailureError(PeriodError):
    """Deleting a year's periods left some months behind."""

    code: str = "PARTIAL_DELETE_FAILURE"

    def __init__(self, year: int, deleted: list[str], failed: list[str]):
        self.year = year
        self.deleted = deleted
        self.failed = failed
        super().__init__(
            f"Deleting periods of {year} failed for {len(failed)} month(s): "
            f"{', '.join(failed)}"
        )


# Ledger exceptions


class LedgerError(TourLedgerError):
    """Base exception for receivable ledger errors."""

    code: str = "LEDGER_ERROR"


class LedgerSyncError(LedgerError):
    """The debt derived from a reservation could not be written."""

    code: str = "LEDGER_SYNC_FAILED"

    def __init__(self, reservation_id: str, reason: str):
        self.reservation_id = reservation_id
        self.reason = reason
        super().__init__(
            f"Receivable sync failed for reservation {reservation_id}: {reason}"
        )


class DebtNotFoundError(LedgerError):
    """Debt with the given id does not exist."""

    code: str = "DEBT_NOT_FOUND"

    def __init__(self, debt_id: str):
        self.debt_id = debt_id
        super().__init__(f"Debt not found: {debt_id}")


class OrphanCompanyReferenceError(LedgerError):
    """A debt references a company that no longer exists."""

    code: str = "ORPHAN_COMPANY_REFERENCE"

    def __init__(self, company_id: str):
        self.company_id = company_id
        super().__init__(f"Company referenced by ledger is missing: {company_id}")


# Store exceptions


class StoreError(TourLedgerError):
    """A repository operation failed."""

    code: str = "STORE_ERROR"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store operation {operation} failed: {reason}")
