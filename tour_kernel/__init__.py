"""
Tour Kernel - back-office financial aggregation core.

Shared foundation for the tour back office:
- Decimal-only, currency-tagged monetary values
- Immutable domain records for tours, entries, reservations, periods, debts
- Typed exceptions with machine-readable codes
- Structured JSON logging
- SQLAlchemy persistence for derived periods and the receivable ledger
"""

__version__ = "0.1.0"
