"""
Configuration schema (``tour_config.schema``).

Frozen dataclasses describing the effective settings of the back office.
Instances are produced by ``tour_config.loader`` and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DebtDeletePolicy(str, Enum):
    """What happens to a derived debt when its reservation is deleted."""

    KEEP = "keep"
    UNPAID_ONLY = "unpaid_only"
    ALWAYS = "always"


@dataclass(frozen=True)
class LedgerSettings:
    """
    Effective ledger settings.

    Attributes:
        default_currency: Bucket for amounts whose currency is blank or
            unknown, and the preferred currency of legacy scalar totals.
        default_reservation_currency: Currency assumed for reservations
            saved without one.
        tour_expense_category: Category marking financial entries that were
            generated from tour expenses; excluded from company totals.
        urgency_window_days: Length of the "urgent" window in days,
            starting today.
        placeholder_company_name: Name given to a recreated company when
            no other name is known.
        placeholder_company_category: Category given to a recreated company.
        debt_on_reservation_delete: Policy applied to a reservation's debt
            when the reservation is deleted.
    """

    default_currency: str = "TRY"
    default_reservation_currency: str = "EUR"
    tour_expense_category: str = "Tour Expense"
    urgency_window_days: int = 3
    placeholder_company_name: str = "Reconstructed Company"
    placeholder_company_category: str = "Agency"
    debt_on_reservation_delete: DebtDeletePolicy = DebtDeletePolicy.UNPAID_ONLY
    source: str = "<defaults>"

    def as_dict(self) -> dict[str, object]:
        return {
            "default_currency": self.default_currency,
            "default_reservation_currency": self.default_reservation_currency,
            "tour_expense_category": self.tour_expense_category,
            "urgency_window_days": self.urgency_window_days,
            "placeholder_company_name": self.placeholder_company_name,
            "placeholder_company_category": self.placeholder_company_category,
            "debt_on_reservation_delete": self.debt_on_reservation_delete.value,
        }
