"""ORM models for the tour back office."""

from tour_kernel.models.company import CompanyModel
from tour_kernel.models.debt import DebtModel
from tour_kernel.models.financial_entry import FinancialEntryModel
from tour_kernel.models.payment import PaymentModel
from tour_kernel.models.period import BREAKDOWN_FIELDS, PeriodModel
from tour_kernel.models.reservation import ReservationModel
from tour_kernel.models.tour import TourModel

__all__ = [
    "BREAKDOWN_FIELDS",
    "CompanyModel",
    "DebtModel",
    "FinancialEntryModel",
    "PaymentModel",
    "PeriodModel",
    "ReservationModel",
    "TourModel",
]
