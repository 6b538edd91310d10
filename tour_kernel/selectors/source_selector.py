"""
Module: tour_kernel.selectors.source_selector
Responsibility: Read access to the source records a rollup is computed from:
    tours, financial entries and reservations.
Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from tour_kernel.domain.dtos import FinancialEntry, Reservation, Tour
from tour_kernel.models import FinancialEntryModel, ReservationModel, TourModel
from tour_kernel.selectors.base import BaseSelector
from tour_kernel.selectors.mapping import (
    entry_from_row,
    reservation_from_row,
    tour_from_row,
)


def _year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


class SourceSelector(BaseSelector):
    """Lists source records, optionally restricted to one calendar year."""

    def list_tours(self, year: int | None = None) -> list[Tour]:
        stmt = select(TourModel).order_by(TourModel.tour_date, TourModel.id)
        if year is not None:
            start, end = _year_bounds(year)
            stmt = stmt.where(TourModel.tour_date.between(start, end))
        return [tour_from_row(row) for row in self.session.scalars(stmt)]

    def list_financial_entries(self, year: int | None = None) -> list[FinancialEntry]:
        stmt = select(FinancialEntryModel).order_by(
            FinancialEntryModel.entry_date, FinancialEntryModel.id
        )
        if year is not None:
            start, end = _year_bounds(year)
            stmt = stmt.where(FinancialEntryModel.entry_date.between(start, end))
        return [entry_from_row(row) for row in self.session.scalars(stmt)]

    def list_reservations(self, year: int | None = None) -> list[Reservation]:
        stmt = select(ReservationModel).order_by(
            ReservationModel.tour_date, ReservationModel.id
        )
        if year is not None:
            start, end = _year_bounds(year)
            stmt = stmt.where(ReservationModel.tour_date.between(start, end))
        return [reservation_from_row(row) for row in self.session.scalars(stmt)]

    def get_reservation(self, reservation_id: str) -> Reservation | None:
        row = self.session.get(ReservationModel, reservation_id)
        return reservation_from_row(row) if row is not None else None
