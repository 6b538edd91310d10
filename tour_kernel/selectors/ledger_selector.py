"""
Module: tour_kernel.selectors.ledger_selector
Responsibility: Read access to derived state: stored periods, companies and
    receivable ledger debts.
Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from sqlalchemy import select

from tour_kernel.domain.dtos import Company, Debt, Payment, Period
from tour_kernel.models import CompanyModel, DebtModel, PaymentModel, PeriodModel
from tour_kernel.selectors.base import BaseSelector
from tour_kernel.selectors.mapping import (
    company_from_row,
    debt_from_row,
    payment_from_row,
    period_from_row,
)


class LedgerSelector(BaseSelector):
    """Queries over periods, companies and debts."""

    def list_periods(self, year: int | None = None) -> list[Period]:
        stmt = select(PeriodModel).order_by(PeriodModel.year, PeriodModel.month)
        if year is not None:
            stmt = stmt.where(PeriodModel.year == year)
        return [period_from_row(row) for row in self.session.scalars(stmt)]

    def get_period(self, year: int, month: int) -> Period | None:
        row = self.session.scalars(
            select(PeriodModel).where(
                PeriodModel.year == year, PeriodModel.month == month
            )
        ).one_or_none()
        return period_from_row(row) if row is not None else None

    def get_company(self, company_id: str) -> Company | None:
        row = self.session.get(CompanyModel, company_id)
        return company_from_row(row) if row is not None else None

    def get_debt(self, debt_id: str) -> Debt | None:
        row = self.session.get(DebtModel, debt_id)
        return debt_from_row(row) if row is not None else None

    def get_debt_by_reservation(self, reservation_id: str) -> Debt | None:
        row = self.session.scalars(
            select(DebtModel).where(DebtModel.reservation_id == reservation_id)
        ).one_or_none()
        return debt_from_row(row) if row is not None else None

    def list_debts(self, company_id: str | None = None) -> list[Debt]:
        stmt = select(DebtModel).order_by(DebtModel.due_date, DebtModel.id)
        if company_id is not None:
            stmt = stmt.where(DebtModel.company_id == company_id)
        return [debt_from_row(row) for row in self.session.scalars(stmt)]

    def list_payments(self, debt_id: str) -> list[Payment]:
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.debt_id == debt_id)
            .order_by(PaymentModel.paid_on, PaymentModel.created_at)
        )
        return [payment_from_row(row) for row in self.session.scalars(stmt)]
