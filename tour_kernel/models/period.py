"""
Module: tour_kernel.models.period
Responsibility: ORM persistence for monthly rollups.  One row per calendar
    month, keyed by its period code (``YYYY-MM``).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (year, month) is unique (uq_period_year_month).
    - Breakdown columns hold lists of ``{"currency", "amount"}`` dicts with
      amounts as decimal strings.
    - Every column is derived; rows are replaced by recompute, never edited.
"""

from decimal import Decimal

from sqlalchemy import JSON, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase

BREAKDOWN_FIELDS = (
    "financial_income",
    "tour_income",
    "company_expenses",
    "tour_expenses",
)


class PeriodModel(TimestampedBase):
    """Derived monthly totals grouped by currency."""

    __tablename__ = "periods"

    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_period_year_month"),
        Index("idx_period_year", "year"),
    )

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    financial_income: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    tour_income: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    company_expenses: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    tour_expenses: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Single-currency scalars for older report consumers
    financial_income_amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )
    financial_income_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    tour_income_amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )
    tour_income_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    company_expenses_amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )
    company_expenses_currency: Mapped[str] = mapped_column(String(3), nullable=False)
    tour_expenses_amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )
    tour_expenses_currency: Mapped[str] = mapped_column(String(3), nullable=False)

    tour_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    customer_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reservation_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    status: Mapped[str] = mapped_column(String(10), default="closed", nullable=False)

    @property
    def period_code(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __repr__(self) -> str:
        return f"<PeriodModel {self.period_code}: {self.status}>"
