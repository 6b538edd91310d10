"""
Module: tour_kernel.models.financial_entry
Responsibility: ORM persistence for ad-hoc income and expense entries.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase


class FinancialEntryModel(TimestampedBase):
    """An income or expense line recorded outside of a tour sale."""

    __tablename__ = "financial_entries"

    __table_args__ = (
        Index("idx_entry_date", "entry_date"),
        Index("idx_entry_kind", "kind"),
    )

    entry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    tour_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    company_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(String(4000), default="", nullable=False)

    def __repr__(self) -> str:
        return f"<FinancialEntryModel {self.kind} {self.amount} {self.currency}>"
