"""
Module: tour_kernel.models.debt
Responsibility: ORM persistence for the receivable ledger ("cari").
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one debt per originating reservation (uq_debt_reservation).
    - company_id is not a foreign key: a company may be deleted while its
      debts survive, and the sync service repairs the reference.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase


class DebtModel(TimestampedBase):
    """Amount a company owes for one reservation."""

    __tablename__ = "debts"

    __table_args__ = (
        UniqueConstraint("reservation_id", name="uq_debt_reservation"),
        Index("idx_debt_company", "company_id"),
        Index("idx_debt_status", "status"),
    )

    company_id: Mapped[str] = mapped_column(String(64), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    reservation_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reservation_serial: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    tour_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), default=Decimal("0"), nullable=False
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="unpaid", nullable=False)
    description: Mapped[str] = mapped_column(String(4000), default="", nullable=False)

    def __repr__(self) -> str:
        return f"<DebtModel {self.company_id} {self.amount} {self.currency} {self.status}>"
