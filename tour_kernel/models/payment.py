"""
Module: tour_kernel.models.payment
Responsibility: ORM persistence for payments collected against debts.
Architecture position: Kernel > Models.  May import from db/base.py only.

Payments are append-only; a debt's paid_amount is the running total the
sync service maintains alongside them.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase


class PaymentModel(TimestampedBase):
    """One collection against a debt."""

    __tablename__ = "debt_payments"

    __table_args__ = (Index("idx_payment_debt", "debt_id"),)

    debt_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reservation_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    paid_on: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(4000), default="", nullable=False)
    method: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    payer: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    receipt_number: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    def __repr__(self) -> str:
        return f"<PaymentModel {self.debt_id} {self.amount} {self.currency}>"
