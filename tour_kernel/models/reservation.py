"""
Module: tour_kernel.models.reservation
Responsibility: ORM persistence for reservations, the source of receivable
    ledger debts.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase


class ReservationModel(TimestampedBase):
    """A booking for a destination on a tour date."""

    __tablename__ = "reservations"

    __table_args__ = (
        Index("idx_reservation_tour_date", "tour_date"),
        Index("idx_reservation_company", "company_id"),
    )

    serial_number: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    tour_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    pickup_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    destination_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    destination_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    customer_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)

    company_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    amount_paid: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    payment_due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    adults: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    children: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    infants: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    tour_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<ReservationModel {self.serial_number or self.id} {self.tour_date}>"
