"""
Module: tour_kernel.models.tour
Responsibility: ORM persistence for sold tours.  Activities and expense lines
    are stored as JSON lists on the tour row; their amounts are kept as text
    exactly as entered and normalized only when read by the engines.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, Date, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase


class TourModel(TimestampedBase):
    """
    A sold tour.

    Guarantees:
        - activities and expenses are lists of plain dicts (JSON-safe).
    """

    __tablename__ = "tours"

    __table_args__ = (Index("idx_tour_date", "tour_date"),)

    serial_number: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)

    tour_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    number_of_people: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False
    )
    partial_payment_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(38, 9), nullable=True
    )
    partial_payment_currency: Mapped[str | None] = mapped_column(String(3), nullable=True)

    activities: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    expenses: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    def __repr__(self) -> str:
        return f"<TourModel {self.serial_number or self.id} {self.tour_date}>"
