"""
Module: tour_kernel.models.company
Responsibility: ORM persistence for counterparties referenced by debts.
Architecture position: Kernel > Models.  May import from db/base.py only.

Placeholder rows (is_placeholder=True) are recreated by the receivable sync
when a debt references a company that no longer exists.
"""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from tour_kernel.db.base import TimestampedBase


class CompanyModel(TimestampedBase):
    """An agency or supplier."""

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    contact_person: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    is_placeholder: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<CompanyModel {self.name}>"
