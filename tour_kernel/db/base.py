"""
Module: tour_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the string primary key convention, the type annotation map for
    consistent column types, and the TimestampedBase mixin.
Architecture position: Kernel > DB.  Lowest-level import target of the
    persistence layer; MUST NOT import from models/, selectors/ or outer layers.

Invariants enforced:
    - Decimal precision: Decimal maps to Numeric(38, 9).  Never float.
    - Primary keys are strings so that ids coming from the surrounding
      application (document ids, period codes) are stored verbatim.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import Date, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is a String(64) primary key, uuid4 text unless supplied.
        - Decimal maps to Numeric(38, 9); datetime is timezone aware.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date(),
        int: Integer,
    }

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)


class TimestampedBase(Base):
    """
    Abstract base with row timestamps.

    Guarantees:
        - created_at is set on INSERT and never changes.
        - updated_at is refreshed on every UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
