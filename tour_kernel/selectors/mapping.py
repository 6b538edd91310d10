"""
Row and JSON mapping between ORM models and domain DTOs.

Pure functions shared by the selectors (row -> DTO) and the SQL store
(DTO -> row).  Nested records are stored as JSON with amounts as strings so
that no float ever enters the database.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from tour_kernel.domain.dtos import (
    Activity,
    Breakdown,
    Company,
    CurrencyAmount,
    Debt,
    DebtStatus,
    EntryKind,
    FinancialEntry,
    LegacyTotal,
    ParticipantsMode,
    Payment,
    Period,
    PeriodStatus,
    Reservation,
    Tour,
    TourExpense,
    TourPaymentStatus,
)
from tour_kernel.models import (
    CompanyModel,
    DebtModel,
    FinancialEntryModel,
    PaymentModel,
    PeriodModel,
    ReservationModel,
    TourModel,
)


def _raw_to_json(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


# ---------------------------------------------------------------------------
# Nested JSON
# ---------------------------------------------------------------------------


def activity_to_json(activity: Activity) -> dict[str, Any]:
    return {
        "name": activity.name,
        "price": _raw_to_json(activity.price),
        "currency": activity.currency,
        "participants": activity.participants,
        "participants_mode": activity.participants_mode.value,
        "partial_payment_amount": _raw_to_json(activity.partial_payment_amount),
        "partial_payment_currency": activity.partial_payment_currency,
    }


def activity_from_json(data: dict[str, Any]) -> Activity:
    return Activity(
        name=data.get("name", ""),
        price=data.get("price"),
        currency=data.get("currency"),
        participants=int(data.get("participants") or 0),
        participants_mode=ParticipantsMode(data.get("participants_mode") or "all"),
        partial_payment_amount=data.get("partial_payment_amount"),
        partial_payment_currency=data.get("partial_payment_currency"),
    )


def expense_to_json(expense: TourExpense) -> dict[str, Any]:
    return {
        "name": expense.name,
        "amount": _raw_to_json(expense.amount),
        "currency": expense.currency,
        "category": expense.category,
    }


def expense_from_json(data: dict[str, Any]) -> TourExpense:
    return TourExpense(
        name=data.get("name", ""),
        amount=data.get("amount"),
        currency=data.get("currency"),
        category=data.get("category", ""),
    )


def breakdown_to_json(rows: Breakdown) -> list[dict[str, str]]:
    return [{"currency": r.currency, "amount": str(r.amount)} for r in rows]


def breakdown_from_json(rows: list[dict[str, Any]] | None) -> Breakdown:
    return tuple(
        CurrencyAmount(currency=r["currency"], amount=Decimal(str(r["amount"])))
        for r in rows or ()
    )


# ---------------------------------------------------------------------------
# Rows -> DTOs
# ---------------------------------------------------------------------------


def tour_from_row(row: TourModel) -> Tour:
    return Tour(
        id=row.id,
        serial_number=row.serial_number,
        customer_name=row.customer_name,
        tour_date=row.tour_date,
        end_date=row.end_date,
        currency=row.currency,
        total_price=row.total_price,
        number_of_people=row.number_of_people,
        activities=tuple(activity_from_json(a) for a in row.activities or ()),
        expenses=tuple(expense_from_json(e) for e in row.expenses or ()),
        payment_status=TourPaymentStatus(row.payment_status),
        partial_payment_amount=row.partial_payment_amount,
        partial_payment_currency=row.partial_payment_currency,
    )


def entry_from_row(row: FinancialEntryModel) -> FinancialEntry:
    return FinancialEntry(
        id=row.id,
        entry_date=row.entry_date,
        kind=EntryKind(row.kind),
        category=row.category,
        amount=row.amount,
        currency=row.currency,
        tour_id=row.tour_id,
        company_id=row.company_id,
        description=row.description,
    )


def reservation_from_row(row: ReservationModel) -> Reservation:
    return Reservation(
        id=row.id,
        serial_number=row.serial_number,
        tour_date=row.tour_date,
        pickup_time=row.pickup_time,
        destination_id=row.destination_id,
        destination_name=row.destination_name,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        company_id=row.company_id,
        company_name=row.company_name,
        total_amount=row.total_amount,
        currency=row.currency,
        amount_paid=row.amount_paid,
        payment_due_date=row.payment_due_date,
        adults=row.adults,
        children=row.children,
        infants=row.infants,
        tour_id=row.tour_id,
    )


def company_from_row(row: CompanyModel) -> Company:
    return Company(
        id=row.id,
        name=row.name,
        category=row.category,
        contact_person=row.contact_person,
        phone=row.phone,
        email=row.email,
        is_placeholder=row.is_placeholder,
    )


def debt_from_row(row: DebtModel) -> Debt:
    return Debt(
        id=row.id,
        company_id=row.company_id,
        company_name=row.company_name,
        reservation_id=row.reservation_id,
        reservation_serial=row.reservation_serial,
        tour_id=row.tour_id,
        amount=Decimal(row.amount),
        currency=row.currency,
        paid_amount=Decimal(row.paid_amount or 0),
        due_date=row.due_date,
        status=DebtStatus(row.status),
        description=row.description,
    )


def period_from_row(row: PeriodModel) -> Period:
    def legacy(name: str) -> LegacyTotal:
        return LegacyTotal(
            amount=Decimal(getattr(row, f"{name}_amount")),
            currency=getattr(row, f"{name}_currency"),
        )

    return Period(
        year=row.year,
        month=row.month,
        financial_income=breakdown_from_json(row.financial_income),
        tour_income=breakdown_from_json(row.tour_income),
        company_expenses=breakdown_from_json(row.company_expenses),
        tour_expenses=breakdown_from_json(row.tour_expenses),
        financial_income_legacy=legacy("financial_income"),
        tour_income_legacy=legacy("tour_income"),
        company_expenses_legacy=legacy("company_expenses"),
        tour_expenses_legacy=legacy("tour_expenses"),
        tour_count=row.tour_count,
        customer_count=row.customer_count,
        reservation_count=row.reservation_count,
        status=PeriodStatus(row.status),
        updated_at=row.updated_at,
    )


def payment_from_row(row: PaymentModel) -> Payment:
    return Payment(
        id=row.id,
        debt_id=row.debt_id,
        reservation_id=row.reservation_id,
        amount=Decimal(row.amount),
        currency=row.currency,
        paid_on=row.paid_on,
        description=row.description,
        method=row.method,
        payer=row.payer,
        receipt_number=row.receipt_number,
    )
