"""
Module: tour_engines.receivables
Responsibility:
    Pure rules of the receivable ledger: which reservations produce a debt,
    how a debt is built or refreshed from its reservation, how status is
    derived, and how a company's balance is summed.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The sync service in
    tour_services owns lookups, locking and persistence.

Invariants enforced:
    - Status is always derived from amount and paid amount, never copied.
    - Refreshing a debt keeps its id, so one reservation maps to one debt.
    - Company balances are per currency.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal

from tour_engines.aggregation import normalize_currency, positive_only, sum_by_currency
from tour_kernel.domain.amounts import coerce_amount, coerce_positive
from tour_kernel.domain.dtos import (
    CompanyBalance,
    Debt,
    DebtStatus,
    Reservation,
    ReservationPaymentStatus,
)

_ZERO = Decimal("0")


def derive_debt_status(amount: Decimal, paid: Decimal) -> DebtStatus:
    """paid >= amount -> paid; 0 < paid < amount -> partially_paid; else unpaid."""
    if paid <= 0:
        return DebtStatus.UNPAID
    if paid >= amount:
        return DebtStatus.PAID
    return DebtStatus.PARTIALLY_PAID


def reservation_payment_status(
    amount: Decimal, paid: Decimal
) -> ReservationPaymentStatus:
    """Payment status shown on the reservation itself."""
    status = derive_debt_status(amount, paid)
    return {
        DebtStatus.UNPAID: ReservationPaymentStatus.PENDING,
        DebtStatus.PARTIALLY_PAID: ReservationPaymentStatus.PARTIAL,
        DebtStatus.PAID: ReservationPaymentStatus.PAID,
    }[status]


def is_ledger_eligible(reservation: Reservation) -> bool:
    """A reservation produces a debt when it has a company and a positive total."""
    return bool(reservation.company_id) and coerce_positive(reservation.total_amount) is not None


def describe(reservation: Reservation) -> str:
    parts = [f"Reservation {reservation.serial_number or reservation.id}"]
    if reservation.destination_name:
        parts.append(reservation.destination_name)
    if reservation.customer_name:
        parts.append(reservation.customer_name)
    return " - ".join(parts)


def build_debt_from_reservation(
    reservation: Reservation,
    *,
    debt_id: str,
    company_name: str = "",
    default_currency: str = "EUR",
    existing: Debt | None = None,
) -> Debt:
    """
    Create a debt for ``reservation`` or refresh ``existing`` in place.

    The paid amount comes from the reservation when it records one; on
    refresh a reservation without a paid amount keeps the debt's paid total.

    Raises:
        ValueError: If the reservation is not ledger eligible.
    """
    amount = coerce_positive(reservation.total_amount)
    if not reservation.company_id or amount is None:
        raise ValueError(f"Reservation {reservation.id} does not produce a debt")

    paid = coerce_amount(reservation.amount_paid)
    if paid is None:
        paid = existing.paid_amount if existing is not None else _ZERO
    paid = max(paid, _ZERO)

    currency = normalize_currency(reservation.currency, default_currency)
    due_date = reservation.payment_due_date or reservation.tour_date

    if existing is not None:
        return replace(
            existing,
            company_id=reservation.company_id,
            company_name=company_name or existing.company_name,
            reservation_serial=reservation.serial_number,
            tour_id=reservation.tour_id,
            amount=amount,
            currency=currency,
            paid_amount=paid,
            due_date=due_date,
            status=derive_debt_status(amount, paid),
            description=describe(reservation),
        )

    return Debt(
        id=debt_id,
        company_id=reservation.company_id,
        company_name=company_name,
        reservation_id=reservation.id,
        reservation_serial=reservation.serial_number,
        tour_id=reservation.tour_id,
        amount=amount,
        currency=currency,
        paid_amount=paid,
        due_date=due_date,
        status=derive_debt_status(amount, paid),
        description=describe(reservation),
    )


def apply_payment(debt: Debt, amount: Decimal) -> Debt:
    """Add a collection to the debt and re-derive its status."""
    if amount <= 0:
        raise ValueError(f"Payment amount must be positive, got {amount}")
    paid = debt.paid_amount + amount
    return replace(debt, paid_amount=paid, status=derive_debt_status(debt.amount, paid))


def company_balance(company_id: str, debts: Iterable[Debt]) -> CompanyBalance:
    """Per-currency totals of a company's debts; outstanding drops settled buckets."""
    rows = [d for d in debts if d.company_id == company_id]
    total = sum_by_currency((d.amount, d.currency) for d in rows)
    paid = sum_by_currency((d.paid_amount, d.currency) for d in rows)
    outstanding = positive_only(
        {c: v - paid.get(c, _ZERO) for c, v in total.items()}
    )
    return CompanyBalance(
        company_id=company_id,
        total_debt=total,
        total_paid=paid,
        outstanding=outstanding,
        debt_count=len(rows),
    )
