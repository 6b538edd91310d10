"""
Module: tour_engines.urgency
Responsibility:
    Groups reservations by destination for the operations list and flags
    groups with a tour inside the urgency window.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  ``today`` is passed in.

Invariants enforced:
    - Rows sort by (tour date, pickup time); a missing pickup time sorts as
      "00:00" and a missing tour date sorts last.
    - The urgency window is [today, today + window_days).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from tour_kernel.domain.dtos import Reservation

OTHER_DESTINATION = "Other"
DEFAULT_PICKUP_TIME = "00:00"


@dataclass(frozen=True)
class DestinationGroup:
    name: str
    reservations: tuple[Reservation, ...]
    is_urgent: bool
    urgent_count: int = 0


def destination_label(reservation: Reservation) -> str:
    for candidate in (reservation.destination_name, reservation.destination_id):
        if candidate and candidate.strip():
            return candidate.strip()
    return OTHER_DESTINATION


def schedule_key(reservation: Reservation) -> tuple:
    return (
        reservation.tour_date is None,
        reservation.tour_date or date.min,
        reservation.pickup_time or DEFAULT_PICKUP_TIME,
        reservation.id,
    )


def days_until(reservation: Reservation, today: date) -> int | None:
    if reservation.tour_date is None:
        return None
    return (reservation.tour_date - today).days


def is_within_window(reservation: Reservation, today: date, window_days: int = 3) -> bool:
    if reservation.tour_date is None:
        return False
    return today <= reservation.tour_date < today + timedelta(days=window_days)


def group_by_destination(
    reservations: Iterable[Reservation],
    today: date,
    window_days: int = 3,
    urgent_first: bool = False,
) -> tuple[DestinationGroup, ...]:
    """
    Group reservations by destination.

    Groups are ordered by name (case-insensitive); with ``urgent_first``
    urgent groups come before the rest.
    """
    grouped: dict[str, list[Reservation]] = {}
    for reservation in reservations:
        grouped.setdefault(destination_label(reservation), []).append(reservation)

    groups = []
    for name, rows in grouped.items():
        rows.sort(key=schedule_key)
        urgent = sum(1 for r in rows if is_within_window(r, today, window_days))
        groups.append(
            DestinationGroup(
                name=name,
                reservations=tuple(rows),
                is_urgent=urgent > 0,
                urgent_count=urgent,
            )
        )

    if urgent_first:
        groups.sort(key=lambda g: (not g.is_urgent, g.name.casefold(), g.name))
    else:
        groups.sort(key=lambda g: (g.name.casefold(), g.name))
    return tuple(groups)
