"""
tour_services.schedule_service -- destination schedule for operations.

Responsibility:
    Reads reservations and groups them by destination with urgency flags
    using the configured urgency window and the injected clock.

Architecture position:
    Services -- thin orchestration over tour_engines.urgency.

Invariants enforced:
    - The urgency window length is LedgerSettings.urgency_window_days.
    - Past reservations are left out unless ``include_past`` is set;
      reservations without a tour date are always listed.
"""

from __future__ import annotations

from tour_config import LedgerSettings, get_active_settings
from tour_engines.urgency import DestinationGroup, group_by_destination
from tour_kernel.domain.clock import Clock, SystemClock
from tour_kernel.logging_config import get_logger
from tour_services.ports import SourceReader

logger = get_logger("services.schedule")


class ScheduleService:
    """
    Destination groups for the operations list.

    Contract:
        Receives the source reader, a Clock and settings via constructor
        injection.  Store errors propagate unchanged.

    Non-goals:
        - No writes.
    """

    def __init__(
        self,
        sources: SourceReader,
        clock: Clock | None = None,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._sources = sources
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_settings()

    @property
    def window_days(self) -> int:
        return self._settings.urgency_window_days

    def destination_groups(
        self,
        year: int | None = None,
        urgent_first: bool = False,
        include_past: bool = False,
    ) -> tuple[DestinationGroup, ...]:
        today = self._clock.today()
        reservations = [
            r
            for r in self._sources.list_reservations(year)
            if include_past or r.tour_date is None or r.tour_date >= today
        ]
        groups = group_by_destination(
            reservations,
            today,
            window_days=self.window_days,
            urgent_first=urgent_first,
        )
        logger.debug(
            "destination_groups_built",
            extra={
                "groups": len(groups),
                "reservations": len(reservations),
                "urgent_groups": sum(1 for g in groups if g.is_urgent),
                "window_days": self.window_days,
            },
        )
        return groups
