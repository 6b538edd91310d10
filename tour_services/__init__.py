"""
tour_services -- Package init and public API.

Responsibility:
    Stateful orchestration services that compose the pure engines
    (tour_engines/) with repository ports, locks and the clock.  This is the
    only layer that may hold a database session or read wall-clock time.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction:
        tour_services/ -> tour_engines/  (allowed)
        tour_services/ -> tour_kernel/   (allowed)
        tour_engines/  -> tour_services/ (FORBIDDEN)
        tour_kernel/   -> tour_services/ (FORBIDDEN)
"""

from tour_services.period_rollup_service import PeriodRollupService
from tour_services.ports import (
    LedgerStore,
    PeriodStore,
    ReservationStore,
    SourceReader,
)
from tour_services.receivable_sync_service import (
    ReceivableSyncService,
    total_outstanding,
)
from tour_services.results import (
    DeleteResult,
    RecomputeHandle,
    RecomputeResult,
    RecomputeStatus,
    ReservationSaveResult,
    ResyncReport,
    SyncResult,
    SyncStatus,
    UnitFailure,
)
from tour_services.schedule_service import ScheduleService
from tour_services.sql_store import SqlAlchemyStore

__all__ = [
    "DeleteResult",
    "LedgerStore",
    "PeriodRollupService",
    "PeriodStore",
    "ReceivableSyncService",
    "RecomputeHandle",
    "RecomputeResult",
    "RecomputeStatus",
    "ReservationSaveResult",
    "ReservationStore",
    "ResyncReport",
    "ScheduleService",
    "SourceReader",
    "SqlAlchemyStore",
    "SyncResult",
    "SyncStatus",
    "UnitFailure",
    "total_outstanding",
]
