"""Read-only selectors returning domain DTOs."""

from tour_kernel.selectors.base import BaseSelector
from tour_kernel.selectors.ledger_selector import LedgerSelector
from tour_kernel.selectors.source_selector import SourceSelector

__all__ = ["BaseSelector", "LedgerSelector", "SourceSelector"]
