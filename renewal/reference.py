"""Process-wide reference data held as immutable, versioned snapshots."""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from .converter import BSCalendarConverter
from .fiscal_year import FiscalYearCalendar
from .rates import RateTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Calendar, fiscal years and tariff that belong together."""

    converter: BSCalendarConverter
    fiscal_years: FiscalYearCalendar
    rates: RateTable

    @property
    def version(self) -> str:
        table = self.converter.table
        return f"calendar {table.first_year}-{table.last_year} / tariff {self.rates.version}"


class ReferenceStore:
    """
    Holds the current ReferenceSnapshot.

    refresh() swaps in a whole new snapshot; it never edits the current one.
    A computation should call snapshot() once and use that object throughout,
    so a concurrent refresh cannot mix old and new tables.
    """

    def __init__(self, snapshot: Optional[ReferenceSnapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = snapshot

    def snapshot(self) -> ReferenceSnapshot:
        current = self._snapshot
        if current is None:
            raise LookupError("Reference data has not been loaded")
        return current

    def refresh(self, snapshot: ReferenceSnapshot) -> ReferenceSnapshot:
        """Install a new snapshot and return the one it replaced (or None)."""
        with self._lock:
            previous = self._snapshot
            self._snapshot = snapshot
        logger.info(
            "Reference data refreshed: %s (was %s)",
            snapshot.version,
            previous.version if previous else "empty",
        )
        return previous
