# healthtrack/dedup.py
"""
In-memory record of notifications already delivered by this process.

A key is (entity id, calendar day, time-of-day). Keys are never persisted;
a process restart forgets them, which is why a restart in the middle of an
hour can produce a duplicate server email.
"""

import logging
import threading
from datetime import date, datetime
from typing import NamedTuple, Optional, Set

from dateutil.relativedelta import relativedelta

from .timeutils import day_marker, format_hhmm

logger = logging.getLogger(__name__)


class DedupKey(NamedTuple):
    entity_id: int
    day: str  # ISO date, see timeutils.day_marker
    slot: str  # "HH:MM"

    @classmethod
    def for_moment(cls, entity_id: int, moment: datetime, slot: Optional[str] = None) -> "DedupKey":
        """Builds the key for an entity at a moment; `slot` defaults to the moment's HH:MM."""
        return cls(entity_id, day_marker(moment), slot or format_hhmm(moment))


class DedupTracker:
    """
    A set of delivered-notification keys with day-based pruning.

    Keys only matter within a single day, so anything older than
    `retention_days` can be dropped without changing behaviour.
    """

    def __init__(self, retention_days: int = 2):
        self.retention_days = retention_days
        self._keys: Set[DedupKey] = set()
        self._lock = threading.Lock()

    def __contains__(self, key: DedupKey) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def record(self, key: DedupKey) -> None:
        """Marks a key as delivered."""
        with self._lock:
            self._keys.add(key)

    def prune(self, today: date) -> int:
        """
        Drops keys whose day is older than the retention window.

        Args:
            today (date): The current calendar day.

        Returns:
            int: The number of keys removed.
        """
        cutoff = (today - relativedelta(days=self.retention_days)).isoformat()
        with self._lock:
            stale = {key for key in self._keys if key.day < cutoff}
            self._keys -= stale
        if stale:
            logger.debug(f"Pruned {len(stale)} dedup keys older than {cutoff}.")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()
