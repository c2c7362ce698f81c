"""Bounded, time-debounced undo history over :class:`ScheduleStore` mutations."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from duty_scheduler.schemas.schedule import OnCallShift, OnDutyShift, ScheduleYearData
from duty_scheduler.services.store import ScheduleStore, year_key

logger = logging.getLogger(__name__)

MAX_HISTORY_SIZE = 10
DEBOUNCE_MS = 300


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


@dataclass(frozen=True)
class HistoryEntry:
    """Full state of one year as it was before a mutation."""

    year: str
    data: ScheduleYearData


class HistoryManager:
    """Record a snapshot at most once per debounce window, then apply the change.

    Mutations inside the window are treated as one gesture: they are applied
    immediately but share the snapshot taken by the first of them.
    """

    def __init__(
        self,
        store: ScheduleStore,
        *,
        debounce_ms: int = DEBOUNCE_MS,
        max_size: int = MAX_HISTORY_SIZE,
        clock: Callable[[], int] = monotonic_ms,
    ) -> None:
        self._store = store
        self._window_ms = debounce_ms
        self._clock = clock
        self._entries: deque[HistoryEntry] = deque(maxlen=max_size)
        self._last_snapshot_at: int | None = None

    @property
    def store(self) -> ScheduleStore:
        return self._store

    @property
    def can_undo(self) -> bool:
        return bool(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def max_size(self) -> int:
        return self._entries.maxlen or 0

    def _record(self, year: int | str | None) -> None:
        now = self._clock()
        if self._last_snapshot_at is not None and now - self._last_snapshot_at < self._window_ms:
            return
        target = year_key(year) if year is not None else self._store.year
        self._entries.append(HistoryEntry(year=target, data=self._store.get_year(target)))
        self._last_snapshot_at = now

    def set_on_call(self, shifts: Sequence[OnCallShift], year: int | str | None = None) -> None:
        self._record(year)
        self._store.set_on_call(shifts, year=year)

    def set_on_duty(self, shifts: Sequence[OnDutyShift], year: int | str | None = None) -> None:
        self._record(year)
        self._store.set_on_duty(shifts, year=year)

    def undo(self) -> bool:
        """Restore the most recent snapshot; ``False`` when there is nothing to undo."""

        if not self._entries:
            return False
        entry = self._entries.pop()
        self._store.set_year_data(entry.year, entry.data)
        self._last_snapshot_at = None
        logger.info("Undo on %s restored year %s (%d left)", self._store.key, entry.year, len(self._entries))
        return True

    def save(self) -> None:
        self._store.save()
