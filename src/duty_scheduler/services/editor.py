"""Single entry point for editing one team's schedule."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel

from duty_scheduler.core.config import Settings
from duty_scheduler.repositories.schedule import ScheduleBackend
from duty_scheduler.schemas.schedule import (
    HistoryStatus,
    Member,
    OnCallShift,
    OnDutyShift,
    Shift,
    TodayAssignments,
)
from duty_scheduler.services import mutations, tabular
from duty_scheduler.services.history import HistoryManager
from duty_scheduler.services.roster import Roster
from duty_scheduler.services.store import ScheduleStore, year_key
from duty_scheduler.services.today import index_members, resolve_today

logger = logging.getLogger(__name__)

ShiftKind = Literal["on-call", "on-duty"]

SHIFT_TYPES: dict[str, type[OnCallShift] | type[OnDutyShift]] = {
    "on-call": OnCallShift,
    "on-duty": OnDutyShift,
}


class ScheduleEditor:
    """Routes every change through the history manager so it can be undone.

    Year-scoped operations take the year explicitly and never move the
    store's active year, so requests for different years of the same team
    can share one editor. Each read-modify-write runs under the editor lock.
    """

    def __init__(self, history: HistoryManager, members: Sequence[Member]) -> None:
        self.history = history
        self.store = history.store
        self.members = list(members)
        self.members_by_id, self.members_by_email = index_members(self.members)
        self._lock = threading.RLock()

    # ── Reads ──

    def _year(self, year: int | str | None) -> str:
        return year_key(year) if year is not None else self.store.year

    def shifts(self, kind: ShiftKind, year: int | str | None = None) -> list[Shift]:
        data = self.store.get_year(self._year(year))
        return list(data.on_call if kind == "on-call" else data.on_duty)

    def today(self, day: date | None = None) -> TodayAssignments:
        day = day or date.today()
        # Shifts crossing New Year are stored under the year they start in.
        current = self.store.get_year(day.year)
        previous = self.store.get_year(day.year - 1)
        return resolve_today(
            [*current.on_duty, *previous.on_duty],
            [*current.on_call, *previous.on_call],
            self.members_by_id,
            today=day,
        )

    def history_status(self) -> HistoryStatus:
        return HistoryStatus(
            can_undo=self.history.can_undo,
            size=self.history.size,
            max_size=self.history.max_size,
        )

    # ── Mutations ──

    def replace(self, kind: ShiftKind, shifts: Sequence[Shift], year: int | str | None = None) -> list[Shift]:
        with self._lock:
            if kind == "on-call":
                self.history.set_on_call(shifts, year=year)
            else:
                self.history.set_on_duty(shifts, year=year)
            return self.shifts(kind, year)

    def _apply(
        self, kind: ShiftKind, year: int | str | None, change: Callable[[list[Shift]], list[Shift]]
    ) -> list[Shift]:
        with self._lock:
            return self.replace(kind, change(self.shifts(kind, year)), year)

    def add(self, kind: ShiftKind, year: int | str | None = None, *, today: date | None = None) -> list[Shift]:
        return self._apply(
            kind, year, lambda shifts: mutations.add_shift(shifts, self.members, SHIFT_TYPES[kind], today=today)
        )

    def add_after(self, kind: ShiftKind, reference_id: str, year: int | str | None = None) -> list[Shift]:
        return self._apply(kind, year, lambda shifts: mutations.add_shift_after(shifts, reference_id, self.members))

    def split(self, kind: ShiftKind, shift_id: str, year: int | str | None = None) -> list[Shift]:
        return self._apply(kind, year, lambda shifts: mutations.split_shift(shifts, shift_id))

    def delete(self, kind: ShiftKind, shift_id: str, year: int | str | None = None) -> list[Shift]:
        return self._apply(kind, year, lambda shifts: mutations.delete_shift(shifts, shift_id))

    def update(
        self,
        kind: ShiftKind,
        shift_id: str,
        partial: BaseModel | Mapping[str, Any],
        year: int | str | None = None,
    ) -> list[Shift]:
        return self._apply(kind, year, lambda shifts: mutations.update_shift(shifts, shift_id, partial))

    def undo(self) -> bool:
        with self._lock:
            return self.history.undo()

    def save(self) -> None:
        with self._lock:
            self.history.save()

    # ── Spreadsheet import / export ──

    def export_workbook(self, kind: ShiftKind, year: int | str | None = None) -> bytes:
        target = self._year(year)
        data = self.store.get_year(target)
        if kind == "on-call":
            rows = tabular.on_call_to_rows(data.on_call, self.members_by_id)
            columns = tabular.ON_CALL_COLUMNS
        else:
            rows = tabular.on_duty_to_rows(data.on_duty, self.members_by_id)
            columns = tabular.ON_DUTY_COLUMNS
        return tabular.write_workbook(rows, columns, tabular.sheet_title(kind, target))

    def import_workbook(self, kind: ShiftKind, data: bytes, year: int | str | None = None) -> list[Shift]:
        """Replace one year's list of *kind* with the rows of an uploaded workbook."""

        rows = tabular.read_workbook(data)
        if kind == "on-call":
            shifts = tabular.on_call_from_rows(rows, self.members_by_email)
        else:
            shifts = tabular.on_duty_from_rows(rows, self.members_by_email)
        target = self._year(year)
        logger.info("Imported %d %s shifts into %s/%s", len(shifts), kind, self.store.team_key, target)
        return self.replace(kind, shifts, target)


class EditorRegistry:
    """Hands out one long-lived editor per team."""

    def __init__(self, backend: ScheduleBackend, roster: Roster, settings: Settings) -> None:
        self._backend = backend
        self._roster = roster
        self._settings = settings
        self._editors: dict[str, ScheduleEditor] = {}
        self._lock = threading.Lock()

    def get(self, team_key: str) -> ScheduleEditor:
        with self._lock:
            editor = self._editors.get(team_key)
            if editor is None:
                store = ScheduleStore(team_key, self._backend, key_prefix=self._settings.storage_key_prefix)
                history = HistoryManager(
                    store,
                    debounce_ms=self._settings.history_debounce_ms,
                    max_size=self._settings.max_history_size,
                )
                editor = ScheduleEditor(history, self._roster.members_for(team_key))
                self._editors[team_key] = editor
                logger.info("Opened schedule editor for team %s", team_key)
            return editor
