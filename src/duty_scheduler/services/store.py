"""Per-team schedule state, mirrored to a key-value backend.

The store owns the year-indexed ``{onCall, onDuty}`` lists of one team for the
lifetime of the session. Every change happens in memory first and is then
flushed to the backend. Reading never fails: a missing, unreadable or
malformed document degrades to an empty schedule.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import date

from pydantic import TypeAdapter, ValidationError

from duty_scheduler.repositories.schedule import ScheduleBackend
from duty_scheduler.schemas.schedule import OnCallShift, OnDutyShift, ScheduleYearData

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "schedule"

_YEAR_MAP = TypeAdapter(dict[str, ScheduleYearData])


def year_key(year: int | str) -> str:
    return f"{int(year):04d}"


def storage_key(team_key: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    return f"{prefix}:{team_key}"


def _pivot_legacy_layout(raw: dict) -> dict:
    # Older documents were indexed {onCall: {year: [...]}, onDuty: {year: [...]}}.
    on_call = raw.get("onCall") or {}
    on_duty = raw.get("onDuty") or {}
    if not isinstance(on_call, dict) or not isinstance(on_duty, dict):
        raise ValueError("legacy schedule layout must map years to lists")
    years = set(on_call) | set(on_duty)
    return {
        year: {"onCall": on_call.get(year, []), "onDuty": on_duty.get(year, [])}
        for year in years
    }


class ScheduleStore:
    def __init__(
        self,
        team_key: str,
        backend: ScheduleBackend,
        *,
        year: int | None = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ) -> None:
        self.team_key = team_key
        self.key = storage_key(team_key, key_prefix)
        self._backend = backend
        self._year = year_key(year if year is not None else date.today().year)
        self._data: dict[str, ScheduleYearData] = self.load()

    # ── Persistence ──

    def load(self) -> dict[str, ScheduleYearData]:
        """Read the team's document, returning ``{}`` on any storage or parse fault."""

        try:
            raw_text = self._backend.read(self.key)
        except Exception:
            logger.warning("Could not read schedule %s, starting empty", self.key, exc_info=True)
            return {}
        if not raw_text:
            return {}
        try:
            raw = json.loads(raw_text)
            if not isinstance(raw, dict):
                raise ValueError("schedule document must be a JSON object")
            if "onCall" in raw or "onDuty" in raw:
                raw = _pivot_legacy_layout(raw)
            data = _YEAR_MAP.validate_python(raw)
            return {year_key(year): value for year, value in data.items()}
        except (ValueError, ValidationError):
            logger.warning("Discarding unreadable schedule %s", self.key, exc_info=True)
            return {}

    def save(self) -> None:
        """Flush the in-memory schedule; backend failures are logged, not raised."""

        payload = _YEAR_MAP.dump_json(self._data, by_alias=True, exclude_none=True).decode("utf-8")
        try:
            self._backend.write(self.key, payload)
        except Exception:
            logger.warning("Could not persist schedule %s", self.key, exc_info=True)

    # ── Active year ──

    @property
    def year(self) -> str:
        return self._year

    def select_year(self, year: int | str) -> ScheduleYearData:
        self._year = year_key(year)
        return self.get_year(self._year)

    def years(self) -> list[str]:
        return sorted(self._data)

    # ── Reads ──

    def get_year(self, year: int | str) -> ScheduleYearData:
        return self._data.get(year_key(year)) or ScheduleYearData()

    @property
    def on_call(self) -> list[OnCallShift]:
        return list(self.get_year(self._year).on_call)

    @property
    def on_duty(self) -> list[OnDutyShift]:
        return list(self.get_year(self._year).on_duty)

    # ── Writes ──

    def set_year_data(self, year: int | str, data: ScheduleYearData) -> None:
        self._data[year_key(year)] = data
        self.save()

    def set_on_call(self, shifts: Sequence[OnCallShift], year: int | str | None = None) -> None:
        target = year_key(year) if year is not None else self._year
        current = self.get_year(target)
        self.set_year_data(target, current.model_copy(update={"on_call": list(shifts)}))

    def set_on_duty(self, shifts: Sequence[OnDutyShift], year: int | str | None = None) -> None:
        target = year_key(year) if year is not None else self._year
        current = self.get_year(target)
        self.set_year_data(target, current.model_copy(update={"on_duty": list(shifts)}))
