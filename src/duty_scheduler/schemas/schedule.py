from __future__ import annotations

import builtins
from datetime import date as Date
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from duty_scheduler.services.intervals import days_inclusive

OnCallType = Literal["week", "weekend"]


class CamelModel(BaseModel):
    """Base for records persisted and exchanged with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Member(CamelModel):
    id: str
    full_name: str
    email: str
    role: str
    avatar: str | None = None
    team: str | None = None


class OnCallShiftUpdate(CamelModel):
    start: Date | None = None
    end: Date | None = None
    type: OnCallType | None = None
    assignee_id: str | None = None
    called: bool | None = None


class OnDutyShiftUpdate(CamelModel):
    start: Date | None = None
    end: Date | None = None
    assignee_id: str | None = None
    notes: str | None = None


class OnCallShift(CamelModel):
    id_prefix: ClassVar[str] = "oc"
    default_span_days: ClassVar[int] = 7
    update_model: ClassVar[builtins.type[CamelModel]] = OnCallShiftUpdate

    id: str
    start: Date
    end: Date
    type: OnCallType = "week"
    assignee_id: str = ""
    called: bool = False

    @model_validator(mode="after")
    def check_range(self) -> OnCallShift:
        days_inclusive(self.start, self.end)
        return self


class OnDutyShift(CamelModel):
    id_prefix: ClassVar[str] = "od"
    default_span_days: ClassVar[int] = 2
    update_model: ClassVar[builtins.type[CamelModel]] = OnDutyShiftUpdate

    id: str
    start: Date
    end: Date
    assignee_id: str = ""
    notes: str = ""
    # Older records carried a single day instead of a range.
    date: Date | None = None

    @model_validator(mode="before")
    @classmethod
    def fill_range_from_date(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        single_day = data.get("date")
        if single_day in ("", None):
            data.pop("date", None)
            single_day = None
        if not data.get("start") and single_day is not None:
            data["start"] = single_day
        if not data.get("end") and data.get("start"):
            data["end"] = data["start"]
        return data

    @model_validator(mode="after")
    def check_range(self) -> OnDutyShift:
        days_inclusive(self.start, self.end)
        return self


Shift = OnCallShift | OnDutyShift


class ScheduleYearData(CamelModel):
    on_call: list[OnCallShift] = Field(default_factory=list)
    on_duty: list[OnDutyShift] = Field(default_factory=list)


class OnCallRow(CamelModel):
    start: str
    end: str
    type: str
    assignee_email: str
    called: Literal["yes", "no"]


class OnDutyRow(CamelModel):
    start: str
    end: str
    assignee_email: str
    notes: str


class TodayAssignments(CamelModel):
    day_member: Member | None = None
    night_member: Member | None = None


class HistoryStatus(CamelModel):
    can_undo: bool
    size: int
    max_size: int
