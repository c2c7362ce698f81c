"""Resolve who is responsible for a given day from the two shift lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date

from duty_scheduler.schemas.schedule import Member, OnCallShift, OnDutyShift, TodayAssignments
from duty_scheduler.services.intervals import DateRange, contains, range_kind


def index_members(members: Iterable[Member]) -> tuple[dict[str, Member], dict[str, Member]]:
    """Return ``(by_id, by_email)``; email keys are lower-cased."""

    by_id: dict[str, Member] = {}
    by_email: dict[str, Member] = {}
    for member in members:
        by_id[member.id] = member
        if member.email:
            by_email[member.email.lower()] = member
    return by_id, by_email


def _covers(shift: OnCallShift | OnDutyShift, day: date) -> bool:
    if isinstance(shift, OnDutyShift) and shift.date == day:
        return True
    return contains(DateRange(shift.start, shift.end), day)


def find_day_shift(on_duty: Sequence[OnDutyShift], day: date) -> OnDutyShift | None:
    return next((shift for shift in on_duty if _covers(shift, day)), None)


def find_night_shift(on_call: Sequence[OnCallShift], day: date) -> OnCallShift | None:
    """First shift covering *day* whose type matches the day, else the first covering one."""

    covering = [shift for shift in on_call if _covers(shift, day)]
    if not covering:
        return None
    # A single day is either "week" or "weekend", matching the shift types.
    wanted = range_kind(day, day)
    return next((shift for shift in covering if shift.type == wanted), covering[0])


def resolve_today(
    on_duty: Sequence[OnDutyShift],
    on_call: Sequence[OnCallShift],
    members_by_id: Mapping[str, Member],
    today: date | None = None,
) -> TodayAssignments:
    day = today or date.today()
    day_shift = find_day_shift(on_duty, day)
    night_shift = find_night_shift(on_call, day)
    return TodayAssignments(
        day_member=members_by_id.get(day_shift.assignee_id) if day_shift else None,
        night_member=members_by_id.get(night_shift.assignee_id) if night_shift else None,
    )
