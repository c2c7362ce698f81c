"""List-in, list-out operations on shift lists.

None of these functions modify their input. An id that matches no shift is
not an error: the caller gets the list back unchanged.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel

from duty_scheduler.schemas.schedule import Member, OnCallShift, OnDutyShift
from duty_scheduler.services.intervals import (
    DateRange,
    InvalidRangeError,
    add_days,
    days_inclusive,
    midpoint_split,
)

ShiftT = TypeVar("ShiftT", OnCallShift, OnDutyShift)


def generate_shift_id(prefix: str, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{prefix}_{now_ms}"


def _default_assignee(members: Sequence[Member]) -> str:
    return members[0].id if members else ""


def _find_index(shifts: Sequence[ShiftT], shift_id: str) -> int | None:
    for index, shift in enumerate(shifts):
        if shift.id == shift_id:
            return index
    return None


def add_shift(
    shifts: Sequence[ShiftT],
    members: Sequence[Member],
    shift_cls: type[ShiftT],
    *,
    today: date | None = None,
    now_ms: int | None = None,
) -> list[ShiftT]:
    start = today or date.today()
    new_shift = shift_cls(
        id=generate_shift_id(shift_cls.id_prefix, now_ms),
        start=start,
        end=add_days(start, shift_cls.default_span_days - 1),
        assignee_id=_default_assignee(members),
    )
    return [*shifts, new_shift]


def add_shift_after(
    shifts: Sequence[ShiftT],
    reference_id: str,
    members: Sequence[Member],
    *,
    now_ms: int | None = None,
) -> list[ShiftT]:
    """Insert a shift of the same length starting on the reference shift's last day."""

    index = _find_index(shifts, reference_id)
    if index is None:
        return list(shifts)
    reference = shifts[index]
    length = days_inclusive(reference.start, reference.end)
    fields: dict[str, Any] = {
        "id": generate_shift_id(reference.id_prefix, now_ms),
        "start": reference.end,
        "end": add_days(reference.end, length - 1),
        "assignee_id": _default_assignee(members),
    }
    if isinstance(reference, OnCallShift):
        fields["type"] = reference.type
    new_shift = type(reference)(**fields)
    return [*shifts[: index + 1], new_shift, *shifts[index + 1 :]]


def split_shift(shifts: Sequence[ShiftT], target_id: str) -> list[ShiftT]:
    """Replace a shift by its two halves ``<id>_a`` and ``<id>_b`` at the same position."""

    index = _find_index(shifts, target_id)
    if index is None:
        return list(shifts)
    target = shifts[index]
    first, second = midpoint_split(DateRange(target.start, target.end))
    if second is None:
        raise InvalidRangeError(f"shift {target_id} covers a single day and cannot be split")
    carried: dict[str, Any] = {"date": None} if isinstance(target, OnDutyShift) else {}
    halves = [
        target.model_copy(update={**carried, "id": f"{target.id}_a", "start": first.start, "end": first.end}),
        target.model_copy(update={**carried, "id": f"{target.id}_b", "start": second.start, "end": second.end}),
    ]
    return [*shifts[:index], *halves, *shifts[index + 1 :]]


def delete_shift(shifts: Sequence[ShiftT], shift_id: str) -> list[ShiftT]:
    return [shift for shift in shifts if shift.id != shift_id]


def update_shift(
    shifts: Sequence[ShiftT],
    shift_id: str,
    partial: BaseModel | Mapping[str, Any],
) -> list[ShiftT]:
    index = _find_index(shifts, shift_id)
    if index is None:
        return list(shifts)
    current = shifts[index]
    if isinstance(partial, BaseModel):
        partial = partial.model_dump(exclude_unset=True)
    changes = current.update_model.model_validate(partial).model_dump(exclude_unset=True, exclude_none=True)
    fields = {**current.model_dump(), **changes}
    days_inclusive(fields["start"], fields["end"])
    if isinstance(current, OnDutyShift) and ("start" in changes or "end" in changes):
        # A moved range supersedes the legacy single day.
        fields["date"] = None
    merged = type(current).model_validate(fields)
    return [*shifts[:index], merged, *shifts[index + 1 :]]


def sort_shifts(shifts: Sequence[ShiftT]) -> list[ShiftT]:
    return sorted(shifts, key=lambda shift: (shift.start, shift.end))


__all__ = [
    "add_shift",
    "add_shift_after",
    "delete_shift",
    "generate_shift_id",
    "sort_shifts",
    "split_shift",
    "update_shift",
]
