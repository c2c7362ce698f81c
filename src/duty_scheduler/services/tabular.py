"""Conversion between shift lists and flat spreadsheet rows.

The column sets below are the interchange contract with external spreadsheet
tools: an exported file edited by hand must import back cleanly.
"""

from __future__ import annotations

import logging
import time
import zipfile
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from io import BytesIO
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import BaseModel

from duty_scheduler.schemas.schedule import Member, OnCallRow, OnCallShift, OnDutyRow, OnDutyShift
from duty_scheduler.services.intervals import days_inclusive, parse_iso_date

logger = logging.getLogger(__name__)

ON_CALL_COLUMNS = ("start", "end", "type", "assigneeEmail", "called")
ON_DUTY_COLUMNS = ("start", "end", "assigneeEmail", "notes")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class SpreadsheetError(ValueError):
    """Raised when uploaded bytes are not a readable workbook."""


def _assignee_email(assignee_id: str, members_by_id: Mapping[str, Member]) -> str:
    member = members_by_id.get(assignee_id)
    return member.email if member and member.email else assignee_id


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value).strip()


def _resolve_assignee(row: Mapping[str, Any], members_by_email: Mapping[str, Member]) -> str:
    email = _cell_text(row.get("assigneeEmail")).lower()
    member = members_by_email.get(email)
    if member:
        return member.id
    return _cell_text(row.get("assigneeId"))


def _as_mapping(row: Mapping[str, Any] | BaseModel) -> Mapping[str, Any]:
    if isinstance(row, BaseModel):
        return row.model_dump(by_alias=True)
    return row


def _row_range(start: Any, end: Any) -> tuple[date, date]:
    first, last = parse_iso_date(start), parse_iso_date(end)
    days_inclusive(first, last)
    return first, last


def _batch_millis(now_ms: int | None) -> int:
    return now_ms if now_ms is not None else int(time.time() * 1000)


# ── Shifts -> rows ──


def on_call_to_rows(shifts: Iterable[OnCallShift], members_by_id: Mapping[str, Member]) -> list[OnCallRow]:
    return [
        OnCallRow(
            start=shift.start.isoformat(),
            end=shift.end.isoformat(),
            type=shift.type,
            assignee_email=_assignee_email(shift.assignee_id, members_by_id),
            called="yes" if shift.called else "no",
        )
        for shift in shifts
    ]


def on_duty_to_rows(shifts: Iterable[OnDutyShift], members_by_id: Mapping[str, Member]) -> list[OnDutyRow]:
    return [
        OnDutyRow(
            start=shift.start.isoformat(),
            end=shift.end.isoformat(),
            assignee_email=_assignee_email(shift.assignee_id, members_by_id),
            notes=shift.notes,
        )
        for shift in shifts
    ]


# ── Rows -> shifts ──


def on_call_from_rows(
    rows: Sequence[Mapping[str, Any] | BaseModel],
    members_by_email: Mapping[str, Member],
    *,
    now_ms: int | None = None,
) -> list[OnCallShift]:
    batch = _batch_millis(now_ms)
    shifts = []
    for index, row in enumerate(map(_as_mapping, rows)):
        start, end = _row_range(row.get("start"), row.get("end"))
        shifts.append(
            OnCallShift(
                id=f"{OnCallShift.id_prefix}_{batch}_{index}",
                start=start,
                end=end,
                type="weekend" if _cell_text(row.get("type")).lower() == "weekend" else "week",
                assignee_id=_resolve_assignee(row, members_by_email),
                called=_cell_text(row.get("called")).lower() == "yes",
            )
        )
    return shifts


def on_duty_from_rows(
    rows: Sequence[Mapping[str, Any] | BaseModel],
    members_by_email: Mapping[str, Member],
    *,
    now_ms: int | None = None,
) -> list[OnDutyShift]:
    batch = _batch_millis(now_ms)
    shifts = []
    for index, row in enumerate(map(_as_mapping, rows)):
        # Sheets exported before ranges existed only have a "date" column.
        raw_start = row.get("start") or row.get("date")
        start, end = _row_range(raw_start, row.get("end") or raw_start)
        shifts.append(
            OnDutyShift(
                id=f"{OnDutyShift.id_prefix}_{batch}_{index}",
                start=start,
                end=end,
                assignee_id=_resolve_assignee(row, members_by_email),
                notes=_cell_text(row.get("notes")),
            )
        )
    return shifts


# ── Workbook codec ──


def write_workbook(rows: Iterable[OnCallRow | OnDutyRow], columns: Sequence[str], sheet_title: str) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title
    sheet.append(list(columns))
    for row in rows:
        data = row.model_dump(by_alias=True)
        sheet.append([data.get(column, "") for column in columns])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def read_workbook(data: bytes) -> list[dict[str, Any]]:
    """Return the first sheet as a list of ``{header: value}`` dictionaries."""

    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as exc:
        raise SpreadsheetError("file is not a readable .xlsx workbook") from exc
    try:
        sheet = workbook.worksheets[0]
        values = sheet.iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return []
        names = [_cell_text(cell) for cell in header]
        records = []
        for raw in values:
            if raw is None or all(cell in (None, "") for cell in raw):
                continue
            records.append({name: cell for name, cell in zip(names, raw) if name})
        logger.debug("Read %d rows from sheet %s", len(records), sheet.title)
        return records
    finally:
        workbook.close()


def sheet_title(kind: str, year: int | str) -> str:
    return f"{'OnCall' if kind == 'on-call' else 'OnDuty'}_{year}"


def export_filename(kind: str, year: int | str) -> str:
    return f"{kind}-{year}.xlsx"


__all__ = [
    "ON_CALL_COLUMNS",
    "ON_DUTY_COLUMNS",
    "SpreadsheetError",
    "XLSX_MEDIA_TYPE",
    "export_filename",
    "on_call_from_rows",
    "on_call_to_rows",
    "on_duty_from_rows",
    "on_duty_to_rows",
    "read_workbook",
    "sheet_title",
    "write_workbook",
]
