from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response, UploadFile, status
from pydantic import TypeAdapter, ValidationError

from duty_scheduler.schemas.schedule import HistoryStatus, ScheduleYearData, Shift, TodayAssignments
from duty_scheduler.services.editor import SHIFT_TYPES, EditorRegistry, ScheduleEditor, ShiftKind
from duty_scheduler.services.intervals import InvalidRangeError
from duty_scheduler.services.tabular import XLSX_MEDIA_TYPE, SpreadsheetError, export_filename

router = APIRouter()


def get_registry(request: Request) -> EditorRegistry:
    return request.app.state.editors


def get_editor(team: str, registry: Annotated[EditorRegistry, Depends(get_registry)]) -> ScheduleEditor:
    return registry.get(team)


TeamEditor = Annotated[ScheduleEditor, Depends(get_editor)]


def _dump(shifts: list[Shift]) -> list[dict[str, Any]]:
    return [shift.model_dump(mode="json", by_alias=True, exclude_none=True) for shift in shifts]


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))


# ── Team-level ──


@router.get("/{team}/years", response_model=list[str])
def list_years(editor: TeamEditor) -> list[str]:
    return editor.store.years()


@router.get("/{team}/today", response_model=TodayAssignments)
def get_today(
    editor: TeamEditor,
    on: Annotated[date | None, Query(description="Day to resolve, defaults to today")] = None,
) -> TodayAssignments:
    return editor.today(on)


@router.get("/{team}/history", response_model=HistoryStatus)
def get_history(editor: TeamEditor) -> HistoryStatus:
    return editor.history_status()


@router.post("/{team}/undo", response_model=HistoryStatus)
def undo(editor: TeamEditor) -> HistoryStatus:
    if not editor.undo():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Nothing to undo")
    return editor.history_status()


@router.post("/{team}/save", status_code=status.HTTP_204_NO_CONTENT)
def save(editor: TeamEditor) -> None:
    editor.save()


# ── Year-level ──


@router.get("/{team}/{year}", response_model=ScheduleYearData)
def get_year(year: int, editor: TeamEditor) -> ScheduleYearData:
    return editor.store.get_year(year)


@router.put("/{team}/{year}/{kind}")
def replace_shifts(
    year: int,
    kind: ShiftKind,
    editor: TeamEditor,
    payload: Annotated[list[dict[str, Any]], Body()],
) -> list[dict[str, Any]]:
    try:
        shifts = TypeAdapter(list[SHIFT_TYPES[kind]]).validate_python(payload)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    return _dump(editor.replace(kind, shifts, year))


@router.post("/{team}/{year}/{kind}/shifts", status_code=status.HTTP_201_CREATED)
def add_shift(year: int, kind: ShiftKind, editor: TeamEditor) -> list[dict[str, Any]]:
    return _dump(editor.add(kind, year))


@router.post("/{team}/{year}/{kind}/shifts/{shift_id}/after", status_code=status.HTTP_201_CREATED)
def add_shift_after(year: int, kind: ShiftKind, shift_id: str, editor: TeamEditor) -> list[dict[str, Any]]:
    try:
        return _dump(editor.add_after(kind, shift_id, year))
    except InvalidRangeError as exc:
        raise _bad_request(exc) from exc


@router.post("/{team}/{year}/{kind}/shifts/{shift_id}/split")
def split_shift(year: int, kind: ShiftKind, shift_id: str, editor: TeamEditor) -> list[dict[str, Any]]:
    try:
        return _dump(editor.split(kind, shift_id, year))
    except InvalidRangeError as exc:
        raise _bad_request(exc) from exc


@router.patch("/{team}/{year}/{kind}/shifts/{shift_id}")
def update_shift(
    year: int,
    kind: ShiftKind,
    shift_id: str,
    editor: TeamEditor,
    payload: Annotated[dict[str, Any], Body()],
) -> list[dict[str, Any]]:
    try:
        return _dump(editor.update(kind, shift_id, payload, year))
    except InvalidRangeError as exc:
        raise _bad_request(exc) from exc
    except ValidationError as exc:
        raise _unprocessable(exc) from exc


@router.delete("/{team}/{year}/{kind}/shifts/{shift_id}")
def delete_shift(year: int, kind: ShiftKind, shift_id: str, editor: TeamEditor) -> list[dict[str, Any]]:
    return _dump(editor.delete(kind, shift_id, year))


@router.get("/{team}/{year}/{kind}/export")
def export_shifts(year: int, kind: ShiftKind, editor: TeamEditor) -> Response:
    content = editor.export_workbook(kind, year)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{export_filename(kind, year)}"'},
    )


@router.post("/{team}/{year}/{kind}/import")
async def import_shifts(year: int, kind: ShiftKind, file: UploadFile, editor: TeamEditor) -> list[dict[str, Any]]:
    data = await file.read()
    try:
        return _dump(editor.import_workbook(kind, data, year))
    except (SpreadsheetError, InvalidRangeError) as exc:
        raise _bad_request(exc) from exc
