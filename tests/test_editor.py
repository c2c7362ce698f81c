import threading
from datetime import date

from duty_scheduler.core.config import Settings
from duty_scheduler.repositories.schedule import MemoryScheduleBackend
from duty_scheduler.schemas.schedule import Member
from duty_scheduler.services.editor import EditorRegistry
from duty_scheduler.services.roster import Roster

from .factories import build_member, build_on_call_shift


def test_registry_reuses_editor_per_team(members: list[Member], memory_backend: MemoryScheduleBackend) -> None:
    registry = EditorRegistry(memory_backend, Roster(members=members), Settings(storage_key_prefix="duty"))

    editor = registry.get("platform")

    assert registry.get("platform") is editor
    assert registry.get("payments") is not editor
    assert editor.store.key == "duty:platform"
    assert editor.history.max_size == 10


def test_registry_uses_team_specific_members(memory_backend: MemoryScheduleBackend) -> None:
    lead = build_member(id="lead-1", email="lead@example.com")
    roster = Roster(members=[build_member()], teams={"payments": [lead]})
    registry = EditorRegistry(memory_backend, roster, Settings())

    [shift] = registry.get("payments").add("on-call", today=date(2025, 3, 1))

    assert shift.assignee_id == "lead-1"
    assert shift.end == date(2025, 3, 7)


def test_today_sees_shift_started_in_previous_year(
    members: list[Member], memory_backend: MemoryScheduleBackend
) -> None:
    editor = EditorRegistry(memory_backend, Roster(members=members), Settings()).get("platform")
    editor.replace(
        "on-call",
        [build_on_call_shift(id="nye", start=date(2024, 12, 30), end=date(2025, 1, 5), assignee_id="member-2")],
        2024,
    )

    assert editor.today(date(2025, 1, 2)).night_member.id == "member-2"
    assert editor.today(date(2025, 1, 6)).night_member is None


def test_year_scoped_edits_ignore_the_active_year(
    members: list[Member], memory_backend: MemoryScheduleBackend
) -> None:
    editor = EditorRegistry(memory_backend, Roster(members=members), Settings()).get("platform")
    editor.replace("on-call", [build_on_call_shift(id="keep")], 2025)
    editor.store.select_year(2024)

    editor.delete("on-call", "keep", 2025)
    editor.add("on-duty", 2025, today=date(2025, 2, 1))

    assert editor.store.year == "2024"
    assert editor.store.get_year(2024).on_call == []
    assert editor.store.get_year(2024).on_duty == []
    assert editor.shifts("on-call", 2025) == []
    assert [s.start for s in editor.shifts("on-duty", 2025)] == [date(2025, 2, 1)]


def test_concurrent_edits_on_different_years_stay_apart(
    members: list[Member], memory_backend: MemoryScheduleBackend
) -> None:
    editor = EditorRegistry(memory_backend, Roster(members=members), Settings()).get("platform")
    start = threading.Barrier(2)

    def add_many(year: int) -> None:
        start.wait()
        for _ in range(25):
            editor.add("on-call", year, today=date(year, 3, 1))

    workers = [threading.Thread(target=add_many, args=(year,)) for year in (2024, 2025)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert len(editor.shifts("on-call", 2024)) == 25
    assert len(editor.shifts("on-call", 2025)) == 25
    assert {s.start.year for s in editor.shifts("on-call", 2024)} == {2024}
