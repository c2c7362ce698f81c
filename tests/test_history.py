from datetime import date

from duty_scheduler.repositories.schedule import MemoryScheduleBackend
from duty_scheduler.services.history import MAX_HISTORY_SIZE, HistoryManager
from duty_scheduler.services.store import ScheduleStore

from .factories import build_on_call_shift, build_on_duty_shift


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000_000

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def _history(backend: MemoryScheduleBackend, clock: FakeClock, **kwargs) -> HistoryManager:
    store = ScheduleStore("platform", backend, year=2025)
    return HistoryManager(store, clock=clock, **kwargs)


def test_mutations_inside_window_share_one_entry(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)

    for index in range(5):
        history.set_on_call([build_on_call_shift(id=f"oc{index}")])
        clock.advance(50)

    assert history.size == 1
    assert [s.id for s in history.store.on_call] == ["oc4"]

    history.undo()
    assert history.store.on_call == []


def test_mutations_spaced_by_window_each_push(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)

    for index in range(4):
        history.set_on_call([build_on_call_shift(id=f"oc{index}")])
        clock.advance(300)

    assert history.size == 4


def test_history_is_capped_and_keeps_latest_value(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)

    for index in range(15):
        history.set_on_call([build_on_call_shift(id=f"oc{index}")])
        assert history.size <= MAX_HISTORY_SIZE
        clock.advance(300)

    assert history.size == MAX_HISTORY_SIZE
    assert [s.id for s in history.store.on_call] == ["oc14"]

    # The oldest five snapshots (empty, oc0..oc3) were evicted.
    restored = []
    while history.undo():
        restored.append([s.id for s in history.store.on_call])
    assert restored == [[f"oc{index}"] for index in range(13, 3, -1)]
    assert not history.can_undo


def test_undo_restores_previous_state_and_persists(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)
    first = [build_on_call_shift(id="first")]

    history.set_on_call(first)
    clock.advance(400)
    history.set_on_call([build_on_call_shift(id="second")])

    assert history.can_undo
    assert history.undo() is True
    assert history.store.on_call == first

    reopened = ScheduleStore("platform", memory_backend, year=2025)
    assert reopened.on_call == first


def test_undo_on_empty_history(memory_backend: MemoryScheduleBackend) -> None:
    history = _history(memory_backend, FakeClock())
    assert not history.can_undo
    assert history.undo() is False


def test_undo_pushes_nothing_and_next_mutation_is_recorded(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)

    history.set_on_call([build_on_call_shift(id="a")])
    history.undo()
    assert history.size == 0

    history.set_on_duty([build_on_duty_shift()])
    assert history.size == 1


def test_snapshot_covers_both_lists(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)
    history.set_on_duty([build_on_duty_shift(id="keep")])
    clock.advance(1000)

    history.set_on_call([build_on_call_shift()])
    clock.advance(10)
    history.set_on_duty([])
    history.undo()

    assert history.store.on_call == []
    assert [s.id for s in history.store.on_duty] == ["keep"]


def test_undo_restores_the_year_it_was_taken_in(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock)
    history.set_on_call([build_on_call_shift(id="y2025")])
    clock.advance(1000)

    history.store.select_year(2024)
    history.set_on_call([build_on_call_shift(id="y2024", start=date(2024, 1, 1), end=date(2024, 1, 7))])
    history.store.select_year(2025)

    history.undo()

    assert history.store.get_year(2024).on_call == []
    assert [s.id for s in history.store.get_year(2025).on_call] == ["y2025"]


def test_custom_size_and_window(memory_backend: MemoryScheduleBackend) -> None:
    clock = FakeClock()
    history = _history(memory_backend, clock, debounce_ms=0, max_size=2)
    for index in range(3):
        history.set_on_call([build_on_call_shift(id=f"oc{index}")])
    assert history.size == 2
    assert history.max_size == 2


def test_save_flushes_to_backend(memory_backend: MemoryScheduleBackend) -> None:
    history = _history(memory_backend, FakeClock())
    memory_backend.write("schedule:platform", "stale")

    history.save()

    assert memory_backend.read("schedule:platform") == "{}"
