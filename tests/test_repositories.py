from sqlalchemy.orm import Session, sessionmaker

from duty_scheduler.repositories.schedule import SqlScheduleBackend, get_document, put_document
from duty_scheduler.services.store import ScheduleStore

from .factories import build_on_call_shift


def test_put_document_inserts_then_updates(session_factory: sessionmaker[Session]) -> None:
    with session_factory() as session:
        put_document(session, "schedule:platform", "{}")
        put_document(session, "schedule:platform", '{"2025": {}}')
        session.commit()

    with session_factory() as session:
        document = get_document(session, "schedule:platform")
        assert document is not None
        assert document.payload == '{"2025": {}}'
        assert document.updated_at is not None
        assert get_document(session, "schedule:other") is None


def test_sql_backend_reads_back_written_values(session_factory: sessionmaker[Session]) -> None:
    backend = SqlScheduleBackend(session_factory)

    assert backend.read("schedule:platform") is None
    backend.write("schedule:platform", "first")
    backend.write("schedule:platform", "second")

    assert backend.read("schedule:platform") == "second"


def test_store_persists_through_sql_backend(session_factory: sessionmaker[Session]) -> None:
    backend = SqlScheduleBackend(session_factory)
    store = ScheduleStore("platform", backend, year=2025)
    store.set_on_call([build_on_call_shift()])

    reopened = ScheduleStore("platform", SqlScheduleBackend(session_factory), year=2025)

    assert reopened.on_call == [build_on_call_shift()]
