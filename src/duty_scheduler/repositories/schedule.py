"""Key-value persistence for serialised team schedules."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from duty_scheduler.db.models.schedule import ScheduleDocument


def get_document(session: Session, key: str) -> ScheduleDocument | None:
    return session.get(ScheduleDocument, key)


def put_document(session: Session, key: str, payload: str) -> ScheduleDocument:
    document = session.get(ScheduleDocument, key)
    if document is None:
        document = ScheduleDocument(key=key, payload=payload)
        session.add(document)
    else:
        document.payload = payload
    session.flush()
    return document


class ScheduleBackend(Protocol):
    """Passive string store addressed by a team-scoped key."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


class MemoryScheduleBackend:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value


class SqlScheduleBackend:
    """Stores each key as one :class:`ScheduleDocument` row."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def read(self, key: str) -> str | None:
        with self._session_factory() as session:
            document = get_document(session, key)
            return document.payload if document else None

    def write(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            put_document(session, key, value)
            session.commit()
