"""Seed a demo team schedule for local development.

Run this after applying Alembic migrations:

    python -m alembic upgrade head
    python scripts/seed_demo.py --team platform --year 2025
"""

from __future__ import annotations

import argparse
from datetime import date, timedelta
from itertools import cycle

from duty_scheduler.core.config import get_settings
from duty_scheduler.core.logging import configure_logging
from duty_scheduler.db import session as db_session
from duty_scheduler.repositories.schedule import SqlScheduleBackend
from duty_scheduler.schemas.schedule import Member, OnCallShift, OnDutyShift
from duty_scheduler.services import mutations
from duty_scheduler.services.store import ScheduleStore

DEMO_MEMBERS = [
    Member(id="member-1", full_name="Alice Martin", email="alice@example.com", role="engineer"),
    Member(id="member-2", full_name="Bob Dupont", email="bob@example.com", role="engineer"),
    Member(id="member-3", full_name="Carol Chen", email="carol@example.com", role="lead"),
]


def _first_monday(year: int) -> date:
    january_first = date(year, 1, 1)
    return january_first + timedelta(days=(0 - january_first.weekday()) % 7)


def build_demo_on_call(year: int, weeks: int) -> list[OnCallShift]:
    shifts: list[OnCallShift] = mutations.add_shift([], DEMO_MEMBERS, OnCallShift, today=_first_monday(year), now_ms=0)
    assignees = cycle(DEMO_MEMBERS)
    for index in range(1, weeks):
        shifts = mutations.add_shift_after(shifts, shifts[-1].id, DEMO_MEMBERS, now_ms=index)
    return [
        shift.model_copy(update={"assignee_id": next(assignees).id})
        for shift in shifts
    ]


def build_demo_on_duty(year: int, weeks: int) -> list[OnDutyShift]:
    monday = _first_monday(year)
    assignees = cycle(reversed(DEMO_MEMBERS))
    return [
        OnDutyShift(
            id=f"od_{index}",
            start=monday + timedelta(weeks=index),
            end=monday + timedelta(weeks=index, days=4),
            assignee_id=next(assignees).id,
        )
        for index in range(weeks)
    ]


def seed(team: str, year: int, weeks: int) -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    db_session.init_db()
    store = ScheduleStore(
        team,
        SqlScheduleBackend(db_session.session_factory),
        year=year,
        key_prefix=settings.storage_key_prefix,
    )
    store.set_on_call(build_demo_on_call(year, weeks))
    store.set_on_duty(build_demo_on_duty(year, weeks))
    print(f"Seeded {weeks} weeks of on-call and on-duty shifts for {team}/{year}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--team", default="platform")
    parser.add_argument("--year", type=int, default=date.today().year)
    parser.add_argument("--weeks", type=int, default=12)
    args = parser.parse_args()
    seed(args.team, args.year, args.weeks)


if __name__ == "__main__":
    main()
