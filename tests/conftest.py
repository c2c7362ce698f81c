from collections.abc import AsyncIterator, Iterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from duty_scheduler.core.config import Settings
from duty_scheduler.db import models  # noqa: F401
from duty_scheduler.db.base import Base
from duty_scheduler.main import create_application
from duty_scheduler.repositories.schedule import MemoryScheduleBackend
from duty_scheduler.schemas.schedule import Member
from duty_scheduler.services.roster import Roster

from .factories import build_member


@pytest.fixture()
def members() -> list[Member]:
    return [
        build_member(id="member-1", full_name="John Doe", email="john.doe@example.com"),
        build_member(id="member-2", full_name="Jane Roe", email="Jane.Roe@Example.com"),
    ]


@pytest.fixture()
def memory_backend() -> MemoryScheduleBackend:
    return MemoryScheduleBackend()


@pytest.fixture()
def session_factory() -> Iterator[sessionmaker[Session]]:
    """Provide a per-test in-memory database with a fresh schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(engine, expire_on_commit=False, class_=Session)
    finally:
        engine.dispose()


@pytest.fixture()
async def api_client(members: list[Member], memory_backend: MemoryScheduleBackend) -> AsyncIterator[AsyncClient]:
    settings = Settings(cors_origins=["http://testserver"])
    app = create_application(settings, backend=memory_backend, roster=Roster(members=members))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"
