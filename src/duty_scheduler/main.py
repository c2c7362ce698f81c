from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from duty_scheduler.api.routes import api_router
from duty_scheduler.core.config import Settings, get_settings
from duty_scheduler.core.logging import configure_logging
from duty_scheduler.db import session as db_session
from duty_scheduler.repositories.schedule import ScheduleBackend, SqlScheduleBackend
from duty_scheduler.services.editor import EditorRegistry
from duty_scheduler.services.roster import Roster, load_roster


@asynccontextmanager
async def create_tables(app: FastAPI) -> AsyncIterator[None]:
    db_session.init_db()
    yield


def create_application(
    settings: Settings | None = None,
    *,
    backend: ScheduleBackend | None = None,
    roster: Roster | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    lifespan = None
    if backend is None:
        backend = SqlScheduleBackend(db_session.session_factory)
        lifespan = create_tables
    if roster is None:
        roster = load_roster(settings.roster_path)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="API for editing team on-duty and on-call schedules.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.editors = EditorRegistry(backend, roster, settings)
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Simple health endpoint for infrastructure monitoring."""
        return {"status": "ok"}

    return app


app = create_application()
