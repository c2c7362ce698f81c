from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from duty_scheduler.core.config import get_settings
from duty_scheduler.db.base import Base

settings = get_settings()
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=connect_args, echo=False)
session_factory = sessionmaker(engine, expire_on_commit=False, class_=Session)


def init_db() -> None:
    """Create missing tables; Alembic owns migrations for long-lived databases."""
    from duty_scheduler.db import models  # noqa: F401  # ensure model metadata is loaded

    Base.metadata.create_all(engine)
