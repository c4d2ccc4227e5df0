"""
Engine and session management.

`get_db` is the FastAPI dependency every route uses to obtain a session;
tests override it with a session bound to an in-memory database.
"""

import logging
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from projectchat.database.config.config import settings
from projectchat.database.entities import Base

logger = logging.getLogger(__name__)

_connect_args = {"check_same_thread": False} if settings.DB_DRIVER_NAME.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=_connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db() -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(db: Session) -> None:
    """Raise if the store cannot answer a trivial query."""
    db.execute(text("SELECT 1"))
