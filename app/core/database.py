"""Database connection and session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.errors import StorageFaultError

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict[str, Any]:
    """Extra create_engine options; SQLite needs cross-thread access for the request threadpool."""
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    # In-memory databases live on a single connection; share it across threads.
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


@contextmanager
def storage_errors(db: Session, message: str | None = None) -> Iterator[None]:
    """Roll back and raise StorageFaultError for any SQLAlchemy error raised inside the block."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Storage operation failed: %s", type(e).__name__)
        raise StorageFaultError(message) from e
