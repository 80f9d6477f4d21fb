"""
Database engine and session management.

The stats core only ever reads; sessions are handed to repositories and
services explicitly rather than imported as module state.
"""
import os
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Get or create the database engine."""
    global _engine, _SessionLocal

    if _engine is None:
        from esports_stats.core.config import settings

        url = database_url or settings.DATABASE_URL
        kwargs = {
            "pool_pre_ping": True,  # Verify connections before using
            "echo": os.getenv("SQL_ECHO", "false").lower() == "true",
        }
        if not url.startswith("sqlite"):
            kwargs.update(pool_size=10, max_overflow=20)

        _engine = create_engine(url, **kwargs)
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    return _engine


def get_session_factory() -> sessionmaker:
    """Return the session factory bound to the application engine."""
    get_engine()
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Yield a database session and close it afterwards.

    Usage:
    ```python
    for db in get_db():
        service = StatsService(db, cache)
    ```
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Create tables that don't exist yet (development and tests)."""
    from esports_stats.models import Base

    Base.metadata.create_all(bind=engine or get_engine(), checkfirst=True)
