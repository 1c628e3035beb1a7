# backend/arithmancy/db.py
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from . import config


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for the given URL (defaults to config.DATABASE_URL)."""
    kwargs.setdefault("echo", config.SQL_ECHO)
    kwargs.setdefault("future", True)
    return create_async_engine(url or config.DATABASE_URL, **kwargs)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps loaded rows usable after the transaction ends,
    # so routes can serialize engine results without touching the database again
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    module = type(dbapi_connection).__module__
    if "sqlite" not in module:
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Default engine and session factory used by the app and CLI
engine = create_engine()
AsyncSessionLocal = create_session_factory(engine)
