# logvault/db/session.py
"""
Engine construction and schema initialization.

We use:
- SQLAlchemy async engine + AsyncSession
- SQLite via the aiosqlite driver

Key points:
- `build_engine()` applies per-connection pragmas on every new connection.
- `init_schema()` switches the file to WAL and creates tables/indexes if missing.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from logvault.db.models import Base


def ensure_sqlite_parent_dir(database_url: str) -> None:
    """
    Create the directory that will hold a file-backed SQLite database.

    In-memory URLs and non-SQLite backends are left alone.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    database = url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    """
    Per-connection pragma: synchronous=NORMAL is a good balance of durability
    vs speed with WAL.
    """
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()


def build_engine(database_url: str, busy_timeout_s: float = 30.0) -> AsyncEngine:
    """
    Create the async engine for the store.

    Keep echo=False to avoid logging SQL in normal use.
    """
    is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
    engine = create_async_engine(
        database_url,
        echo=False,
        # sqlite3 waits this long on a locked database before raising
        connect_args={"timeout": busy_timeout_s} if is_sqlite else {},
    )
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,  # rows stay readable after commit
        class_=AsyncSession,
    )


async def init_schema(engine: AsyncEngine) -> None:
    """
    Apply database-level pragmas and create the schema.

    Idempotent: CREATE TABLE / CREATE INDEX are only issued when missing.
    journal_mode=WAL lets readers proceed while a writer holds the lock.
    """
    async with engine.begin() as conn:
        if engine.dialect.name == "sqlite":
            await conn.execute(text("PRAGMA journal_mode=WAL;"))
        await conn.run_sync(Base.metadata.create_all)
