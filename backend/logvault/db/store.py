# logvault/db/store.py
"""
LogStore: the only component that talks to the database.

Responsibilities:
- Own the engine and its lifecycle (initialize at startup, close at shutdown)
- Create the `logs` schema idempotently
- Insert entries, run filtered/paginated reads, compute per-level statistics
- Translate engine failures into the typed errors in logvault.core.errors

Concurrency:
- Every operation opens its own short-lived session from the engine pool.
- SQLite serializes writers (WAL + busy timeout); readers never see a
  half-written row because each insert is a single transaction.
- Duplicate ids are caught by the primary key, so the outcome does not depend
  on interleaving.

Security:
- Filter values are always bound parameters (SQLAlchemy expressions); nothing
  user-supplied is ever formatted into SQL text.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional, Type

from sqlalchemy import and_, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from logvault.core.errors import (
    DuplicateIdError,
    ServerError,
    StorageInitError,
    StorageReadError,
    StorageWriteError,
)
from logvault.db.models import LogRecord
from logvault.db.session import build_engine, build_sessionmaker, ensure_sqlite_parent_dir, init_schema
from logvault.schemas.logs import LevelStatistics, LogEntry, LogLevel, StatisticsReport

logger = logging.getLogger(__name__)

# aiosqlite re-raises raw sqlite3 errors from connect-time hooks
_ENGINE_ERRORS = (SQLAlchemyError, sqlite3.Error, OSError)
# sqlite3 raises OverflowError when binding ints outside the INTEGER range
_WRITE_ERRORS = _ENGINE_ERRORS + (OverflowError,)

_LEVEL_ORDER = {level.value: i for i, level in enumerate(LogLevel)}


@dataclass(frozen=True)
class LogFilter:
    """
    Read filter + page window.

    Empty/None level and service impose no constraint. page and page_size are
    expected to be validated (>= 1) by the caller; the store does not re-check.
    """

    level: Optional[str] = None
    service: Optional[str] = None
    page: int = 1
    page_size: int = 50

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def _filter_conditions(log_filter: LogFilter) -> List[ColumnElement[bool]]:
    """Build zero, one or two bound equality predicates."""
    conditions: List[ColumnElement[bool]] = []
    if log_filter.level:
        conditions.append(LogRecord.level == log_filter.level)
    if log_filter.service:
        conditions.append(LogRecord.service == log_filter.service)
    return conditions


def _is_primary_key_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).upper()
    return "UNIQUE" in message or "PRIMARY KEY" in message


class LogStore:
    """
    Persistence and query execution for log entries.

    Usage:
        store = LogStore("sqlite+aiosqlite:///./data/logs.db")
        await store.initialize()
        ...
        await store.close()
    """

    def __init__(self, database_url: str, busy_timeout_s: float = 30.0) -> None:
        self.database_url = database_url
        self.busy_timeout_s = busy_timeout_s
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def _safe_url(self) -> str:
        try:
            return make_url(self.database_url).render_as_string(hide_password=True)
        except SQLAlchemyError:
            return "<invalid url>"

    # -----------------------
    # Lifecycle
    # -----------------------
    async def initialize(self) -> None:
        """
        Open the engine and ensure the schema exists.

        Safe to call on every start and more than once per process.

        Raises:
            StorageInitError: engine cannot be opened or schema cannot be created.
        """
        if self._engine is None:
            try:
                ensure_sqlite_parent_dir(self.database_url)
                self._engine = build_engine(self.database_url, self.busy_timeout_s)
            except _ENGINE_ERRORS as e:
                raise StorageInitError(f"Cannot open database {self._safe_url()}: {e}") from e
            self._sessionmaker = build_sessionmaker(self._engine)

        try:
            await init_schema(self._engine)
        except _ENGINE_ERRORS as e:
            await self.close()
            raise StorageInitError(f"Cannot create schema in {self._safe_url()}: {e}") from e

        logger.info("Log store ready (%s)", self._safe_url())

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    def _sessions(self, error_cls: Type[ServerError]) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise error_cls("Log store is not initialized.")
        return self._sessionmaker

    # -----------------------
    # Writes
    # -----------------------
    async def insert(self, entry: LogEntry) -> None:
        """
        Persist one entry in its own transaction.

        Raises:
            DuplicateIdError: an entry with the same id exists.
            StorageWriteError: any other engine failure (store left unchanged).
        """
        sessions = self._sessions(StorageWriteError)
        try:
            async with sessions() as session:
                async with session.begin():
                    session.add(LogRecord.from_entry(entry))
        except IntegrityError as e:
            if _is_primary_key_violation(e):
                raise DuplicateIdError(entry.id) from e
            raise StorageWriteError("Failed to write log entry to storage.") from e
        except _WRITE_ERRORS as e:
            raise StorageWriteError("Failed to write log entry to storage.") from e

    # -----------------------
    # Reads
    # -----------------------
    async def query(self, log_filter: LogFilter) -> AsyncIterator[LogEntry]:
        """
        Yield one page of matching entries, newest first.

        The result is a one-shot async iterator holding at most
        `log_filter.page_size` entries. Equal timestamps are ordered by id so
        consecutive pages never overlap or skip rows.

        Raises:
            StorageReadError: engine failure (raised while iterating).
        """
        sessions = self._sessions(StorageReadError)

        stmt = select(LogRecord)
        conditions = _filter_conditions(log_filter)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = (
            stmt.order_by(LogRecord.timestamp.desc(), LogRecord.id.asc())
            .limit(log_filter.page_size)
            .offset(log_filter.offset)
        )

        try:
            async with sessions() as session:
                result = await session.execute(stmt)
                for row in result.scalars():
                    yield row.to_entry()
        except _ENGINE_ERRORS as e:
            raise StorageReadError("Failed to read log entries from storage.") from e

    async def count(self, log_filter: LogFilter) -> int:
        """Number of entries matching the filter predicates (page window ignored)."""
        sessions = self._sessions(StorageReadError)

        stmt = select(func.count()).select_from(LogRecord)
        conditions = _filter_conditions(log_filter)
        if conditions:
            stmt = stmt.where(and_(*conditions))

        try:
            async with sessions() as session:
                return int((await session.execute(stmt)).scalar() or 0)
        except _ENGINE_ERRORS as e:
            raise StorageReadError("Failed to count log entries in storage.") from e

    async def statistics(self) -> StatisticsReport:
        """
        Per-level count and oldest/newest timestamp, in one grouped pass.

        Levels without entries are omitted. Keys follow severity order.
        """
        sessions = self._sessions(StorageReadError)

        stmt = select(
            LogRecord.level,
            func.count().label("count"),
            func.min(LogRecord.timestamp).label("oldest"),
            func.max(LogRecord.timestamp).label("newest"),
        ).group_by(LogRecord.level)

        try:
            async with sessions() as session:
                rows = (await session.execute(stmt)).all()
        except _ENGINE_ERRORS as e:
            raise StorageReadError("Failed to compute log statistics.") from e

        # Row is tuple-like (`.count` is tuple.count), so unpack positionally
        groups = sorted(
            (tuple(row) for row in rows),
            key=lambda g: (_LEVEL_ORDER.get(g[0], len(_LEVEL_ORDER)), g[0]),
        )
        report: Dict[str, LevelStatistics] = {}
        for level, count, oldest, newest in groups:
            report[level] = LevelStatistics(count=int(count), oldest=int(oldest), newest=int(newest))
        return report
