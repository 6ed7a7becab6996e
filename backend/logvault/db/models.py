# logvault/db/models.py
"""
SQLAlchemy ORM models for the logvault service.

One table, `logs`, keyed by the public log id. Two secondary indexes keep the
common reads cheap as volume grows:
- idx_logs_timestamp: newest-first browsing
- idx_logs_level: level filters and the per-level statistics

Notes:
- Timestamps are integer epoch seconds (no timezone handling in SQLite).
- service/component are NULL when unset; the API renders them as "".
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from logvault.schemas.logs import LogEntry, LogLevel


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


class LogRecord(Base):
    """Persisted form of a LogEntry."""

    __tablename__ = "logs"
    __table_args__ = (
        Index("idx_logs_timestamp", "timestamp"),
        Index("idx_logs_level", "level"),
    )

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[str] = mapped_column(String(16), nullable=False)
    timestamp: Mapped[int] = mapped_column(Integer, nullable=False)
    service: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    component: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "LogRecord":
        return cls(
            id=entry.id,
            message=entry.message,
            level=entry.level.value,
            timestamp=entry.timestamp,
            service=entry.service or None,
            component=entry.component or None,
        )

    def to_entry(self) -> LogEntry:
        return LogEntry(
            id=self.id,
            message=self.message,
            level=LogLevel.parse(self.level),
            timestamp=self.timestamp,
            service=self.service or "",
            component=self.component or "",
        )
