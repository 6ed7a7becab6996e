# logvault/schemas/logs.py
"""
Schemas for the /api/logs endpoints.

The same LogEntry shape is used in both directions:
    {"id", "message", "level", "timestamp", "service", "component"}

`LogEntryIn` is the lenient write payload (every field optional, defaults
filled in). `LogEntry` is the complete, stored form.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from logvault.utils.timestamps import now_epoch_seconds, to_epoch_seconds


class LogLevel(str, Enum):
    """Severity levels, declared from least to most severe."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, raw: Any) -> "LogLevel":
        """
        Map user input to a level.

        None and unrecognized names become INFO; non-string input is rejected.
        """
        if raw is None:
            return cls.INFO
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            raise ValueError("level must be a string")
        name = raw.strip().upper()
        return cls.__members__.get(name, cls.INFO)


def _level_before(v: Any) -> LogLevel:
    return LogLevel.parse(v)


class LogEntry(BaseModel):
    """A single stored log record."""

    id: str = Field(..., description="Unique log identifier")
    message: str = Field(..., description="Free-text log message (may be empty)")
    level: LogLevel = Field(..., description="Severity level")
    timestamp: int = Field(..., description="Epoch seconds")
    service: str = Field(default="", description="Emitting service ('' when unset)")
    component: str = Field(default="", description="Emitting component ('' when unset)")

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, v: Any) -> LogLevel:
        return _level_before(v)


class LogEntryIn(BaseModel):
    """
    Write payload for POST /api/logs.

    Missing optional fields never cause a rejection:
    - level     -> INFO
    - message   -> ""
    - timestamp -> ingestion time
    - id        -> generated by the service
    Wrong types (e.g. a numeric message) are rejected.
    """

    id: Optional[str] = Field(default=None, description="Caller-supplied id; generated when absent")
    message: str = Field(default="", description="Log message")
    level: LogLevel = Field(default=LogLevel.INFO, description="Severity; unknown names map to INFO")
    timestamp: Optional[int] = Field(
        default=None,
        description="Epoch seconds or ISO 8601 string; defaults to ingestion time",
    )
    service: str = Field(default="", description="Emitting service")
    component: str = Field(default="", description="Emitting component")

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, v: Any) -> LogLevel:
        return _level_before(v)

    @field_validator("message", "service", "component", mode="before")
    @classmethod
    def _null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, v: Any) -> Optional[int]:
        if v is None:
            return None
        return to_epoch_seconds(v)

    def to_entry(self, log_id: str) -> LogEntry:
        return LogEntry(
            id=log_id,
            message=self.message,
            level=self.level,
            timestamp=self.timestamp if self.timestamp is not None else now_epoch_seconds(),
            service=self.service,
            component=self.component,
        )


class LogsResponse(BaseModel):
    """
    Response for browsing logs.

    Example:
    {
      "logs": [...],
      "page": 1,
      "limit": 50,
      "total": 132
    }
    """

    logs: List[LogEntry] = Field(default_factory=list, description="Log entries, newest first")
    page: int = Field(..., ge=1, description="Page actually used (1-based)")
    limit: int = Field(..., ge=1, description="Page size actually used")
    total: int = Field(..., ge=0, description="Total matching entries before pagination")


class LevelStatistics(BaseModel):
    """
    Aggregate for one level.

    Example:
      {"count": 12, "oldest": 1700000000, "newest": 1700003600}
    """

    count: int = Field(..., ge=0, description="Number of entries with this level")
    oldest: int = Field(..., description="Smallest timestamp (epoch seconds)")
    newest: int = Field(..., description="Largest timestamp (epoch seconds)")


# level name -> aggregate, only for levels that have entries
StatisticsReport = Dict[str, LevelStatistics]
