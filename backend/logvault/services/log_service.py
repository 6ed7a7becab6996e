# logvault/services/log_service.py
"""
Request-side orchestration for log reads and writes.

Why a service?
- Keeps the routes thin (KISS): they only pull raw values off the request
- Owns the boundary contract: coercion, defaults, validation, id generation
- Is the only caller of LogStore, so nothing reaches storage unvalidated

Failure classification:
- ValidationError / DuplicateIdError -> client fault (400)
- Storage*Error                     -> server fault (500)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import orjson
from pydantic import ValidationError as PydanticValidationError

from logvault.core.errors import ValidationError
from logvault.db.store import LogFilter, LogStore
from logvault.schemas.logs import LogEntry, LogEntryIn, LogLevel, LogsResponse, StatisticsReport
from logvault.utils.ids import new_log_id
from logvault.utils.timestamps import SQLITE_MAX_INT

logger = logging.getLogger(__name__)


def _parse_positive_int(name: str, raw: Optional[str], default: int) -> int:
    """
    Coerce a wire string to an int >= 1.

    Missing or blank values take the default; anything else must parse.
    """
    if raw is None:
        return default
    text = str(raw).strip()
    if not text:
        return default
    try:
        value = int(text)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer, got {raw!r}.")
    if value < 1:
        raise ValidationError(f"Query parameter '{name}' must be >= 1, got {value}.")
    if value > SQLITE_MAX_INT:
        raise ValidationError(f"Query parameter '{name}' is too large, got {value}.")
    return value


def _normalize_level_filter(raw: Optional[str]) -> Optional[str]:
    """Known level names match case-insensitively; anything else is kept as-is."""
    text = (raw or "").strip()
    if not text:
        return None
    member = LogLevel.__members__.get(text.upper())
    return member.value if member is not None else text


def _describe_pydantic_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


class LogService:
    """Translates transport-level requests into LogStore calls and back."""

    def __init__(
        self,
        store: LogStore,
        default_page_size: int = 50,
        id_factory: Callable[[], str] = new_log_id,
    ) -> None:
        self.store = store
        self.default_page_size = default_page_size
        self.id_factory = id_factory

    async def list_logs(
        self,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        level: Optional[str] = None,
        service: Optional[str] = None,
    ) -> LogsResponse:
        """
        Read one page of entries.

        Example:
          list_logs(page="2", limit="20", level="ERROR")
        """
        page_num = _parse_positive_int("page", page, 1)
        page_size = _parse_positive_int("limit", limit, self.default_page_size)
        if (page_num - 1) * page_size > SQLITE_MAX_INT:
            raise ValidationError(f"Page {page_num} of size {page_size} is out of range.")

        log_filter = LogFilter(
            level=_normalize_level_filter(level),
            service=(service or "").strip() or None,
            page=page_num,
            page_size=page_size,
        )

        logs = [entry async for entry in self.store.query(log_filter)]
        total = await self.store.count(log_filter)

        return LogsResponse(logs=logs, page=page_num, limit=page_size, total=total)

    def parse_payload(self, body: bytes) -> LogEntryIn:
        """Decode and validate a JSON write payload."""
        try:
            data: Any = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise ValidationError(f"Malformed JSON payload: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError("Log payload must be a JSON object.")

        try:
            return LogEntryIn.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid log payload: {_describe_pydantic_errors(e)}") from e

    async def create_log(self, body: bytes) -> LogEntry:
        """
        Accept one log entry.

        Missing fields are defaulted (never rejected); an absent or empty id is
        generated. Returns the entry exactly as stored.
        """
        payload = self.parse_payload(body)
        entry = payload.to_entry(payload.id or self.id_factory())

        await self.store.insert(entry)

        logger.debug("Accepted log %s (level=%s service=%s)", entry.id, entry.level.value, entry.service)
        return entry

    async def statistics(self) -> StatisticsReport:
        return await self.store.statistics()
