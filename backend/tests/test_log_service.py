"""Tests for the request layer: coercion, defaults, id generation, errors."""

import itertools
import time

import orjson
import pytest
import pytest_asyncio

from logvault.core.errors import (
    ClientError,
    DuplicateIdError,
    ServerError,
    StorageReadError,
    ValidationError,
)
from logvault.db.store import LogFilter, LogStore
from logvault.schemas.logs import LogLevel
from logvault.services.log_service import LogService


@pytest_asyncio.fixture
async def service(store):
    ids = (f"gen-{n}" for n in itertools.count(1))
    return LogService(store, default_page_size=50, id_factory=lambda: next(ids))


def _body(**fields) -> bytes:
    return orjson.dumps(fields)


class TestListLogs:
    @pytest.mark.asyncio
    async def test_defaults_are_echoed(self, service):
        response = await service.list_logs()
        assert response.page == 1
        assert response.limit == 50
        assert response.logs == []
        assert response.total == 0

    @pytest.mark.asyncio
    async def test_blank_strings_take_defaults(self, service):
        response = await service.list_logs(page="", limit="  ", level="", service="")
        assert (response.page, response.limit) == (1, 50)

    @pytest.mark.asyncio
    async def test_string_params_are_coerced(self, service):
        for i in range(5):
            await service.create_log(_body(message=f"m{i}", timestamp=100 + i))

        response = await service.list_logs(page="2", limit="2")

        assert (response.page, response.limit) == (2, 2)
        assert [e.timestamp for e in response.logs] == [102, 101]
        assert response.total == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", ["abc", "1.5", "two", "0", "-3"])
    async def test_invalid_page_is_rejected(self, service, page):
        with pytest.raises(ValidationError):
            await service.list_logs(page=page)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", ["ten", "0", "-1"])
    async def test_invalid_limit_is_rejected(self, service, limit):
        with pytest.raises(ValidationError) as exc_info:
            await service.list_logs(limit=limit)
        assert "limit" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_level_and_service_filters(self, service):
        await service.create_log(_body(id="1", level="ERROR", service="auth"))
        await service.create_log(_body(id="2", level="ERROR", service="db"))
        await service.create_log(_body(id="3", level="INFO", service="auth"))

        response = await service.list_logs(level="ERROR", service="auth")

        assert [e.id for e in response.logs] == ["1"]
        assert response.total == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [
            {"page": str(10**20)},
            {"limit": str(10**20)},
            {"page": str(2**62), "limit": "4"},
        ],
    )
    async def test_window_beyond_integer_range_is_rejected(self, service, params):
        with pytest.raises(ValidationError):
            await service.list_logs(**params)

    @pytest.mark.asyncio
    async def test_largest_offset_is_accepted(self, service):
        response = await service.list_logs(page=str(2**62), limit="2")
        assert response.logs == []
        assert response.page == 2**62

    @pytest.mark.asyncio
    async def test_level_filter_is_case_insensitive(self, service):
        await service.create_log(_body(id="1", level="ERROR"))
        await service.create_log(_body(id="2", level="INFO"))

        for raw in ("error", " Error ", "ERROR"):
            response = await service.list_logs(level=raw)
            assert [e.id for e in response.logs] == ["1"]
            assert response.total == 1

    @pytest.mark.asyncio
    async def test_unknown_level_filter_matches_nothing(self, service):
        await service.create_log(_body(id="1", level="ERROR"))

        response = await service.list_logs(level="FATAL")

        assert response.logs == []
        assert response.total == 0

    @pytest.mark.asyncio
    async def test_store_failure_is_server_fault(self, database_url):
        service = LogService(LogStore(database_url))
        with pytest.raises(StorageReadError) as exc_info:
            await service.list_logs()
        assert isinstance(exc_info.value, ServerError)
        assert exc_info.value.status_code == 500


class TestCreateLog:
    @pytest.mark.asyncio
    async def test_missing_fields_are_defaulted(self, service):
        before = int(time.time())
        entry = await service.create_log(b"{}")
        after = int(time.time())

        assert entry.id == "gen-1"
        assert entry.message == ""
        assert entry.level is LogLevel.INFO
        assert before <= entry.timestamp <= after
        assert entry.service == ""
        assert entry.component == ""

    @pytest.mark.asyncio
    async def test_unset_level_is_stored_as_info(self, service, store):
        await service.create_log(_body(id="no-level", message="hello"))

        (stored,) = [e async for e in store.query(LogFilter())]
        assert stored.level is LogLevel.INFO

    @pytest.mark.asyncio
    async def test_empty_id_is_generated(self, service):
        entry = await service.create_log(_body(id="", message="x"))
        assert entry.id == "gen-1"

    @pytest.mark.asyncio
    async def test_caller_id_is_kept(self, service):
        entry = await service.create_log(_body(id="custom-1"))
        assert entry.id == "custom-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("ERROR", LogLevel.ERROR),
            ("warning", LogLevel.WARNING),
            (" critical ", LogLevel.CRITICAL),
            ("FATAL", LogLevel.INFO),
            ("", LogLevel.INFO),
            (None, LogLevel.INFO),
        ],
    )
    async def test_level_parsing(self, service, raw, expected):
        entry = await service.create_log(_body(level=raw))
        assert entry.level is expected

    @pytest.mark.asyncio
    async def test_iso_timestamp_is_accepted(self, service):
        entry = await service.create_log(_body(timestamp="2024-01-15T10:30:00Z"))
        assert entry.timestamp == 1705314600

    @pytest.mark.asyncio
    async def test_null_labels_are_unset(self, service):
        entry = await service.create_log(_body(message=None, service=None, component=None))
        assert (entry.message, entry.service, entry.component) == ("", "", "")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"{not json",
            b"",
            b"[1, 2, 3]",
            b'"just a string"',
            b'{"message": 5}',
            b'{"level": 3}',
            b'{"id": 42}',
            b'{"timestamp": "yesterday-ish"}',
            b'{"timestamp": true}',
            b'{"timestamp": 100000000000000000000}',
            b'{"timestamp": 9223372036854775808}',
            b'{"timestamp": 1e300}',
            b'{"timestamp": "100000000000000000000"}',
            b'{"service": ["a"]}',
        ],
    )
    async def test_malformed_payloads_are_client_faults(self, service, body):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_log(body)
        assert isinstance(exc_info.value, ClientError)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_id_is_client_fault(self, service, store):
        await service.create_log(_body(id="x", message="one"))
        with pytest.raises(DuplicateIdError) as exc_info:
            await service.create_log(_body(id="x", message="two"))
        assert exc_info.value.status_code == 400
        assert await store.count(LogFilter()) == 1

    @pytest.mark.asyncio
    async def test_json_round_trip_preserves_entry(self, service, store):
        original = await service.create_log(
            _body(
                id="rt-1",
                message="cache miss",
                level="DEBUG",
                timestamp=1_700_000_123,
                service="cache",
                component="lru",
            )
        )

        (stored,) = [e async for e in store.query(LogFilter())]
        assert stored == original

        reparsed = service.parse_payload(orjson.dumps(stored.model_dump(mode="json")))
        assert reparsed.to_entry(reparsed.id) == stored

    @pytest.mark.asyncio
    async def test_round_trip_without_id_only_changes_id(self, service):
        payload = service.parse_payload(_body(message="m", level="ERROR", timestamp=10))
        entry = payload.to_entry("fresh")
        reparsed = service.parse_payload(orjson.dumps(entry.model_dump(mode="json")))

        assert reparsed.to_entry(reparsed.id) == entry
        assert entry.id == "fresh"


class TestStatistics:
    @pytest.mark.asyncio
    async def test_empty(self, service):
        assert await service.statistics() == {}

    @pytest.mark.asyncio
    async def test_report_from_store(self, service):
        await service.create_log(_body(level="WARNING", timestamp=10))
        await service.create_log(_body(level="WARNING", timestamp=30))

        report = await service.statistics()

        assert report["WARNING"].model_dump() == {"count": 2, "oldest": 10, "newest": 30}
