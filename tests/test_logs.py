from __future__ import annotations

import re
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import AutoReconnect, DuplicateKeyError

from preview_edge.models.logs.document import LogEntry
from preview_edge.repositories.logs.repository import LogRepository
from preview_edge.services.logs.service import LogService, build_log_entry, new_log_key

_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _make_entry(**kwargs) -> LogEntry:
    defaults = dict(
        key="log-1714564800000-a1b2c",
        ts=_NOW,
        target="https://example.com",
        ua="Mozilla/5.0",
    )
    return LogEntry(**{**defaults, **kwargs})


# ---------------------------------------------------------------------------
# Entry construction
# ---------------------------------------------------------------------------


class TestBuildLogEntry:
    def test_key_format(self):
        assert re.fullmatch(r"log-1700000000000-[0-9a-z]{5}", new_log_key(1700000000000))

    def test_keys_are_distinct(self):
        assert len({new_log_key(1) for _ in range(50)}) > 1

    def test_collects_headers_of_interest(self):
        entry = build_log_entry(
            "https://example.com",
            {
                "cf-connecting-ip": "203.0.113.7",
                "x-forwarded-for": "198.51.100.1, 10.0.0.1",
                "user-agent": "WhatsApp/2.0",
                "referer": "https://wa.me/",
                "accept-language": "es-ES",
                "cf-ipcountry": "ES",
                "cf-ipcity": "Madrid",
            },
            client_host="127.0.0.1",
        )
        assert entry.target == "https://example.com"
        assert entry.ip == "203.0.113.7"
        assert entry.ua == "WhatsApp/2.0"
        assert entry.referer == "https://wa.me/"
        assert entry.accept_language == "es-ES"
        assert entry.geo.country == "ES"
        assert entry.geo.city == "Madrid"
        assert entry.geo.asn is None
        assert entry.ts.tzinfo is not None

    def test_ip_falls_back_to_forwarded_then_peer(self):
        forwarded = build_log_entry("t", {"x-forwarded-for": "198.51.100.1, 10.0.0.1"}, "127.0.0.1")
        assert forwarded.ip == "198.51.100.1"
        peer = build_log_entry("t", {}, "127.0.0.1")
        assert peer.ip == "127.0.0.1"


# ---------------------------------------------------------------------------
# LogService
# ---------------------------------------------------------------------------


class TestLogService:
    @pytest.fixture
    def repo(self):
        return AsyncMock(spec=LogRepository)

    @pytest.fixture
    def service(self, repo):
        return LogService(repo)

    async def test_record_inserts_entry(self, service, repo):
        entry = _make_entry()
        await service.record(entry)
        repo.insert.assert_called_once_with(entry)

    async def test_record_retries_transient_errors(self, service, repo):
        repo.insert.side_effect = [AutoReconnect("flap"), None]
        with patch("asyncio.sleep", new_callable=AsyncMock):
            await service.record(_make_entry())
        assert repo.insert.call_count == 2

    async def test_record_gives_up_after_max_retries(self, service, repo):
        repo.insert.side_effect = AutoReconnect("down")
        with (
            patch("preview_edge.services.logs.service.settings") as mock_settings,
            patch("asyncio.sleep", new_callable=AsyncMock),
        ):
            mock_settings.log_write_max_retries = 1
            await service.record(_make_entry())  # must not raise
        assert repo.insert.call_count == 2

    async def test_record_treats_duplicate_key_as_written(self, service, repo):
        repo.insert.side_effect = DuplicateKeyError("dup")
        await service.record(_make_entry())  # must not raise
        assert repo.insert.call_count == 1

    async def test_record_swallows_unexpected_errors(self, service, repo):
        repo.insert.side_effect = RuntimeError("DB crashed")
        await service.record(_make_entry())  # must not raise
        assert repo.insert.call_count == 1

    async def test_list_entries_delegates(self, service, repo):
        repo.list_all.return_value = [_make_entry()]
        assert await service.list_entries() == [_make_entry()]


# ---------------------------------------------------------------------------
# LogRepository (in-memory MongoDB)
# ---------------------------------------------------------------------------


class TestLogRepository:
    @pytest.fixture
    async def repo(self):
        client = AsyncMongoMockClient()
        repo = LogRepository(client["test"]["request_logs"])
        await repo.ensure_indexes()
        return repo

    async def test_insert_then_list_sorted_by_key(self, repo):
        await repo.insert(_make_entry(key="log-2-bbbbb", target="https://b.example"))
        await repo.insert(_make_entry(key="log-1-aaaaa", target="https://a.example"))
        entries = await repo.list_all()
        assert [e.target for e in entries] == ["https://a.example", "https://b.example"]

    async def test_duplicate_key_is_rejected(self, repo):
        await repo.insert(_make_entry())
        with pytest.raises(DuplicateKeyError):
            await repo.insert(_make_entry())

    async def test_empty_collection_lists_nothing(self, repo):
        assert await repo.list_all() == []
