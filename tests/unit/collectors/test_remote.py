"""Tests for HttpCollector against a mocked transport."""

import httpx
import pytest

from attention_engine.collectors.remote import HttpCollector
from attention_engine.engine.errors import UpstreamError
from attention_engine.engine.models import AttentionType, SourceType

URL = "https://research.example.com/attention"


def _draft(now, **overrides) -> dict:
    draft = {
        "source_type": "file",
        "source_id": "F-17",
        "source_url": "/files/F-17",
        "attention_type": "informational",
        "reason_code": "file_shared",
        "reason_text": "Dana shared a model with you",
        "title": "NVDA model v3.xlsx",
        "created_at": now.isoformat(),
        "updated_at": now.isoformat(),
        "last_activity_at": now.isoformat(),
    }
    draft.update(overrides)
    return draft


class TestHttpCollector:
    @pytest.mark.asyncio
    async def test_fetches_and_validates_items(self, now):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[_draft(now), _draft(now, source_id="F-18")])

        collector = HttpCollector(
            "files",
            URL,
            headers={"Authorization": "Bearer token"},
            transport=httpx.MockTransport(handler),
        )
        items = await collector.collect("u1", now)

        assert seen["params"] == {"user_id": "u1", "window_start": now.isoformat()}
        assert seen["auth"] == "Bearer token"
        assert [i.source_id for i in items] == ["F-17", "F-18"]
        assert items[0].source_type == SourceType.FILE
        assert items[0].attention_type == AttentionType.INFORMATIONAL

    @pytest.mark.asyncio
    async def test_empty_list(self, now):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
        assert await HttpCollector("files", URL, transport=transport).collect("u1", now) == []

    @pytest.mark.asyncio
    async def test_http_error_is_upstream_error(self, now):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="maintenance"))
        with pytest.raises(UpstreamError, match="503"):
            await HttpCollector("files", URL, transport=transport).collect("u1", now)

    @pytest.mark.asyncio
    async def test_connection_error_is_upstream_error(self, now):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError, match="Failed to connect"):
            await HttpCollector("files", URL, transport=httpx.MockTransport(handler)).collect("u1", now)

    @pytest.mark.asyncio
    async def test_non_list_payload_rejected(self, now):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"items": []}))
        with pytest.raises(UpstreamError, match="expected a list"):
            await HttpCollector("files", URL, transport=transport).collect("u1", now)
