"""
End-to-end feed computation: collectors -> score -> overlay -> dedup -> sections.

Uses in-process collectors and the in-memory overlay store with a fixed clock.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from attention_engine.collectors.base import Collector
from attention_engine.config import EngineSettings
from attention_engine.db.overlay_store import InMemoryOverlayStore, OverlayStore
from attention_engine.engine.errors import InternalError, UpstreamError
from attention_engine.engine.models import AttentionType, ReadState, Severity
from attention_engine.engine.pipeline import compute_attention
from attention_engine.service import AttentionService


class ListCollector(Collector):
    def __init__(self, name, items):
        self.name = name
        self.items = items

    async def collect(self, user_id, window_start):
        return list(self.items)


class BrokenCollector(Collector):
    name = "broken"

    async def collect(self, user_id, window_start):
        raise ConnectionError("upstream down")


def _all_items(feed):
    s = feed.sections
    return s.informational + s.action_required + s.decision_required + s.alignment


def _service(items, now, store=None, settings=None) -> AttentionService:
    return AttentionService(
        overlay_store=store or InMemoryOverlayStore(),
        collectors=[ListCollector("static", items)],
        settings=settings,
        clock=lambda: now,
    )


# ─── Feed computation ────────────────────────────────────────────


class TestComputeAttention:
    @pytest.mark.asyncio
    async def test_no_items(self, now):
        feed = await compute_attention([ListCollector("empty", [])], InMemoryOverlayStore(), "u1", 24, now=now)
        assert feed.counts.total == 0
        assert _all_items(feed) == []
        assert feed.window_start == now - timedelta(hours=24)
        assert feed.degraded_sources == []

    @pytest.mark.asyncio
    async def test_scores_and_buckets(self, make_item, now):
        overdue = make_item(
            source_id="D1",
            attention_type=AttentionType.ACTION_REQUIRED,
            reason_code="deliverable_pending",
            severity=Severity.HIGH,
            due_at=now - timedelta(days=2),
            primary_owner_user_id="u1",
            last_activity_at=now - timedelta(hours=1),
        )
        decision = make_item(source_id="T1", attention_type=AttentionType.DECISION_REQUIRED,
                             reason_code="trade_vote_needed")

        feed = await compute_attention(
            [ListCollector("static", [overdue, decision])], InMemoryOverlayStore(), "u1", 24, now=now
        )

        assert feed.sections.action_required[0].score == 80
        assert feed.sections.decision_required[0].source_id == "T1"
        assert feed.counts.total == 2

    @pytest.mark.asyncio
    async def test_duplicates_across_collectors(self, make_item, now):
        info = make_item(reason_code="comment_added", last_activity_at=now - timedelta(minutes=5),
                         severity=Severity.CRITICAL)
        action = make_item(attention_type=AttentionType.ACTION_REQUIRED, reason_code="project_overdue")

        feed = await compute_attention(
            [ListCollector("activity", [info]), ListCollector("projects", [action])],
            InMemoryOverlayStore(), "u1", 24, now=now,
        )

        assert feed.counts.total == 1
        assert feed.sections.action_required[0].reason_code == "project_overdue"
        assert feed.sections.informational == []

    @pytest.mark.asyncio
    async def test_failing_collector_degrades(self, make_item, now):
        feed = await compute_attention(
            [BrokenCollector(), ListCollector("static", [make_item()])],
            InMemoryOverlayStore(), "u1", 24, now=now,
        )
        assert feed.counts.total == 1
        assert feed.degraded_sources == ["broken"]

    @pytest.mark.asyncio
    async def test_failing_collector_fail_fast(self, make_item, now):
        settings = EngineSettings(fail_fast_collectors=True)
        with pytest.raises(UpstreamError):
            await compute_attention(
                [BrokenCollector(), ListCollector("static", [make_item()])],
                InMemoryOverlayStore(), "u1", 24, settings=settings, now=now,
            )

    @pytest.mark.asyncio
    async def test_overlay_read_failure_is_upstream_error(self, make_item, now):
        store = AsyncMock(spec=OverlayStore)
        store.get.side_effect = RuntimeError("connection reset")
        with pytest.raises(UpstreamError):
            await compute_attention([ListCollector("static", [make_item()])], store, "u1", 24, now=now)

    @pytest.mark.asyncio
    async def test_scoring_failure_is_internal_error(self, make_item, now):
        settings = EngineSettings()
        settings.weights.severity_multipliers = None
        with pytest.raises(InternalError):
            await compute_attention(
                [ListCollector("static", [make_item()])], InMemoryOverlayStore(), "u1", 24,
                settings=settings, now=now,
            )

    @pytest.mark.asyncio
    async def test_deterministic(self, make_item, now):
        items = [make_item(source_id=str(i), score=0) for i in range(10)]
        collectors = [ListCollector("static", items)]
        a = await compute_attention(collectors, InMemoryOverlayStore(), "u1", 24, now=now)
        b = await compute_attention(collectors, InMemoryOverlayStore(), "u1", 24, now=now)
        assert a.model_dump_json() == b.model_dump_json()


# ─── Overlay lifecycle through the service ───────────────────────


class TestOverlayLifecycle:
    @pytest.mark.asyncio
    async def test_dismissed_item_stays_hidden_when_it_recurs(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item()

        await _service([item], now, store).dismiss("u1", item.attention_id)

        later = now + timedelta(days=3)
        recurring = make_item(last_activity_at=later - timedelta(minutes=1), severity=Severity.CRITICAL)
        feed = await _service([recurring], later, store).get_feed("u1")

        assert recurring.attention_id == item.attention_id
        assert feed.counts.total == 0

    @pytest.mark.asyncio
    async def test_snooze_expiry(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item()
        until = now + timedelta(hours=2)

        await _service([item], now, store).snooze("u1", item.attention_id, until.isoformat())

        before = await _service([item], until - timedelta(seconds=1), store).get_feed("u1")
        after = await _service([item], until + timedelta(seconds=1), store).get_feed("u1")

        assert before.counts.total == 0
        assert after.counts.total == 1
        assert after.sections.informational[0].snoozed_until == until

    @pytest.mark.asyncio
    async def test_dismiss_before_item_exists(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item(source_id="FUTURE")

        empty = _service([], now, store)
        await empty.dismiss("u1", item.attention_id)
        assert (await empty.get_feed("u1")).counts.total == 0

        feed = await _service([item], now + timedelta(hours=1), store).get_feed("u1")
        assert feed.counts.total == 0

    @pytest.mark.asyncio
    async def test_ack_then_mark_read(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item()
        service = _service([item], now, store)

        await service.acknowledge("u1", item.attention_id)
        await service.mark_read("u1", item.attention_id)

        feed = await service.get_feed("u1")
        assert feed.sections.informational[0].read_state == ReadState.ACKNOWLEDGED

    @pytest.mark.asyncio
    async def test_overlay_does_not_leak_across_users(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item()
        service = _service([item], now, store)

        await service.dismiss("u1", item.attention_id)

        assert (await service.get_feed("u1")).counts.total == 0
        assert (await service.get_feed("u2")).counts.total == 1

    @pytest.mark.asyncio
    async def test_snooze_for_hours(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item()

        state = await _service([item], now, store).snooze_for("u1", item.attention_id, 3)

        assert state.snoozed_until == now + timedelta(hours=3)

    @pytest.mark.asyncio
    async def test_dismiss_with_reason(self, make_item, now):
        store = InMemoryOverlayStore()
        item = make_item()

        state = await _service([item], now, store).dismiss_with_reason(
            "u1", item.attention_id, "incorrect_signal", "Not actually overdue"
        )

        assert state.dismissed_at == now
        assert state.dismiss_reason.value == "incorrect_signal"
        assert state.dismiss_note == "Not actually overdue"

    @pytest.mark.asyncio
    async def test_store_failure_on_write_leaves_no_state(self, make_item, now):
        store = AsyncMock(spec=OverlayStore)
        store.upsert.side_effect = UpstreamError("Overlay store write failed")
        service = _service([], now, store)

        with pytest.raises(UpstreamError):
            await service.acknowledge("u1", "a" * 32)
        store.upsert.assert_awaited_once()
