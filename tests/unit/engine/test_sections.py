"""Tests for section assembly and the feed envelope."""

from datetime import timedelta

from attention_engine.engine.models import AttentionType
from attention_engine.engine.sections import assemble_sections, build_feed, count_sections


def _items(make_item):
    return [
        make_item(source_id="D1", attention_type=AttentionType.DECISION_REQUIRED, score=30),
        make_item(source_id="A1", attention_type=AttentionType.ACTION_REQUIRED, score=20),
        make_item(source_id="A2", attention_type=AttentionType.ACTION_REQUIRED, score=55),
        make_item(source_id="I1", attention_type=AttentionType.INFORMATIONAL, score=5),
    ]


class TestAssembleSections:
    def test_buckets_by_attention_type(self, make_item):
        sections = assemble_sections(_items(make_item))
        assert [i.source_id for i in sections.decision_required] == ["D1"]
        assert [i.source_id for i in sections.informational] == ["I1"]
        assert sections.alignment == []

    def test_sorted_by_score_desc(self, make_item):
        sections = assemble_sections(_items(make_item))
        assert [i.source_id for i in sections.action_required] == ["A2", "A1"]

    def test_counts_match_sections(self, make_item):
        counts = count_sections(assemble_sections(_items(make_item)))
        assert counts.decision_required == 1
        assert counts.action_required == 2
        assert counts.informational == 1
        assert counts.alignment == 0
        assert counts.total == 4


class TestBuildFeed:
    def test_empty_feed(self, now):
        feed = build_feed([], 24, generated_at=now)
        assert feed.counts.total == 0
        assert feed.sections.informational == []
        assert feed.sections.action_required == []
        assert feed.sections.decision_required == []
        assert feed.sections.alignment == []
        assert feed.degraded_sources == []

    def test_window(self, now):
        feed = build_feed([], 72, generated_at=now)
        assert feed.generated_at == now
        assert feed.window_start == now - timedelta(hours=72)
        assert feed.window_hours == 72

    def test_degraded_sources_sorted(self, now):
        feed = build_feed([], 24, generated_at=now, degraded_sources=["trade_queue", "alignment"])
        assert feed.degraded_sources == ["alignment", "trade_queue"]

    def test_union_of_sections_is_input(self, make_item, now):
        items = _items(make_item)
        feed = build_feed(items, 24, generated_at=now)
        sections = feed.sections
        out = (
            sections.informational + sections.action_required
            + sections.decision_required + sections.alignment
        )
        assert sorted(i.attention_id for i in out) == sorted(i.attention_id for i in items)
        assert feed.counts.total == len(out)
