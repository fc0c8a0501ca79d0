"""Tests for the item schema and overlay state helpers."""

from datetime import datetime, timedelta, timezone

from attention_engine.engine.identity import generate_attention_id
from attention_engine.engine.models import (
    AttentionType,
    DismissReason,
    OverlayUpdate,
    ReadState,
    UserOverlayState,
    apply_overlay_update,
    as_utc,
    merge_read_state,
)


# ─── AttentionItem ───────────────────────────────────────────────


class TestAttentionItem:
    def test_attention_id_is_derived(self, make_item):
        item = make_item(attention_id="caller-supplied")
        assert item.attention_id == generate_attention_id(
            "project", "P1", "informational", "status_changed"
        )

    def test_priority_follows_attention_type(self, make_item):
        assert make_item(attention_type=AttentionType.DECISION_REQUIRED).priority == 4
        assert make_item(attention_type=AttentionType.ACTION_REQUIRED).priority == 3
        assert make_item(attention_type=AttentionType.INFORMATIONAL).priority == 2
        assert make_item(attention_type=AttentionType.ALIGNMENT).priority == 1

    def test_participants_deduplicated_in_order(self, make_item):
        item = make_item(participant_user_ids=["u2", "u1", "u2", "", "u3", "u1"])
        assert item.participant_user_ids == ["u2", "u1", "u3"]

    def test_naive_datetimes_taken_as_utc(self, make_item):
        item = make_item(due_at=datetime(2026, 3, 5, 9, 0))
        assert item.due_at == datetime(2026, 3, 5, 9, 0, tzinfo=timezone.utc)

    def test_dedup_key(self, make_item):
        assert make_item(source_id="P9").dedup_key == ("project", "P9")

    def test_defaults(self, make_item):
        item = make_item()
        assert item.score == 0.0
        assert item.score_breakdown == []
        assert item.read_state == ReadState.UNREAD
        assert item.source_url == "/"


def test_as_utc_converts_offsets():
    value = datetime(2026, 3, 2, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(value) == datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
    assert as_utc(None) is None


# ─── Read state / overlay updates ────────────────────────────────


class TestMergeReadState:
    def test_moves_forward(self):
        assert merge_read_state(ReadState.UNREAD, ReadState.READ) == ReadState.READ
        assert merge_read_state(ReadState.READ, ReadState.ACKNOWLEDGED) == ReadState.ACKNOWLEDGED

    def test_never_moves_backwards(self):
        assert merge_read_state(ReadState.ACKNOWLEDGED, ReadState.READ) == ReadState.ACKNOWLEDGED
        assert merge_read_state(ReadState.READ, ReadState.UNREAD) == ReadState.READ

    def test_none_keeps_current(self):
        assert merge_read_state(ReadState.READ, None) == ReadState.READ


class TestApplyOverlayUpdate:
    def _state(self, **kwargs) -> UserOverlayState:
        return UserOverlayState(user_id="u1", attention_id="a" * 32, **kwargs)

    def test_unset_fields_untouched(self, now):
        state = self._state(snoozed_until=now + timedelta(hours=1))
        updated = apply_overlay_update(state, OverlayUpdate(read_state=ReadState.READ, last_viewed_at=now))
        assert updated.snoozed_until == now + timedelta(hours=1)
        assert updated.read_state == ReadState.READ
        assert updated.last_viewed_at == now

    def test_mark_read_after_ack_only_moves_last_viewed(self, now):
        state = self._state(read_state=ReadState.ACKNOWLEDGED, last_viewed_at=now - timedelta(hours=1))
        updated = apply_overlay_update(state, OverlayUpdate(read_state=ReadState.READ, last_viewed_at=now))
        assert updated.read_state == ReadState.ACKNOWLEDGED
        assert updated.last_viewed_at == now

    def test_first_dismissal_time_kept(self, now):
        first = now - timedelta(days=1)
        state = self._state(dismissed_at=first)
        updated = apply_overlay_update(
            state,
            OverlayUpdate(dismissed_at=now, dismiss_reason=DismissReason.DUPLICATE)
        )
        assert updated.dismissed_at == first
        assert updated.dismiss_reason == DismissReason.DUPLICATE

    def test_snooze_does_not_touch_dismissal(self, now):
        state = self._state(dismissed_at=now)
        updated = apply_overlay_update(state, OverlayUpdate(snoozed_until=now + timedelta(hours=2)))
        assert updated.dismissed_at == now
