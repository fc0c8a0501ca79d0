"""
Per-user overlay merge/filter.

Dismissed items are dropped for good, snoozed items until the snooze
passes. Survivors get the user's read state attached for display; the
overlay never changes the score.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from attention_engine.engine.models import (
    AttentionItem,
    UserOverlayState,
    as_utc,
    utc_now,
)


def build_state_map(user_id: str, states: Iterable[UserOverlayState]) -> Dict[str, UserOverlayState]:
    """Index overlay rows by attention_id, keeping only ``user_id``'s rows."""
    return {s.attention_id: s for s in states if s.user_id == user_id}


def is_hidden(state: Optional[UserOverlayState], now: datetime) -> bool:
    """True if the overlay row hides its item at ``now``."""
    if state is None:
        return False
    if state.dismissed_at is not None:
        return True
    snoozed_until = as_utc(state.snoozed_until)
    return snoozed_until is not None and snoozed_until > now


def apply_overlay(
    items: List[AttentionItem],
    user_id: str,
    states: Iterable[UserOverlayState],
    now: Optional[datetime] = None
) -> List[AttentionItem]:
    """
    Filter and annotate ``items`` with ``user_id``'s overlay state.

    Args:
        items: Scored items
        user_id: Requesting user
        states: Overlay rows for the user (rows for other users are ignored)
        now: Reference time

    Returns:
        Visible items, in input order, with read_state/last_viewed_at/
        snoozed_until copied from the overlay
    """
    now = now or utc_now()
    state_map = build_state_map(user_id, states)
    visible: List[AttentionItem] = []

    for item in items:
        state = state_map.get(item.attention_id)
        if is_hidden(state, now):
            continue
        if state is None:
            visible.append(item)
            continue
        visible.append(item.model_copy(update={
            "read_state": state.read_state,
            "last_viewed_at": as_utc(state.last_viewed_at),
            "snoozed_until": as_utc(state.snoozed_until),
        }))

    return visible
