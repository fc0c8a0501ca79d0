"""
Scoring for attention items.

Every term is additive and explainable: each nonzero contribution is
recorded in the breakdown under a stable key. The total is floored at 0.

Terms:
- severity: base x severity multiplier
- overdue / due_soon: days overdue x multiplier, or a flat bonus when due soon
- owner / assigned: requesting user owns or participates in the item
- decision_type / action_type: classification weight
- blocking: item is blocked or carries a blocker reason
- recent_activity / stale: activity within the last day, or gone quiet
"""

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from attention_engine.config import ScoringWeights
from attention_engine.engine.models import (
    AttentionItem,
    AttentionType,
    ItemStatus,
    ScoreEntry,
    utc_now,
)

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600


class ScoreResult(BaseModel):
    score: float
    breakdown: List[ScoreEntry]


def calculate_score(
    item: AttentionItem,
    user_id: str,
    weights: Optional[ScoringWeights] = None,
    now: Optional[datetime] = None
) -> ScoreResult:
    """
    Calculate the attention score of one item for one user.

    Args:
        item: Classified draft item (score is ignored)
        user_id: Requesting user
        weights: Scoring constants (defaults if omitted)
        now: Reference time (current UTC time if omitted)

    Returns:
        ScoreResult with the floored total and the ordered breakdown
    """
    weights = weights or ScoringWeights()
    now = now or utc_now()
    breakdown: List[ScoreEntry] = []

    def add(key: str, value: float):
        if value:
            breakdown.append(ScoreEntry(key=key, value=value))

    # Severity base
    multiplier = weights.severity_multipliers.get(item.severity.value, 1.0)
    add("severity", weights.severity_base * multiplier)

    # Urgency
    if item.due_at:
        days_until_due = (item.due_at - now).total_seconds() / SECONDS_PER_DAY
        if days_until_due < 0:
            overdue_days = abs(math.floor(days_until_due))
            add("overdue", overdue_days * weights.overdue_days_multiplier)
        elif days_until_due <= weights.due_soon_days_threshold:
            add("due_soon", weights.due_soon_bonus)

    # Ownership
    if item.primary_owner_user_id and item.primary_owner_user_id == user_id:
        add("owner", weights.owner_bonus)
    elif user_id in item.participant_user_ids:
        add("assigned", weights.assigned_bonus)

    # Classification
    if item.attention_type == AttentionType.DECISION_REQUIRED:
        add("decision_type", weights.decision_required_bonus)
    elif item.attention_type == AttentionType.ACTION_REQUIRED:
        add("action_type", weights.action_required_bonus)

    # Blocking
    if item.status == ItemStatus.BLOCKED or item.blocker_reason:
        add("blocking", weights.blocking_bonus)

    # Recency
    hours_since_activity = (now - item.last_activity_at).total_seconds() / SECONDS_PER_HOUR
    if hours_since_activity <= weights.recent_activity_threshold_hours:
        add("recent_activity", weights.recent_activity_bonus)
    elif hours_since_activity > weights.stale_activity_threshold_hours:
        add("stale", weights.stale_activity_penalty)

    total = sum(entry.value for entry in breakdown)
    return ScoreResult(score=max(0.0, total), breakdown=breakdown)


def score_item(
    item: AttentionItem,
    user_id: str,
    weights: Optional[ScoringWeights] = None,
    now: Optional[datetime] = None
) -> AttentionItem:
    """Return a copy of ``item`` with score and breakdown filled in."""
    result = calculate_score(item, user_id, weights, now)
    return item.model_copy(update={
        "score": result.score,
        "score_breakdown": result.breakdown,
    })


def score_items(
    items: List[AttentionItem],
    user_id: str,
    weights: Optional[ScoringWeights] = None,
    now: Optional[datetime] = None
) -> List[AttentionItem]:
    now = now or utc_now()
    return [score_item(item, user_id, weights, now) for item in items]
