"""
Ranking and de-duplication.

A single sort key orders items everywhere the engine needs a total order:
classification priority desc, score desc, last activity desc, attention_id asc.
"""

from typing import Dict, List, Tuple

from attention_engine.engine.models import AttentionItem


def rank_key(item: AttentionItem) -> Tuple:
    """Sort key, ascending = best first."""
    return (
        -item.priority,
        -item.score,
        -item.last_activity_at.timestamp(),
        item.attention_id,
    )


def score_key(item: AttentionItem) -> Tuple:
    """Sort key within one section (all items share a priority)."""
    return (
        -item.score,
        -item.last_activity_at.timestamp(),
        item.attention_id,
    )


def deduplicate(items: List[AttentionItem]) -> List[AttentionItem]:
    """
    Keep one item per (source_type, source_id).

    The survivor is the best item under ``rank_key``, so a low-scoring
    decision beats a high-scoring informational item about the same object.
    Output order is the first-seen order of each source object.
    """
    best: Dict[Tuple, AttentionItem] = {}

    for item in items:
        key = item.dedup_key
        existing = best.get(key)
        if existing is None or rank_key(item) < rank_key(existing):
            best[key] = item

    return list(best.values())
