"""Attention engine core - identity, scoring, overlay, ranking and sections."""

from attention_engine.engine.identity import generate_attention_id
from attention_engine.engine.scoring import calculate_score, score_items, ScoreResult
from attention_engine.engine.overlay import apply_overlay
from attention_engine.engine.ranking import deduplicate, rank_key
from attention_engine.engine.sections import build_feed

__all__ = [
    "generate_attention_id",
    "calculate_score",
    "score_items",
    "ScoreResult",
    "apply_overlay",
    "deduplicate",
    "rank_key",
    "build_feed",
]
