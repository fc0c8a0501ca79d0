"""Section assembly: bucket, sort and count the final item set."""

from datetime import datetime, timedelta
from typing import List, Optional

from attention_engine.engine.models import (
    AttentionCounts,
    AttentionFeed,
    AttentionItem,
    AttentionSections,
    AttentionType,
    utc_now,
)
from attention_engine.engine.ranking import score_key


def assemble_sections(items: List[AttentionItem]) -> AttentionSections:
    """Split items into the four fixed sections, each sorted best first."""
    buckets = {attention_type: [] for attention_type in AttentionType}
    for item in items:
        buckets[item.attention_type].append(item)

    return AttentionSections(**{
        attention_type.value: sorted(bucket, key=score_key)
        for attention_type, bucket in buckets.items()
    })


def count_sections(sections: AttentionSections) -> AttentionCounts:
    counts = {
        attention_type.value: len(getattr(sections, attention_type.value))
        for attention_type in AttentionType
    }
    return AttentionCounts(total=sum(counts.values()), **counts)


def build_feed(
    items: List[AttentionItem],
    window_hours: int,
    generated_at: Optional[datetime] = None,
    degraded_sources: Optional[List[str]] = None
) -> AttentionFeed:
    """Wrap the de-duplicated items in the response envelope."""
    generated_at = generated_at or utc_now()
    sections = assemble_sections(items)
    return AttentionFeed(
        sections=sections,
        counts=count_sections(sections),
        generated_at=generated_at,
        window_start=generated_at - timedelta(hours=window_hours),
        window_hours=window_hours,
        degraded_sources=sorted(degraded_sources or []),
    )
