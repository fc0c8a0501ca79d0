"""
Feed computation: scatter-gather over collectors, then score, overlay,
de-duplicate and assemble.

Only the collector calls and the overlay read suspend. Everything after them
is synchronous work on in-memory lists.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from attention_engine.collectors.base import Collector, run_collectors
from attention_engine.config import EngineSettings
from attention_engine.db.overlay_store import OverlayStore
from attention_engine.engine.errors import AttentionError, InternalError, UpstreamError
from attention_engine.engine.models import AttentionFeed, AttentionItem, as_utc, utc_now
from attention_engine.engine.overlay import apply_overlay
from attention_engine.engine.ranking import deduplicate
from attention_engine.engine.scoring import score_items
from attention_engine.engine.sections import build_feed

logger = logging.getLogger(__name__)


async def compute_attention(
    collectors: Sequence[Collector],
    overlay_store: OverlayStore,
    user_id: str,
    window_hours: int,
    settings: Optional[EngineSettings] = None,
    now: Optional[datetime] = None
) -> AttentionFeed:
    """
    Compute one user's attention feed.

    Args:
        collectors: Sources to fan out to
        overlay_store: Per-user read/snooze/dismiss state
        user_id: Requesting user
        window_hours: Lookback window handed to collectors
        settings: Timeout, fail-fast and scoring weights (defaults if omitted)
        now: Reference time (current UTC time if omitted)

    Returns:
        AttentionFeed with four sorted sections and their counts

    Raises:
        UpstreamError: Overlay store read failed, or a collector failed with
            fail-fast enabled
        InternalError: Unexpected failure while scoring or assembling
    """
    settings = settings or EngineSettings()
    now = as_utc(now) or utc_now()
    window_start = now - timedelta(hours=window_hours)

    results = await run_collectors(
        collectors,
        user_id,
        window_start,
        timeout=settings.collector_timeout_seconds,
        fail_fast=settings.fail_fast_collectors,
    )
    drafts: List[AttentionItem] = [item for result in results for item in result.items]
    degraded = [result.name for result in results if not result.ok]

    try:
        scored = score_items(drafts, user_id, settings.weights, now)
    except Exception as e:
        logger.error(f"Scoring failed for {user_id}: {e}", exc_info=True)
        raise InternalError(f"Scoring failed: {e}") from e

    try:
        states = await overlay_store.get(user_id)
    except AttentionError:
        raise
    except Exception as e:
        logger.error(f"Overlay store read failed for {user_id}: {e}", exc_info=True)
        raise UpstreamError(f"Overlay store read failed: {e}") from e

    try:
        visible = apply_overlay(scored, user_id, states, now)
        items = deduplicate(visible)
        feed = build_feed(items, window_hours, generated_at=now, degraded_sources=degraded)
    except Exception as e:
        logger.error(f"Feed assembly failed for {user_id}: {e}", exc_info=True)
        raise InternalError(f"Feed assembly failed: {e}") from e

    logger.info(
        f"Attention feed for {user_id}: {len(drafts)} drafts, "
        f"{len(scored) - len(visible)} hidden, {feed.counts.total} shown"
        + (f", degraded: {', '.join(feed.degraded_sources)}" if degraded else "")
    )
    return feed
