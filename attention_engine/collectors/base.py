"""
Collector contract and the scatter-gather runner.

A collector inspects one kind of domain data and returns draft attention
items for a user. Collectors run concurrently; each one is bounded by a
timeout and isolated so a failing source contributes nothing instead of
failing the whole feed.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from attention_engine.engine.errors import UpstreamError
from attention_engine.engine.models import AttentionItem

logger = logging.getLogger(__name__)


class Collector(ABC):
    """One independent producer of attention items."""

    name: str = "collector"

    @abstractmethod
    async def collect(self, user_id: str, window_start: datetime) -> List[AttentionItem]:
        """Return draft items (score unset) for ``user_id``."""


class CollectorResult(BaseModel):
    """Outcome of one collector run."""
    name: str
    items: List[AttentionItem] = Field(default_factory=list)
    error: Optional[str] = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.timed_out


async def _run_collector(
    collector: Collector,
    user_id: str,
    window_start: datetime,
    timeout: Optional[float]
) -> CollectorResult:
    name = collector.name
    try:
        items = await asyncio.wait_for(collector.collect(user_id, window_start), timeout=timeout)
        # Collectors may hand back plain dicts
        items = [
            item if isinstance(item, AttentionItem) else AttentionItem.model_validate(item)
            for item in items or []
        ]
    except asyncio.TimeoutError:
        logger.warning(f"Collector {name} timed out after {timeout}s")
        return CollectorResult(name=name, error="timeout", timed_out=True)
    except ValidationError as e:
        logger.error(f"Collector {name} produced an invalid item: {e}")
        return CollectorResult(name=name, error="invalid_item")
    except Exception as e:
        logger.error(f"Collector {name} failed: {e}", exc_info=True)
        return CollectorResult(name=name, error=type(e).__name__)

    logger.debug(f"Collector {name} returned {len(items)} items")
    return CollectorResult(name=name, items=items)


async def run_collectors(
    collectors: Sequence[Collector],
    user_id: str,
    window_start: datetime,
    timeout: Optional[float] = None,
    fail_fast: bool = False
) -> List[CollectorResult]:
    """
    Run every collector concurrently and wait for all of them.

    Args:
        collectors: Sources to run
        user_id: Requesting user
        window_start: Start of the lookback window
        timeout: Per-collector timeout in seconds (None = unbounded)
        fail_fast: Raise UpstreamError if any collector fails or times out

    Returns:
        One CollectorResult per collector, in input order
    """
    results = await asyncio.gather(*(
        _run_collector(collector, user_id, window_start, timeout)
        for collector in collectors
    ))

    failed = [r.name for r in results if not r.ok]
    if failed and fail_fast:
        raise UpstreamError(f"Collectors failed: {', '.join(failed)}")

    return list(results)
