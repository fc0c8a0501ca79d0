"""Base class and helpers for collectors backed by the SQL domain tables."""

import asyncio
from abc import abstractmethod
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from attention_engine.collectors.base import Collector
from attention_engine.engine.models import AttentionItem, Severity, as_utc, utc_now

PREVIEW_LENGTH = 150


class SqlCollector(Collector):
    """Runs a synchronous query in a worker thread with its own session."""

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Callable[[], datetime] = utc_now
    ):
        self.session_factory = session_factory
        self.clock = clock

    async def collect(self, user_id: str, window_start: datetime) -> List[AttentionItem]:
        return await asyncio.to_thread(self._collect_sync, user_id, as_utc(window_start))

    def _collect_sync(self, user_id: str, window_start: datetime) -> List[AttentionItem]:
        with self.session_factory() as db:
            return self.query(db, user_id, window_start, as_utc(self.clock()))

    @abstractmethod
    def query(
        self,
        db: Session,
        user_id: str,
        window_start: datetime,
        now: datetime
    ) -> List[AttentionItem]:
        """Build draft items from the database."""


def preview(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    return text[:PREVIEW_LENGTH]


def compact(values: Iterable[Optional[str]]) -> List[str]:
    """Drop empty values."""
    return [v for v in values if v]


def severity_from_priority(priority: Optional[str]) -> Severity:
    """Project priority to severity: urgent -> high, high -> medium, else low."""
    if priority == "urgent":
        return Severity.HIGH
    if priority == "high":
        return Severity.MEDIUM
    return Severity.LOW


def is_past(value: Optional[datetime], now: datetime) -> bool:
    value = as_utc(value)
    return value is not None and value < now
