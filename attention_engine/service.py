"""
Attention service.

Binds an overlay store, a collector set and settings together and exposes the
read path plus the mutation paths. Both the HTTP app and the MCP server call
into this class.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from attention_engine.collectors.base import Collector
from attention_engine.config import EngineSettings
from attention_engine.db.overlay_store import OverlayStore
from attention_engine.engine.errors import InvalidArgumentError
from attention_engine.engine.models import (
    AttentionFeed,
    OverlayUpdate,
    UserOverlayState,
    utc_now,
)
from attention_engine.engine.mutations import (
    acknowledge_update,
    dismiss_update,
    mark_read_update,
    require_attention_id,
    require_user,
    snooze_for_update,
    snooze_update,
)
from attention_engine.engine.pipeline import compute_attention

logger = logging.getLogger(__name__)


class AttentionService:
    def __init__(
        self,
        overlay_store: OverlayStore,
        collectors: Sequence[Collector],
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.overlay_store = overlay_store
        self.collectors = list(collectors)
        self.settings = settings or EngineSettings()
        self.clock = clock

    def resolve_window_hours(self, window_hours: Any = None) -> int:
        """Validate a requested window, falling back to the configured default."""
        if window_hours is None or window_hours == "":
            return self.settings.default_window_hours
        if isinstance(window_hours, bool):
            raise InvalidArgumentError("window_hours must be an integer")
        if isinstance(window_hours, str):
            try:
                window_hours = int(window_hours.strip())
            except ValueError:
                raise InvalidArgumentError("window_hours must be an integer")
        if not isinstance(window_hours, int):
            raise InvalidArgumentError("window_hours must be an integer")
        if not 1 <= window_hours <= self.settings.max_window_hours:
            raise InvalidArgumentError(
                f"window_hours must be between 1 and {self.settings.max_window_hours}"
            )
        return window_hours

    async def get_feed(self, user_id: Any, window_hours: Any = None) -> AttentionFeed:
        user_id = require_user(user_id)
        hours = self.resolve_window_hours(window_hours)
        return await compute_attention(
            self.collectors,
            self.overlay_store,
            user_id,
            hours,
            settings=self.settings,
            now=self.clock(),
        )

    async def _write(self, user_id: Any, attention_id: Any, build: Callable[[], OverlayUpdate]) -> UserOverlayState:
        # Identity first, then fields, then exactly one store write
        user_id = require_user(user_id)
        attention_id = require_attention_id(attention_id)
        update = build()
        state = await self.overlay_store.upsert(user_id, attention_id, update)
        logger.debug(f"Overlay updated for {user_id}/{attention_id}: {update.model_dump(exclude_none=True)}")
        return state

    async def acknowledge(self, user_id: Any, attention_id: Any) -> UserOverlayState:
        return await self._write(user_id, attention_id, lambda: acknowledge_update(self.clock()))

    async def mark_read(self, user_id: Any, attention_id: Any) -> UserOverlayState:
        return await self._write(user_id, attention_id, lambda: mark_read_update(self.clock()))

    async def snooze(self, user_id: Any, attention_id: Any, snoozed_until: Any) -> UserOverlayState:
        """Hide an item until ``snoozed_until`` (ISO-8601 string or datetime)."""
        return await self._write(
            user_id, attention_id, lambda: snooze_update(snoozed_until, self.clock())
        )

    async def snooze_for(self, user_id: Any, attention_id: Any, hours: Any) -> UserOverlayState:
        """Hide an item for ``hours`` from now."""
        return await self._write(
            user_id, attention_id, lambda: snooze_for_update(hours, self.clock())
        )

    async def dismiss(self, user_id: Any, attention_id: Any) -> UserOverlayState:
        return await self._write(user_id, attention_id, lambda: dismiss_update(self.clock()))

    async def dismiss_with_reason(
        self,
        user_id: Any,
        attention_id: Any,
        reason: Any,
        note: Optional[str] = None
    ) -> UserOverlayState:
        """Dismiss permanently and record why."""
        if reason is None or reason == "":
            raise InvalidArgumentError("reason is required")
        return await self._write(
            user_id, attention_id, lambda: dismiss_update(self.clock(), reason=reason, note=note)
        )


def build_default_service(settings: Optional[EngineSettings] = None) -> AttentionService:
    """Service over the configured database: SQL overlay store and built-in collectors."""
    from attention_engine.collectors import default_collectors
    from attention_engine.db.database import SessionLocal
    from attention_engine.db.overlay_store import SqlOverlayStore

    return AttentionService(
        overlay_store=SqlOverlayStore(SessionLocal),
        collectors=default_collectors(SessionLocal),
        settings=settings,
    )
