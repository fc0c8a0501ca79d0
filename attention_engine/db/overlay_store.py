"""
Overlay stores: durable per-user read/snooze/dismiss state.

The store is a sparse map keyed by (user_id, attention_id). Items are never
stored; a row may exist for an id no collector currently produces.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from attention_engine.db.models import AttentionUserState
from attention_engine.engine.errors import UpstreamError
from attention_engine.engine.models import (
    DismissReason,
    OverlayUpdate,
    ReadState,
    UserOverlayState,
    apply_overlay_update,
    as_utc,
)

logger = logging.getLogger(__name__)


class OverlayStore(ABC):
    """Overlay store contract used by the read path and the mutation handlers."""

    @abstractmethod
    async def get(self, user_id: str) -> List[UserOverlayState]:
        """All overlay rows for ``user_id``."""

    @abstractmethod
    async def upsert(self, user_id: str, attention_id: str, update: OverlayUpdate) -> UserOverlayState:
        """Create or update one row. Read state never moves backwards."""


class InMemoryOverlayStore(OverlayStore):
    """Process-local store, for tests and single-process deployments."""

    def __init__(self):
        self._rows: Dict[Tuple[str, str], UserOverlayState] = {}
        self._lock = threading.Lock()

    async def get(self, user_id: str) -> List[UserOverlayState]:
        with self._lock:
            return [state for (uid, _), state in self._rows.items() if uid == user_id]

    async def upsert(self, user_id: str, attention_id: str, update: OverlayUpdate) -> UserOverlayState:
        key = (user_id, attention_id)
        with self._lock:
            current = self._rows.get(key) or UserOverlayState(user_id=user_id, attention_id=attention_id)
            state = apply_overlay_update(current, update)
            self._rows[key] = state
        return state


class SqlOverlayStore(OverlayStore):
    """SQLAlchemy-backed store; one session and one commit per call."""

    # A concurrent first write for the same key can lose the insert race once
    MAX_UPSERT_ATTEMPTS = 2

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def get(self, user_id: str) -> List[UserOverlayState]:
        return await asyncio.to_thread(self._get_sync, user_id)

    async def upsert(self, user_id: str, attention_id: str, update: OverlayUpdate) -> UserOverlayState:
        return await asyncio.to_thread(self._upsert_sync, user_id, attention_id, update)

    def _get_sync(self, user_id: str) -> List[UserOverlayState]:
        try:
            with self.session_factory() as db:
                rows = db.query(AttentionUserState).filter(
                    AttentionUserState.user_id == user_id
                ).all()
                return [_row_to_state(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Failed to load overlay state for {user_id}: {e}", exc_info=True)
            raise UpstreamError("Overlay store read failed") from e

    def _upsert_sync(self, user_id: str, attention_id: str, update: OverlayUpdate) -> UserOverlayState:
        for attempt in range(1, self.MAX_UPSERT_ATTEMPTS + 1):
            with self.session_factory() as db:
                try:
                    row = db.query(AttentionUserState).filter(
                        AttentionUserState.user_id == user_id,
                        AttentionUserState.attention_id == attention_id
                    ).with_for_update().first()

                    if row is None:
                        row = AttentionUserState(
                            user_id=user_id,
                            attention_id=attention_id,
                            read_state=ReadState.UNREAD.value
                        )
                        db.add(row)
                        current = UserOverlayState(user_id=user_id, attention_id=attention_id)
                    else:
                        current = _row_to_state(row)

                    state = apply_overlay_update(current, update)
                    _write_state(row, state)
                    db.commit()
                    return state
                except IntegrityError as e:
                    db.rollback()
                    if attempt == self.MAX_UPSERT_ATTEMPTS:
                        logger.error(f"Overlay upsert conflict for {attention_id}: {e}", exc_info=True)
                        raise UpstreamError("Overlay store write failed") from e
                    logger.info(f"Retrying overlay upsert for {attention_id} after insert conflict")
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(f"Overlay upsert failed for {attention_id}: {e}", exc_info=True)
                    raise UpstreamError("Overlay store write failed") from e


def _row_to_state(row: AttentionUserState) -> UserOverlayState:
    return UserOverlayState(
        user_id=row.user_id,
        attention_id=row.attention_id,
        read_state=ReadState(row.read_state or ReadState.UNREAD.value),
        last_viewed_at=as_utc(row.last_viewed_at),
        snoozed_until=as_utc(row.snoozed_until),
        dismissed_at=as_utc(row.dismissed_at),
        dismiss_reason=DismissReason(row.dismiss_reason) if row.dismiss_reason else None,
        dismiss_note=row.dismiss_note,
    )


def _write_state(row: AttentionUserState, state: UserOverlayState):
    row.read_state = state.read_state.value
    row.last_viewed_at = state.last_viewed_at
    row.snoozed_until = state.snoozed_until
    row.dismissed_at = state.dismissed_at
    row.dismiss_reason = state.dismiss_reason.value if state.dismiss_reason else None
    row.dismiss_note = state.dismiss_note
