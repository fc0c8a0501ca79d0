"""Database package - overlay state and the domain tables collectors read."""

from attention_engine.db.database import SessionLocal, engine, init_db
from attention_engine.db.models import Base, AttentionUserState
from attention_engine.db.overlay_store import (
    OverlayStore, InMemoryOverlayStore, SqlOverlayStore
)

__all__ = [
    "SessionLocal",
    "engine",
    "init_db",
    "Base",
    "AttentionUserState",
    "OverlayStore",
    "InMemoryOverlayStore",
    "SqlOverlayStore",
]
