"""Shared fixtures: a fixed clock, an item factory and a throwaway SQLite database."""

from datetime import datetime, timedelta, timezone

import pytest

from attention_engine.db.database import create_db_engine, create_session_factory
from attention_engine.db.models import Base
from attention_engine.engine.models import (
    AttentionItem,
    AttentionType,
    Severity,
    SourceType,
)

NOW = datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_item():
    """Factory for AttentionItem drafts with sensible defaults."""

    def _make(**overrides) -> AttentionItem:
        fields = dict(
            source_type=SourceType.PROJECT,
            source_id="P1",
            attention_type=AttentionType.INFORMATIONAL,
            reason_code="status_changed",
            title="Q3 rebalance",
            severity=Severity.LOW,
            created_at=NOW - timedelta(days=2),
            updated_at=NOW - timedelta(hours=30),
            last_activity_at=NOW - timedelta(hours=30),
        )
        fields.update(overrides)
        return AttentionItem(**fields)

    return _make


@pytest.fixture
def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file with every table created."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'attention-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield create_session_factory(engine)
    engine.dispose()
