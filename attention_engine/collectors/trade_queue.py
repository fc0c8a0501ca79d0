"""Trade queue collector: open trade ideas still waiting on the user's vote."""

from datetime import datetime
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from attention_engine.collectors.sql import SqlCollector, compact, preview
from attention_engine.db.models import TradeQueueItem
from attention_engine.engine.models import (
    AttentionContext,
    AttentionItem,
    AttentionType,
    Audience,
    ItemStatus,
    Severity,
    SourceType,
)

OPEN_TRADE_STATUSES = ("pending", "discussing")

URGENCY_SEVERITY = {
    "urgent": Severity.CRITICAL,
    "high": Severity.HIGH,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
}


class TradeQueueCollector(SqlCollector):
    """Visible pending/discussing trade ideas the user has not voted on."""

    name = "trade_queue"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        trades = db.query(TradeQueueItem).options(
            selectinload(TradeQueueItem.asset),
            selectinload(TradeQueueItem.portfolio),
            selectinload(TradeQueueItem.votes),
        ).filter(
            TradeQueueItem.status.in_(OPEN_TRADE_STATUSES),
            or_(
                TradeQueueItem.visibility == "public",
                TradeQueueItem.visibility.is_(None),
                TradeQueueItem.created_by == user_id,
            )
        ).order_by(TradeQueueItem.id).all()

        items = []
        for t in trades:
            if any(v.user_id == user_id for v in t.votes):
                continue  # Already voted

            symbol = t.asset.symbol if t.asset else ""
            action = (t.action or "").upper()

            items.append(AttentionItem(
                source_type=SourceType.TRADE_QUEUE_ITEM,
                source_id=t.id,
                source_url="/trade-queue",
                attention_type=AttentionType.DECISION_REQUIRED,
                reason_code="trade_vote_needed",
                reason_text=f"Trade idea for {symbol} needs your vote",
                title=f"{action} {symbol}".strip(),
                subtitle=t.portfolio.name if t.portfolio else None,
                preview=preview(t.rationale),
                tags=compact([t.action, t.urgency]),
                icon_key="ArrowLeftRight",
                audience=Audience.SHARED,
                primary_owner_user_id=t.created_by,
                participant_user_ids=compact(v.user_id for v in t.votes),
                created_by_user_id=t.created_by,
                last_actor_user_id=t.created_by,
                created_at=t.created_at,
                updated_at=t.updated_at,
                last_activity_at=t.updated_at,
                due_at=t.expires_at,
                status=ItemStatus.WAITING,
                next_action="Cast your vote",
                severity=URGENCY_SEVERITY.get(t.urgency, Severity.MEDIUM),
                context=AttentionContext(asset_id=t.asset_id, portfolio_id=t.portfolio_id),
            ))

        return items
