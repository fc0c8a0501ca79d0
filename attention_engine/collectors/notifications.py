"""Notification collector: recent unread notifications, as informational items."""

from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from attention_engine.collectors.sql import SqlCollector, preview
from attention_engine.db.models import Notification
from attention_engine.engine.models import (
    AttentionContext,
    AttentionItem,
    AttentionType,
    Audience,
    ItemStatus,
    Severity,
    SourceType,
)

NOTIFICATION_LIMIT = 20


def notification_url(context_type: str, context_id: str) -> str:
    """Where a notification should take the user."""
    if context_type == "asset":
        return f"/asset/{context_id}"
    if context_type == "project":
        return f"/project/{context_id}"
    if context_type == "note":
        return f"/note/{context_id}"
    if context_type == "workflow":
        return "/workflows"
    return "/"


class NotificationsCollector(SqlCollector):
    name = "notifications"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        notifications = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
            Notification.created_at >= window_start,
        ).order_by(Notification.created_at.desc(), Notification.id).limit(NOTIFICATION_LIMIT).all()

        items = []
        for n in notifications:
            changed_by = (n.context_data or {}).get("changed_by")

            items.append(AttentionItem(
                source_type=SourceType.NOTIFICATION,
                source_id=n.id,
                source_url=notification_url(n.context_type, n.context_id),
                attention_type=AttentionType.INFORMATIONAL,
                reason_code=n.type,
                reason_text=n.message or "",
                title=n.title,
                preview=preview(n.message),
                tags=[n.type],
                icon_key="Bell",
                audience=Audience.PERSONAL,
                primary_owner_user_id=user_id,
                created_by_user_id=changed_by,
                last_actor_user_id=changed_by,
                created_at=n.created_at,
                updated_at=n.created_at,
                last_activity_at=n.created_at,
                status=ItemStatus.OPEN,
                severity=Severity.LOW,
                context=AttentionContext(
                    asset_id=n.context_id if n.context_type == "asset" else None,
                    project_id=n.context_id if n.context_type == "project" else None,
                ),
            ))

        return items
