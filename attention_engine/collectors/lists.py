"""List suggestion collector: add/remove proposals awaiting the user's call."""

from datetime import datetime
from typing import List

from sqlalchemy.orm import Session, selectinload

from attention_engine.collectors.sql import SqlCollector, compact, preview
from attention_engine.db.models import ListSuggestion
from attention_engine.engine.models import (
    AttentionContext,
    AttentionItem,
    AttentionType,
    Audience,
    ItemStatus,
    Severity,
    SourceType,
)


class ListSuggestionsCollector(SqlCollector):
    name = "list_suggestions"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        suggestions = db.query(ListSuggestion).options(
            selectinload(ListSuggestion.asset_list),
            selectinload(ListSuggestion.asset),
            selectinload(ListSuggestion.suggested_by_user),
        ).filter(
            ListSuggestion.target_user_id == user_id,
            ListSuggestion.status == "pending",
        ).order_by(ListSuggestion.created_at.desc(), ListSuggestion.id).all()

        items = []
        for s in suggestions:
            suggested_by = s.suggested_by_user.display_name if s.suggested_by_user else "Someone"
            symbol = s.asset.symbol if s.asset else ""
            is_add = s.suggestion_type == "add"

            items.append(AttentionItem(
                source_type=SourceType.LIST_SUGGESTION,
                source_id=s.id,
                source_url=f"/list/{s.list_id}",
                attention_type=AttentionType.DECISION_REQUIRED,
                reason_code="suggestion_pending",
                reason_text=f"{suggested_by} suggested {'adding' if is_add else 'removing'} {symbol}",
                title=f"{'Add' if is_add else 'Remove'} {symbol}",
                subtitle=s.asset_list.name if s.asset_list else None,
                preview=preview(s.notes),
                tags=compact([s.suggestion_type]),
                icon_key="ListPlus",
                audience=Audience.PERSONAL,
                primary_owner_user_id=user_id,
                participant_user_ids=compact([s.suggested_by]),
                created_by_user_id=s.suggested_by,
                last_actor_user_id=s.suggested_by,
                created_at=s.created_at,
                updated_at=s.created_at,
                last_activity_at=s.created_at,
                status=ItemStatus.WAITING,
                next_action="Accept or reject suggestion",
                severity=Severity.LOW,
                context=AttentionContext(asset_id=s.asset_id, list_id=s.list_id),
            ))

        return items
