"""Data models for the attention engine."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, List

from pydantic import BaseModel, Field, model_validator

from attention_engine.engine.identity import generate_attention_id


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC. Naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SourceType(str, Enum):
    """Kind of domain object an item points at."""
    TASK = "task"
    WORKFLOW_ITEM = "workflow_item"
    PROJECT = "project"
    PROJECT_DELIVERABLE = "project_deliverable"
    DECISION = "decision"
    IDEA = "idea"
    NOTE = "note"
    MESSAGE = "message"
    ASSET_EVENT = "asset_event"
    COVERAGE_CHANGE = "coverage_change"
    FILE = "file"
    TRADE_QUEUE_ITEM = "trade_queue_item"
    LIST_SUGGESTION = "list_suggestion"
    NOTIFICATION = "notification"
    CUSTOM = "custom"


class AttentionType(str, Enum):
    """What the item asks of the user."""
    INFORMATIONAL = "informational"  # What's new
    ACTION_REQUIRED = "action_required"  # What I need to do
    DECISION_REQUIRED = "decision_required"  # Decisions I need to make
    ALIGNMENT = "alignment"  # Visibility into others' active work


# Dedup priority (higher wins)
ATTENTION_TYPE_PRIORITY: Dict[AttentionType, int] = {
    AttentionType.DECISION_REQUIRED: 4,
    AttentionType.ACTION_REQUIRED: 3,
    AttentionType.INFORMATIONAL: 2,
    AttentionType.ALIGNMENT: 1,
}


class Audience(str, Enum):
    PERSONAL = "personal"
    SHARED = "shared"
    TEAM = "team"


class ItemStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    WAITING = "waiting"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReadState(str, Enum):
    UNREAD = "unread"
    READ = "read"
    ACKNOWLEDGED = "acknowledged"


# Read state only moves forward
READ_STATE_RANK: Dict[ReadState, int] = {
    ReadState.UNREAD: 0,
    ReadState.READ: 1,
    ReadState.ACKNOWLEDGED: 2,
}


class DismissReason(str, Enum):
    """Reasons offered by the "Not relevant..." flow."""
    DUPLICATE = "duplicate"
    INCORRECT_SIGNAL = "incorrect_signal"
    NOT_MY_RESPONSIBILITY = "not_my_responsibility"
    NO_LONGER_RELEVANT = "no_longer_relevant"


class ScoreEntry(BaseModel):
    """One additive term of an item's score."""
    key: str
    value: float


class ContextRef(BaseModel):
    type: str
    id: str


class AttentionContext(BaseModel):
    """Navigation back-references. Never used for scoring or filtering."""
    asset_id: Optional[str] = None
    portfolio_id: Optional[str] = None
    theme_id: Optional[str] = None
    project_id: Optional[str] = None
    list_id: Optional[str] = None
    workflow_id: Optional[str] = None
    context_refs: List[ContextRef] = Field(default_factory=list)


class AttentionItem(BaseModel):
    """
    A normalized record describing one thing that may need a user's attention.

    Collectors emit drafts with ``score`` unset. ``attention_id`` is always
    derived from (source_type, source_id, attention_type, reason_code); any
    value passed in is replaced.
    """
    attention_id: str = ""

    # Source reference
    source_type: SourceType
    source_id: str
    source_url: str = "/"

    # Classification
    attention_type: AttentionType
    reason_code: str
    reason_text: str = ""

    # Presentation
    title: str
    subtitle: Optional[str] = None
    preview: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    icon_key: str = ""

    # Ownership / audience
    audience: Audience = Audience.PERSONAL
    primary_owner_user_id: Optional[str] = None
    participant_user_ids: List[str] = Field(default_factory=list)
    created_by_user_id: Optional[str] = None
    last_actor_user_id: Optional[str] = None

    # Temporal
    created_at: datetime
    updated_at: datetime
    last_activity_at: datetime
    due_at: Optional[datetime] = None

    # Lifecycle
    status: ItemStatus = ItemStatus.OPEN
    blocker_reason: Optional[str] = None
    next_action: Optional[str] = None
    resolution: Optional[str] = None
    resolution_note: Optional[str] = None
    resolution_at: Optional[datetime] = None

    severity: Severity = Severity.MEDIUM

    # Computed
    score: float = 0.0
    score_breakdown: List[ScoreEntry] = Field(default_factory=list)

    # Overlay (display only)
    read_state: ReadState = ReadState.UNREAD
    last_viewed_at: Optional[datetime] = None
    snoozed_until: Optional[datetime] = None

    context: AttentionContext = Field(default_factory=AttentionContext)

    @model_validator(mode="after")
    def _normalize(self) -> "AttentionItem":
        self.attention_id = generate_attention_id(
            self.source_type.value,
            self.source_id,
            self.attention_type.value,
            self.reason_code,
        )
        # participant set, first-seen order kept for stable output
        self.participant_user_ids = list(dict.fromkeys(
            uid for uid in self.participant_user_ids if uid
        ))
        for name in ("created_at", "updated_at", "last_activity_at", "due_at", "resolution_at"):
            setattr(self, name, as_utc(getattr(self, name)))
        return self

    @property
    def dedup_key(self) -> tuple:
        return (self.source_type.value, self.source_id)

    @property
    def priority(self) -> int:
        return ATTENTION_TYPE_PRIORITY[self.attention_type]


class UserOverlayState(BaseModel):
    """Per-user bookkeeping for one attention_id."""
    user_id: str
    attention_id: str
    read_state: ReadState = ReadState.UNREAD
    last_viewed_at: Optional[datetime] = None
    snoozed_until: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    dismiss_reason: Optional[DismissReason] = None
    dismiss_note: Optional[str] = None


class OverlayUpdate(BaseModel):
    """Partial overlay write. Unset fields are left untouched."""
    read_state: Optional[ReadState] = None
    last_viewed_at: Optional[datetime] = None
    snoozed_until: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    dismiss_reason: Optional[DismissReason] = None
    dismiss_note: Optional[str] = None


def merge_read_state(current: ReadState, requested: Optional[ReadState]) -> ReadState:
    """Apply a requested read state without ever moving backwards."""
    if requested is None:
        return current
    if READ_STATE_RANK[requested] > READ_STATE_RANK[current]:
        return requested
    return current


def apply_overlay_update(state: UserOverlayState, update: OverlayUpdate) -> UserOverlayState:
    """Return ``state`` with ``update`` applied."""
    changes = update.model_dump(exclude_none=True)
    changes["read_state"] = merge_read_state(state.read_state, update.read_state)
    if state.dismissed_at is not None:
        # First dismissal time is kept
        changes.pop("dismissed_at", None)
    return state.model_copy(update=changes)


class AttentionCounts(BaseModel):
    informational: int = 0
    action_required: int = 0
    decision_required: int = 0
    alignment: int = 0
    total: int = 0


class AttentionSections(BaseModel):
    informational: List[AttentionItem] = Field(default_factory=list)
    action_required: List[AttentionItem] = Field(default_factory=list)
    decision_required: List[AttentionItem] = Field(default_factory=list)
    alignment: List[AttentionItem] = Field(default_factory=list)


class AttentionFeed(BaseModel):
    """Response envelope for one feed computation."""
    sections: AttentionSections
    counts: AttentionCounts
    generated_at: datetime
    window_start: datetime
    window_hours: int
    degraded_sources: List[str] = Field(default_factory=list)
