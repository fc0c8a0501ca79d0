"""
Database models.

Stores the per-user attention overlay (the only state the engine writes) and
the domain tables the built-in collectors read from.
"""

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean,
    JSON, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class AttentionUserState(Base):
    """Read/snooze/dismiss bookkeeping per (user_id, attention_id)."""
    __tablename__ = "attention_user_state"
    __table_args__ = (
        UniqueConstraint("user_id", "attention_id", name="uq_attention_user_state_user_attention"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    attention_id = Column(String(64), nullable=False, index=True)
    read_state = Column(String(20), nullable=False, default="unread")  # 'unread', 'read', 'acknowledged'
    last_viewed_at = Column(DateTime(timezone=True), nullable=True)
    snoozed_until = Column(DateTime(timezone=True), nullable=True)
    dismissed_at = Column(DateTime(timezone=True), nullable=True)
    dismiss_reason = Column(String(50), nullable=True)
    dismiss_note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)


# =============================================================================
# Domain tables read by collectors
# =============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)

    @property
    def display_name(self) -> str:
        if self.first_name:
            return f"{self.first_name} {self.last_name or ''}".strip()
        return self.email or "Someone"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(64), primary_key=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(50), nullable=False, default="planning")  # 'planning', 'in_progress', 'blocked', 'completed'
    priority = Column(String(50), nullable=True)  # 'low', 'medium', 'high', 'urgent'
    context_type = Column(String(100), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    blocked_reason = Column(Text, nullable=True)
    created_by = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    assignments = relationship("ProjectAssignment", back_populates="project")
    deliverables = relationship("ProjectDeliverable", back_populates="project")
    activity = relationship("ProjectActivity", back_populates="project")


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"

    id = Column(Integer, primary_key=True)
    project_id = Column(String(64), ForeignKey("projects.id"), nullable=False, index=True)
    assigned_to = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(100), nullable=True)

    project = relationship("Project", back_populates="assignments")


class ProjectDeliverable(Base):
    __tablename__ = "project_deliverables"

    id = Column(String(64), primary_key=True)
    project_id = Column(String(64), ForeignKey("projects.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    assigned_to = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    project = relationship("Project", back_populates="deliverables")
    assignments = relationship("DeliverableAssignment", back_populates="deliverable")


class DeliverableAssignment(Base):
    __tablename__ = "deliverable_assignments"

    id = Column(Integer, primary_key=True)
    deliverable_id = Column(String(64), ForeignKey("project_deliverables.id"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)

    deliverable = relationship("ProjectDeliverable", back_populates="assignments")


class ProjectActivity(Base):
    __tablename__ = "project_activity"

    id = Column(String(64), primary_key=True)
    project_id = Column(String(64), ForeignKey("projects.id"), nullable=False, index=True)
    actor_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    activity_type = Column(String(100), nullable=False)  # 'status_changed', 'comment_added', ...
    new_value = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False, index=True)

    project = relationship("Project", back_populates="activity")
    actor = relationship("User")


class Asset(Base):
    __tablename__ = "assets"

    id = Column(String(64), primary_key=True)
    symbol = Column(String(32), nullable=False)
    company_name = Column(String(255), nullable=True)


class Portfolio(Base):
    __tablename__ = "portfolios"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)


class TradeQueueItem(Base):
    __tablename__ = "trade_queue_items"

    id = Column(String(64), primary_key=True)
    asset_id = Column(String(64), ForeignKey("assets.id"), nullable=False)
    portfolio_id = Column(String(64), ForeignKey("portfolios.id"), nullable=False)
    action = Column(String(20), nullable=True)  # 'buy', 'sell', 'trim', 'add'
    urgency = Column(String(20), nullable=True)  # 'low', 'medium', 'high', 'urgent'
    rationale = Column(Text, nullable=True)
    status = Column(String(50), nullable=False, default="pending")  # 'pending', 'discussing', 'approved', ...
    visibility = Column(String(20), nullable=True)  # 'public', 'private', NULL = public
    created_by = Column(String(64), ForeignKey("users.id"), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    asset = relationship("Asset")
    portfolio = relationship("Portfolio")
    votes = relationship("TradeQueueVote", back_populates="trade_queue_item")


class TradeQueueVote(Base):
    __tablename__ = "trade_queue_votes"

    id = Column(Integer, primary_key=True)
    trade_queue_item_id = Column(String(64), ForeignKey("trade_queue_items.id"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    vote = Column(String(20), nullable=False)

    trade_queue_item = relationship("TradeQueueItem", back_populates="votes")


class AssetList(Base):
    __tablename__ = "asset_lists"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)


class ListSuggestion(Base):
    __tablename__ = "asset_list_suggestions"

    id = Column(String(64), primary_key=True)
    list_id = Column(String(64), ForeignKey("asset_lists.id"), nullable=False)
    asset_id = Column(String(64), ForeignKey("assets.id"), nullable=False)
    suggestion_type = Column(String(20), nullable=False)  # 'add', 'remove'
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    target_user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    suggested_by = Column(String(64), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)

    asset_list = relationship("AssetList")
    asset = relationship("Asset")
    suggested_by_user = relationship("User", foreign_keys=[suggested_by])


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(100), nullable=False)
    title = Column(String(500), nullable=False)
    message = Column(Text, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    context_type = Column(String(50), nullable=True)  # 'asset', 'project', 'note', 'workflow'
    context_id = Column(String(64), nullable=True)
    context_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False, index=True)
