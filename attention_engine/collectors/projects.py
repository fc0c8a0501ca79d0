"""
Project collectors.

- DeliverablesCollector: pending deliverables the user should complete
- ProjectsCollector: blocked, overdue or due-soon projects the user works on
- ProjectActivityCollector: what teammates changed on the user's projects
- AlignmentCollector: busy multi-contributor projects the user is part of
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, selectinload

from attention_engine.collectors.sql import (
    SqlCollector,
    compact,
    is_past,
    preview,
    severity_from_priority,
)
from attention_engine.db.models import (
    DeliverableAssignment,
    Project,
    ProjectActivity,
    ProjectAssignment,
    ProjectDeliverable,
)
from attention_engine.engine.models import (
    AttentionContext,
    AttentionItem,
    AttentionType,
    Audience,
    ItemStatus,
    Severity,
    SourceType,
    as_utc,
)


DELIVERABLE_LIMIT = 30
ACTIVITY_LIMIT = 30
ALIGNMENT_PROJECT_LIMIT = 50
PROJECT_DUE_SOON_DAYS = 7
ALIGNMENT_MIN_CONTRIBUTORS = 2
ALIGNMENT_MIN_ACTIVITY = 2

ACTIVE_PROJECT_STATUSES = ("planning", "in_progress", "blocked")
ALIGNMENT_PROJECT_STATUSES = ("planning", "in_progress")


def _assigned_project_ids(user_id: str):
    return select(ProjectAssignment.project_id).where(ProjectAssignment.assigned_to == user_id)


def _project_status(project: Project) -> ItemStatus:
    return ItemStatus.BLOCKED if project.status == "blocked" else ItemStatus.IN_PROGRESS


class DeliverablesCollector(SqlCollector):
    """Incomplete deliverables assigned to the user or sitting in their projects."""

    name = "project_deliverables"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        assigned_deliverables = select(DeliverableAssignment.deliverable_id).where(
            DeliverableAssignment.user_id == user_id
        )
        deliverables = db.query(ProjectDeliverable).join(Project).options(
            selectinload(ProjectDeliverable.project),
            selectinload(ProjectDeliverable.assignments),
        ).filter(
            ProjectDeliverable.completed.is_(False),
            or_(
                ProjectDeliverable.assigned_to == user_id,
                ProjectDeliverable.id.in_(assigned_deliverables),
                and_(
                    ProjectDeliverable.assigned_to.is_(None),
                    ProjectDeliverable.project_id.in_(_assigned_project_ids(user_id))
                ),
                Project.created_by == user_id,
            )
        ).order_by(ProjectDeliverable.updated_at.desc(), ProjectDeliverable.id).limit(DELIVERABLE_LIMIT).all()

        items = []
        for d in deliverables:
            project = d.project
            is_overdue = is_past(d.due_date, now)
            severity = Severity.HIGH if is_overdue else severity_from_priority(project.priority)

            items.append(AttentionItem(
                source_type=SourceType.PROJECT_DELIVERABLE,
                source_id=d.id,
                source_url=f"/project/{d.project_id}",
                attention_type=AttentionType.ACTION_REQUIRED,
                reason_code="deliverable_pending",
                reason_text=(
                    "This deliverable is overdue and needs completion"
                    if is_overdue else
                    "You have a pending deliverable to complete"
                ),
                title=d.title,
                subtitle=project.title,
                preview=preview(d.description),
                tags=compact([project.status, project.priority]),
                icon_key="ListTodo",
                audience=Audience.PERSONAL,
                primary_owner_user_id=d.assigned_to or user_id,
                participant_user_ids=compact([d.assigned_to] + [a.user_id for a in d.assignments]),
                created_at=d.created_at,
                updated_at=d.updated_at,
                last_activity_at=d.updated_at,
                due_at=d.due_date,
                status=ItemStatus.OPEN,
                next_action="Complete this deliverable",
                severity=severity,
                context=AttentionContext(project_id=d.project_id),
            ))

        return items


class ProjectsCollector(SqlCollector):
    """Active projects the user created or is assigned to that need a push."""

    name = "projects"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        projects = db.query(Project).options(
            selectinload(Project.assignments)
        ).filter(
            Project.status.in_(ACTIVE_PROJECT_STATUSES),
            or_(
                Project.created_by == user_id,
                Project.id.in_(_assigned_project_ids(user_id))
            )
        ).order_by(Project.id).all()

        items = []
        for p in projects:
            due_date = as_utc(p.due_date)
            is_blocked = p.status == "blocked"
            is_overdue = is_past(due_date, now)
            is_due_soon = due_date is not None and due_date - now <= timedelta(days=PROJECT_DUE_SOON_DAYS)

            if not (is_blocked or is_overdue or is_due_soon):
                continue

            if is_blocked:
                reason_code = "project_blocked"
                reason_text = f"Project is blocked: {p.blocked_reason or 'needs attention'}"
            elif is_overdue:
                reason_code = "project_overdue"
                reason_text = "Project is overdue"
            else:
                reason_code = "project_due_soon"
                reason_text = "Project is due soon"

            severity = Severity.HIGH if (is_blocked or is_overdue) else severity_from_priority(p.priority)

            items.append(AttentionItem(
                source_type=SourceType.PROJECT,
                source_id=p.id,
                source_url=f"/project/{p.id}",
                attention_type=AttentionType.ACTION_REQUIRED,
                reason_code=reason_code,
                reason_text=reason_text,
                title=p.title,
                subtitle=f"{p.context_type} project" if p.context_type else None,
                preview=preview(p.description),
                tags=compact([p.status, p.priority]),
                icon_key="FolderKanban",
                audience=Audience.PERSONAL,
                primary_owner_user_id=p.created_by,
                participant_user_ids=compact(a.assigned_to for a in p.assignments),
                created_by_user_id=p.created_by,
                created_at=p.created_at,
                updated_at=p.updated_at,
                last_activity_at=p.updated_at,
                due_at=due_date,
                status=_project_status(p),
                blocker_reason=p.blocked_reason,
                next_action="Resolve blocker" if is_blocked else "Review project progress",
                severity=severity,
                context=AttentionContext(project_id=p.id),
            ))

        return items


ACTIVITY_MESSAGES = {
    "project_created": "{actor} created this project",
    "project_updated": "{actor} updated the project",
    "status_changed": "{actor} changed status to {value}",
    "priority_changed": "{actor} changed priority to {value}",
    "due_date_changed": "{actor} updated the due date",
    "assignment_added": "{actor} added a team member",
    "deliverable_added": "{actor} added a deliverable",
    "deliverable_completed": "{actor} completed a deliverable",
    "comment_added": "{actor} added a comment",
}


def describe_activity(activity_type: str, actor: str, value: Optional[str] = None) -> str:
    template = ACTIVITY_MESSAGES.get(activity_type, "{actor} made changes")
    return template.format(actor=actor, value=value or "")


class ProjectActivityCollector(SqlCollector):
    """Recent changes by teammates on projects the user created or is assigned to."""

    name = "project_activity"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        activities = db.query(ProjectActivity).options(
            selectinload(ProjectActivity.project).selectinload(Project.assignments),
            selectinload(ProjectActivity.actor),
        ).filter(
            ProjectActivity.created_at >= window_start,
            ProjectActivity.actor_id != user_id,
        ).order_by(ProjectActivity.created_at.desc(), ProjectActivity.id).limit(ACTIVITY_LIMIT).all()

        items = []
        for a in activities:
            project = a.project
            is_creator = project.created_by == user_id
            is_assigned = any(pa.assigned_to == user_id for pa in project.assignments)
            if not (is_creator or is_assigned):
                continue

            actor_name = a.actor.display_name if a.actor else "Someone"

            items.append(AttentionItem(
                source_type=SourceType.PROJECT,
                source_id=a.project_id,
                source_url=f"/project/{a.project_id}",
                attention_type=AttentionType.INFORMATIONAL,
                reason_code=a.activity_type,
                reason_text=describe_activity(a.activity_type, actor_name, a.new_value),
                title=project.title or "Project Update",
                subtitle=a.activity_type.replace("_", " "),
                tags=[a.activity_type],
                icon_key="Activity",
                audience=Audience.SHARED,
                primary_owner_user_id=project.created_by,
                created_by_user_id=a.actor_id,
                last_actor_user_id=a.actor_id,
                created_at=a.created_at,
                updated_at=a.created_at,
                last_activity_at=a.created_at,
                status=ItemStatus.RESOLVED,
                severity=Severity.LOW,
                context=AttentionContext(project_id=a.project_id),
            ))

        return items


class AlignmentCollector(SqlCollector):
    """Projects with several contributors and a burst of recent activity."""

    name = "alignment"

    def query(self, db: Session, user_id: str, window_start: datetime, now: datetime) -> List[AttentionItem]:
        projects = db.query(Project).options(
            selectinload(Project.assignments),
            selectinload(Project.activity),
        ).filter(
            Project.status.in_(ALIGNMENT_PROJECT_STATUSES)
        ).order_by(Project.updated_at.desc(), Project.id).limit(ALIGNMENT_PROJECT_LIMIT).all()

        items = []
        for p in projects:
            contributors = list(dict.fromkeys(
                compact([p.created_by] + [a.assigned_to for a in p.assignments])
            ))
            if len(contributors) < ALIGNMENT_MIN_CONTRIBUTORS or user_id not in contributors:
                continue

            recent_activity = sum(
                1 for a in p.activity if as_utc(a.created_at) >= window_start
            )
            if recent_activity < ALIGNMENT_MIN_ACTIVITY:
                continue

            items.append(AttentionItem(
                source_type=SourceType.PROJECT,
                source_id=p.id,
                source_url=f"/project/{p.id}",
                attention_type=AttentionType.ALIGNMENT,
                reason_code="high_activity",
                reason_text=f"{recent_activity} updates from {len(contributors)} team members",
                title=p.title,
                subtitle=f"{len(contributors)} contributors",
                preview=preview(p.description),
                tags=compact([p.status, p.priority, f"{recent_activity} updates"]),
                icon_key="Users",
                audience=Audience.TEAM,
                primary_owner_user_id=p.created_by,
                participant_user_ids=contributors,
                created_by_user_id=p.created_by,
                created_at=p.created_at,
                updated_at=p.updated_at,
                last_activity_at=p.updated_at,
                due_at=p.due_date,
                status=_project_status(p),
                severity=severity_from_priority(p.priority),
                context=AttentionContext(project_id=p.id),
            ))

        return items
