"""
Mutation handlers for the overlay store.

Each handler validates its arguments and produces the partial overlay
update it writes. Writes are blind upserts keyed by (user_id, attention_id):
the referenced item does not need to be live.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from attention_engine.engine.errors import InvalidArgumentError, UnauthorizedError
from attention_engine.engine.models import (
    DismissReason,
    OverlayUpdate,
    ReadState,
    as_utc,
    utc_now,
)

MAX_DISMISS_NOTE_LENGTH = 1000

_timestamp_adapter = TypeAdapter(datetime)


def require_user(user_id: Any) -> str:
    """Resolved caller identity, or UnauthorizedError."""
    if not isinstance(user_id, str) or not user_id.strip():
        raise UnauthorizedError("Missing or invalid caller identity")
    return user_id.strip()


def require_attention_id(attention_id: Any) -> str:
    if not isinstance(attention_id, str) or not attention_id.strip():
        raise InvalidArgumentError("attention_id is required")
    return attention_id.strip()


def parse_timestamp(value: Union[str, datetime, None], field: str) -> datetime:
    """Parse an ISO-8601 string (or pass a datetime through) as aware UTC."""
    if value is None or value == "":
        raise InvalidArgumentError(f"{field} is required")
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = _timestamp_adapter.validate_python(value.strip())
        except ValidationError:
            raise InvalidArgumentError(f"{field} must be an ISO-8601 timestamp")
    else:
        raise InvalidArgumentError(f"{field} must be an ISO-8601 timestamp")
    try:
        return as_utc(parsed)
    except OverflowError:
        raise InvalidArgumentError(f"{field} is out of range")


def acknowledge_update(now: Optional[datetime] = None) -> OverlayUpdate:
    return OverlayUpdate(
        read_state=ReadState.ACKNOWLEDGED,
        last_viewed_at=now or utc_now(),
    )


def mark_read_update(now: Optional[datetime] = None) -> OverlayUpdate:
    # A no-op on read_state when already acknowledged; see merge_read_state
    return OverlayUpdate(
        read_state=ReadState.READ,
        last_viewed_at=now or utc_now(),
    )


def snooze_update(
    snoozed_until: Union[str, datetime, None],
    now: Optional[datetime] = None
) -> OverlayUpdate:
    """Snooze until a timestamp that must lie in the future."""
    now = now or utc_now()
    until = parse_timestamp(snoozed_until, "snoozed_until")
    if until <= now:
        raise InvalidArgumentError("snoozed_until must be in the future")
    return OverlayUpdate(snoozed_until=until)


def snooze_for_update(hours: Any, now: Optional[datetime] = None) -> OverlayUpdate:
    """Snooze for a number of hours from now."""
    if isinstance(hours, bool) or not isinstance(hours, (int, float)):
        raise InvalidArgumentError("hours must be a number")
    try:
        finite = math.isfinite(hours)
    except OverflowError:
        finite = False
    if not finite:
        raise InvalidArgumentError("hours must be a finite number")
    if hours <= 0:
        raise InvalidArgumentError("hours must be greater than 0")
    now = now or utc_now()
    try:
        until = now + timedelta(hours=hours)
    except (OverflowError, ValueError):
        raise InvalidArgumentError("hours is out of range")
    return snooze_update(until, now)


def dismiss_update(
    now: Optional[datetime] = None,
    reason: Optional[str] = None,
    note: Optional[str] = None
) -> OverlayUpdate:
    """Dismiss permanently, optionally recording why."""
    dismiss_reason = None
    if reason is not None:
        try:
            dismiss_reason = DismissReason(reason)
        except ValueError:
            allowed = ", ".join(r.value for r in DismissReason)
            raise InvalidArgumentError(f"reason must be one of: {allowed}")
    if note is not None:
        if dismiss_reason is None:
            raise InvalidArgumentError("note requires a reason")
        if len(note) > MAX_DISMISS_NOTE_LENGTH:
            raise InvalidArgumentError(
                f"note must be at most {MAX_DISMISS_NOTE_LENGTH} characters"
            )
    return OverlayUpdate(
        dismissed_at=now or utc_now(),
        dismiss_reason=dismiss_reason,
        dismiss_note=note or None,
    )
