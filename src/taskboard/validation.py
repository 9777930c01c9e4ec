"""Field rules for task writes.

Checks run in field order (title, description, status, priority, dueDate,
transcript) and stop at the first violation, so a client always gets a
single message naming one field.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Optional

from taskboard import errors
from taskboard.dates import parse_due_date
from taskboard.models import (
    DEFAULT_STATUS,
    DESCRIPTION_BOUNDS,
    PRIORITIES,
    STATUSES,
    TITLE_BOUNDS,
    TRANSCRIPT_BOUNDS,
)

STATUS_MESSAGE = "Status must be To Do, In Progress, or Done"
PRIORITY_MESSAGE = "Priority must be Low, Medium, High, or Critical"


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def _check_length(label: str, value: Optional[str], bounds: tuple[int, int], required: bool) -> None:
    low, high = bounds
    if not value:
        if required:
            raise errors.ValidationError(f"{label} is required")
        return
    if len(value) < low:
        raise errors.ValidationError(f"{label} must be at least {low} characters")
    if len(value) > high:
        raise errors.ValidationError(f"{label} must not exceed {high} characters")


def _check_priority(priority: Optional[str]) -> None:
    if not priority:
        raise errors.ValidationError("Priority is required")
    if priority not in PRIORITIES:
        raise errors.ValidationError(PRIORITY_MESSAGE)


def is_valid_task_id(task_id: Optional[str]) -> bool:
    try:
        uuid.UUID(str(task_id))
    except (TypeError, ValueError):
        return False
    return True


def require_task_id(task_id: Optional[str]) -> str:
    if not task_id:
        raise errors.ValidationError("Task ID is required")
    if not is_valid_task_id(task_id):
        raise errors.ValidationError("Invalid task ID")
    return str(task_id)


def validate_new_task(payload: dict, today: Optional[date] = None) -> dict:
    """Normalize a create payload into the fields a store persists.

    An unknown or missing status falls back to "To Do" while priority must
    be valid. When no transcript is supplied the description (or title) is
    kept as the transcript.
    """
    title = _clean(payload.get("title"))
    description = _clean(payload.get("description"))
    status = _clean(payload.get("status"))
    priority = _clean(payload.get("priority"))
    due_date = _clean(payload.get("dueDate"))
    transcript = _clean(payload.get("transcript"))

    _check_length("Title", title, TITLE_BOUNDS, required=True)
    _check_length("Description", description, DESCRIPTION_BOUNDS, required=True)

    if status not in STATUSES:
        status = DEFAULT_STATUS

    _check_priority(priority)

    if not due_date:
        raise errors.ValidationError("Due date is required")
    due_date = parse_due_date(due_date, today=today)

    if not transcript:
        transcript = (description or title)[: TRANSCRIPT_BOUNDS[1]]
    _check_length("Transcript", transcript, TRANSCRIPT_BOUNDS, required=False)

    return {
        "title": title,
        "description": description,
        "status": status,
        "priority": priority,
        "dueDate": due_date,
        "transcript": transcript,
    }


def validate_task_update(current: dict, changes: dict, today: Optional[date] = None) -> dict:
    """Merge ``changes`` over ``current`` and validate the result.

    Returns only the fields that change. Unlike creation, an unknown status
    on update is rejected rather than defaulted.
    """
    updates: dict[str, Any] = {}
    for field in ("title", "description", "status", "priority", "transcript"):
        if field in changes:
            updates[field] = _clean(changes[field])
    if updates.get("transcript") == "":
        updates["transcript"] = None

    if "dueDate" in changes:
        due_date = _clean(changes["dueDate"])
        if due_date:
            updates["dueDate"] = parse_due_date(due_date, today=today)

    merged = {**current, **updates}

    _check_length("Title", merged.get("title"), TITLE_BOUNDS, required=True)
    _check_length("Description", merged.get("description"), DESCRIPTION_BOUNDS, required=True)
    if merged.get("status") not in STATUSES:
        raise errors.ValidationError(STATUS_MESSAGE)
    _check_priority(merged.get("priority"))
    if not merged.get("dueDate"):
        raise errors.ValidationError("Due date is required")
    _check_length("Transcript", merged.get("transcript"), TRANSCRIPT_BOUNDS, required=False)

    return updates
