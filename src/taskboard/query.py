"""Filters and pagination for the task list and the per-status board.

The builder is storage-agnostic: stores translate a ``TaskQuery`` into
their own query language and only have to answer ``count`` and ``find``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Optional

from taskboard import errors
from taskboard.models import PRIORITIES, STATUSES

if TYPE_CHECKING:
    from storage.task_store import TaskStore

MAX_LIMIT = 100
LIST_DEFAULT_LIMIT = 20
BOARD_DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class TaskQuery:
    status: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None
    due_date: Optional[str] = None

    def with_status(self, status: Optional[str]) -> "TaskQuery":
        return replace(self, status=status)

    def matches(self, task: dict[str, Any]) -> bool:
        """In-process evaluation, mirrors the SQL rendering in PostgresTaskStore."""
        if self.status and task.get("status") != self.status:
            return False
        if self.priority and task.get("priority") != self.priority:
            return False
        if self.due_date and task.get("dueDate") != self.due_date:
            return False
        if self.search:
            needle = self.search.lower()
            title = (task.get("title") or "").lower()
            description = (task.get("description") or "").lower()
            if needle not in title and needle not in description:
                return False
        return True


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def of(cls, page: int, limit: int) -> "PageRequest":
        if page < 1 or limit < 1 or limit > MAX_LIMIT:
            raise errors.InvalidPagination("Invalid pagination parameters")
        return cls(page=page, limit=limit)


def build_query(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
    due_date: Optional[str] = None,
) -> TaskQuery:
    """Validate raw filter parameters. Empty strings count as absent."""
    status = status or None
    priority = priority or None

    if status and status not in STATUSES:
        raise errors.ValidationError("Invalid status value")
    if priority and priority not in PRIORITIES:
        raise errors.ValidationError("Invalid priority value")

    return TaskQuery(
        status=status,
        priority=priority,
        search=search or None,
        due_date=due_date or None,
    )


def _page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)


async def list_page(store: "TaskStore", query: TaskQuery, page: PageRequest) -> dict:
    total = await store.count(query)
    tasks = await store.find(query, skip=page.skip, limit=page.limit)
    total_pages = _page_count(total, page.limit)

    return {
        "data": [t.model_dump(mode="json") for t in tasks],
        "pagination": {
            "currentPage": page.page,
            "totalPages": total_pages,
            "totalItems": total,
            "hasNext": page.page < total_pages,
            "hasPrev": page.page > 1,
        },
    }


async def board_page(store: "TaskStore", query: TaskQuery, page: PageRequest) -> dict:
    """One independently paginated slice per status column.

    Every status gets its own count and its own skip/limit window over the
    shared page number. hasNext is true when any column has more rows.
    """
    base = query.with_status(None)
    tasks: list = []
    status_counts: dict[str, int] = {}
    has_next = False

    for status in STATUSES:
        column = base.with_status(status)
        count = await store.count(column)
        status_counts[status] = count
        if count > page.page * page.limit:
            has_next = True
        tasks.extend(await store.find(column, skip=page.skip, limit=page.limit))

    return {
        "data": [t.model_dump(mode="json") for t in tasks],
        "pagination": {
            "currentPage": page.page,
            "totalPages": max(_page_count(c, page.limit) for c in status_counts.values()),
            "totalItems": sum(status_counts.values()),
            "hasNext": has_next,
            "hasPrev": page.page > 1,
            "statusCounts": status_counts,
        },
    }
