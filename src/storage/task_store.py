"""
Task persistence.

TaskStore is the storage collaborator of the task service. PostgresTaskStore
runs on the shared asyncpg pool from storage.db; InMemoryTaskStore keeps
everything in process and backs local development and the test suite.
"""

from __future__ import annotations

import itertools
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import asyncpg

from storage import db
from taskboard import errors
from taskboard.models import Task
from taskboard.query import TaskQuery

logger = logging.getLogger(__name__)

# API field name -> column name
_COLUMNS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
    "transcript": "transcript",
}


class TaskStore(ABC):
    @abstractmethod
    async def insert(self, fields: dict[str, Any]) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def get(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def update(self, task_id: str, fields: dict[str, Any]) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def find_duplicate(
        self, title: str, description: str, exclude_id: Optional[str] = None
    ) -> Optional[Task]:
        """Case-insensitive exact match on both title and description."""
        raise NotImplementedError

    @abstractmethod
    async def count(self, query: TaskQuery) -> int:
        raise NotImplementedError

    @abstractmethod
    async def find(self, query: TaskQuery, skip: int = 0, limit: int = 20) -> list[Task]:
        """Matching tasks, newest first."""
        raise NotImplementedError

    async def health(self) -> dict:
        return {"status": "healthy"}


class InMemoryTaskStore(TaskStore):
    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._seq = itertools.count()

    def _ordered(self, query: TaskQuery) -> list[dict[str, Any]]:
        matching = [r for r in self._records.values() if query.matches(r)]
        return sorted(matching, key=lambda r: (r["createdAt"], r["_seq"]), reverse=True)

    def _duplicate_of(self, title: str, description: str, exclude_id: Optional[str]) -> Optional[dict]:
        title, description = title.lower(), description.lower()
        for record in self._records.values():
            if record["id"] == exclude_id:
                continue
            if record["title"].lower() == title and record["description"].lower() == description:
                return record
        return None

    @staticmethod
    def _to_task(record: dict[str, Any]) -> Task:
        return Task(**{k: v for k, v in record.items() if k != "_seq"})

    async def insert(self, fields: dict[str, Any]) -> Task:
        if self._duplicate_of(fields["title"], fields["description"], None):
            raise errors.DuplicateTask()

        now = datetime.now(timezone.utc)
        record = {
            "id": str(uuid.uuid4()),
            "status": "To Do",
            "dueDate": None,
            "transcript": None,
            **fields,
            "createdAt": now,
            "updatedAt": now,
            "_seq": next(self._seq),
        }
        self._records[record["id"]] = record
        return self._to_task(record)

    async def get(self, task_id: str) -> Optional[Task]:
        record = self._records.get(task_id)
        return self._to_task(record) if record else None

    async def update(self, task_id: str, fields: dict[str, Any]) -> Optional[Task]:
        record = self._records.get(task_id)
        if record is None:
            return None

        merged = {**record, **fields}
        if self._duplicate_of(merged["title"], merged["description"], task_id):
            raise errors.DuplicateTask()

        merged["updatedAt"] = datetime.now(timezone.utc)
        self._records[task_id] = merged
        return self._to_task(merged)

    async def delete(self, task_id: str) -> bool:
        return self._records.pop(task_id, None) is not None

    async def find_duplicate(
        self, title: str, description: str, exclude_id: Optional[str] = None
    ) -> Optional[Task]:
        record = self._duplicate_of(title, description, exclude_id)
        return self._to_task(record) if record else None

    async def count(self, query: TaskQuery) -> int:
        return sum(1 for r in self._records.values() if query.matches(r))

    async def find(self, query: TaskQuery, skip: int = 0, limit: int = 20) -> list[Task]:
        return [self._to_task(r) for r in self._ordered(query)[skip:skip + limit]]

    async def health(self) -> dict:
        return {"status": "healthy", "store": "in-memory", "tasks": len(self._records)}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _where(query: TaskQuery, args: list) -> str:
    """Render a TaskQuery as a parameterized WHERE clause, appending to ``args``."""
    clauses = []

    if query.status:
        args.append(query.status)
        clauses.append(f"status = ${len(args)}")
    if query.priority:
        args.append(query.priority)
        clauses.append(f"priority = ${len(args)}")
    if query.due_date:
        args.append(query.due_date)
        clauses.append(f"due_date = ${len(args)}")
    if query.search:
        args.append(f"%{_escape_like(query.search)}%")
        n = len(args)
        clauses.append(f"(title ILIKE ${n} OR description ILIKE ${n})")

    return " WHERE " + " AND ".join(clauses) if clauses else ""


def _from_record(record) -> Task:
    return Task(
        id=str(record["id"]),
        title=record["title"],
        description=record["description"],
        status=record["status"],
        priority=record["priority"],
        dueDate=record["due_date"],
        transcript=record["transcript"],
        createdAt=record["created_at"],
        updatedAt=record["updated_at"],
    )


class PostgresTaskStore(TaskStore):
    """Tasks in the ``tasks`` table (see schema.sql)."""

    async def insert(self, fields: dict[str, Any]) -> Task:
        columns = [_COLUMNS[k] for k in fields]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = f"""
            INSERT INTO tasks ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING *
        """
        try:
            record = await db.fetchrow(query, *fields.values())
        except asyncpg.UniqueViolationError:
            raise errors.DuplicateTask()

        logger.info(f"Inserted task {record['id']}")
        return _from_record(record)

    async def get(self, task_id: str) -> Optional[Task]:
        record = await db.fetchrow("SELECT * FROM tasks WHERE id = $1", uuid.UUID(task_id))
        return _from_record(record) if record else None

    async def update(self, task_id: str, fields: dict[str, Any]) -> Optional[Task]:
        if not fields:
            return await self.get(task_id)

        args: list = [uuid.UUID(task_id)]
        assignments = []
        for key, value in fields.items():
            args.append(value)
            assignments.append(f"{_COLUMNS[key]} = ${len(args)}")
        assignments.append("updated_at = NOW()")

        query = f"""
            UPDATE tasks
            SET {", ".join(assignments)}
            WHERE id = $1
            RETURNING *
        """
        try:
            record = await db.fetchrow(query, *args)
        except asyncpg.UniqueViolationError:
            raise errors.DuplicateTask()

        return _from_record(record) if record else None

    async def delete(self, task_id: str) -> bool:
        result = await db.execute("DELETE FROM tasks WHERE id = $1", uuid.UUID(task_id))
        # execute returns e.g. "DELETE 1"
        return result == "DELETE 1"

    async def find_duplicate(
        self, title: str, description: str, exclude_id: Optional[str] = None
    ) -> Optional[Task]:
        query = """
            SELECT * FROM tasks
            WHERE lower(title) = lower($1)
              AND lower(description) = lower($2)
              AND ($3::uuid IS NULL OR id <> $3::uuid)
            LIMIT 1
        """
        exclude = uuid.UUID(exclude_id) if exclude_id else None
        record = await db.fetchrow(query, title, description, exclude)
        return _from_record(record) if record else None

    async def count(self, query: TaskQuery) -> int:
        args: list = []
        return await db.fetchval(f"SELECT COUNT(*) FROM tasks{_where(query, args)}", *args)

    async def find(self, query: TaskQuery, skip: int = 0, limit: int = 20) -> list[Task]:
        args: list = []
        where = _where(query, args)
        args.extend([skip, limit])
        sql = f"""
            SELECT * FROM tasks{where}
            ORDER BY created_at DESC
            OFFSET ${len(args) - 1} LIMIT ${len(args)}
        """
        records = await db.fetch(sql, *args)
        return [_from_record(r) for r in records]

    async def health(self) -> dict:
        return await db.health_check()
