import asyncio
import logging
from datetime import date
from typing import Optional

from api.metrics import TASKS_CREATED_TOTAL, TRANSCRIPT_EXTRACTIONS_TOTAL
from extraction.task_extractor import TranscriptExtractor
from storage.task_store import TaskStore
from taskboard import errors
from taskboard.models import DEFAULT_STATUS, ParsedTranscript, Task
from taskboard.query import PageRequest, board_page, build_query, list_page
from taskboard.validation import require_task_id, validate_new_task, validate_task_update

logger = logging.getLogger(__name__)


class TaskService:
    """Central orchestration of the task API: validation, duplicates, storage, extraction."""

    def __init__(self, store: TaskStore, extractor: Optional[TranscriptExtractor] = None):
        self.store = store
        self.extractor = extractor or TranscriptExtractor()

    async def _ensure_unique(self, title: str, description: str, exclude_id: Optional[str] = None) -> None:
        if await self.store.find_duplicate(title, description, exclude_id=exclude_id):
            raise errors.DuplicateTask()

    async def create_task(self, payload: dict, today: Optional[date] = None, source: str = "manual") -> Task:
        fields = validate_new_task(payload, today=today)
        await self._ensure_unique(fields["title"], fields["description"])

        task = await self.store.insert(fields)
        TASKS_CREATED_TOTAL.labels(source=source).inc()
        logger.info(f"Created task {task.id} ({source}): {task.title[:50]}")
        return task

    async def get_task(self, task_id: Optional[str]) -> Task:
        task_id = require_task_id(task_id)
        task = await self.store.get(task_id)
        if task is None:
            raise errors.NotFound()
        return task

    async def update_task(self, task_id: Optional[str], changes: dict, today: Optional[date] = None) -> Task:
        current = await self.get_task(task_id)
        updates = validate_task_update(current.model_dump(), changes, today=today)

        if "title" in updates or "description" in updates:
            await self._ensure_unique(
                updates.get("title", current.title),
                updates.get("description", current.description),
                exclude_id=current.id,
            )

        task = await self.store.update(current.id, updates)
        if task is None:
            raise errors.NotFound()
        logger.info(f"Updated task {task.id}: {sorted(updates)}")
        return task

    async def delete_task(self, task_id: Optional[str]) -> None:
        task_id = require_task_id(task_id)
        if not await self.store.delete(task_id):
            raise errors.NotFound()
        logger.info(f"Deleted task {task_id}")

    async def list_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        due_date: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        query = build_query(status=status, priority=priority, search=search, due_date=due_date)
        return await list_page(self.store, query, PageRequest.of(page, limit))

    async def board(
        self,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        due_date: Optional[str] = None,
        page: int = 1,
        limit: int = 5,
    ) -> dict:
        query = build_query(priority=priority, search=search, due_date=due_date)
        return await board_page(self.store, query, PageRequest.of(page, limit))

    async def parse_transcript(self, transcript: Optional[str], today: Optional[date] = None) -> ParsedTranscript:
        # The extraction call blocks on HTTP, keep it off the event loop.
        parsed = await asyncio.to_thread(self.extractor.extract, transcript, today)
        TRANSCRIPT_EXTRACTIONS_TOTAL.labels(source=parsed.source).inc()
        return parsed

    async def create_from_transcript(self, transcript: Optional[str], today: Optional[date] = None) -> Task:
        parsed = await self.parse_transcript(transcript, today=today)
        payload = {
            **parsed.model_dump(),
            "status": DEFAULT_STATUS,
            "transcript": transcript.strip(),
        }
        return await self.create_task(payload, today=today, source="voice")
