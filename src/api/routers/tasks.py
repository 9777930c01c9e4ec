import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query

from api.backend import TaskService
from api.dependencies import get_task_service
from taskboard import errors
from taskboard.models import TaskCreateIn, TaskUpdateIn, TranscriptIn
from taskboard.query import BOARD_DEFAULT_LIMIT, LIST_DEFAULT_LIMIT

router = APIRouter(prefix="/api/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
    due_date: Optional[str] = Query(default=None, alias="dueDate"),
    page: int = 1,
    limit: int = LIST_DEFAULT_LIMIT,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """List tasks with optional filters, search and pagination."""
    result = await service.list_tasks(
        status=status,
        priority=priority,
        search=search,
        due_date=due_date,
        page=page,
        limit=limit,
    )
    return {"success": True, **result}


@router.get("/board")
async def board(
    priority: Optional[str] = None,
    search: Optional[str] = None,
    due_date: Optional[str] = Query(default=None, alias="dueDate"),
    page: int = 1,
    limit: int = BOARD_DEFAULT_LIMIT,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """Tasks grouped by status, each status column paginated on its own."""
    result = await service.board(
        priority=priority,
        search=search,
        due_date=due_date,
        page=page,
        limit=limit,
    )
    return {"success": True, **result}


@router.get("/view-task")
async def view_task(
    id: Optional[str] = None,
    service: TaskService = Depends(get_task_service),
) -> dict:
    task = await service.get_task(id)
    return {"success": True, "data": task.model_dump(mode="json")}


@router.post("/create-task")
async def create_task(
    payload: TaskCreateIn,
    service: TaskService = Depends(get_task_service),
) -> dict:
    task = await service.create_task(payload.model_dump())
    return {
        "success": True,
        "message": "Task created successfully",
        "task": task.model_dump(mode="json"),
    }


@router.put("/update-task")
async def update_task(
    payload: TaskUpdateIn,
    service: TaskService = Depends(get_task_service),
) -> dict:
    task = await service.update_task(payload.id, payload.changes())
    return {"success": True, "data": task.model_dump(mode="json")}


@router.delete("/delete-task")
async def delete_task(
    id: Optional[str] = None,
    service: TaskService = Depends(get_task_service),
) -> dict:
    await service.delete_task(id)
    return {"success": True, "message": "Task deleted successfully"}


@router.post("/parse-voice-data")
async def parse_voice_data(
    payload: TranscriptIn,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """Structured guess from a transcript, returned for review and not stored."""
    parsed = await service.parse_transcript(payload.transcript)
    return {"success": True, "data": parsed.model_dump(mode="json")}


@router.post("/parse-voice")
async def parse_voice(
    payload: TranscriptIn,
    service: TaskService = Depends(get_task_service),
) -> dict:
    """Extract fields from a transcript and store the task right away."""
    try:
        task = await service.create_from_transcript(payload.transcript)
    except (httpx.TransportError, OSError) as e:
        logger.error(f"Network failure while creating task from transcript: {e}")
        raise errors.ExternalServiceUnreachable() from e

    return {
        "success": True,
        "message": "Task created from voice input",
        "task": task.model_dump(mode="json"),
    }
