import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_task_store
from api.metrics import TASKS_STORED
from storage.task_store import TaskStore
from taskboard import config
from taskboard.query import TaskQuery

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(store: TaskStore = Depends(get_task_store)) -> dict:
    """Health check endpoint for container orchestration."""
    storage = await store.health()
    return {
        "status": "healthy" if storage.get("status") == "healthy" else "degraded",
        "store": config.TASK_STORE,
        "storage": storage,
        "llm_provider": config.LLM_PROVIDER,
    }


@router.get("/metrics")
async def metrics(store: TaskStore = Depends(get_task_store)) -> Response:
    """
    Prometheus scrape endpoint.
    """
    try:
        TASKS_STORED.set(await store.count(TaskQuery()))
    except Exception as e:
        logger.warning(f"Could not refresh stored task gauge: {e}")

    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
