from fastapi import Depends

from api import state
from api.backend import TaskService
from extraction.task_extractor import TranscriptExtractor
from llm.llm_client import LLMClient
from storage.task_store import TaskStore
from taskboard import errors


def get_task_store() -> TaskStore:
    if state.task_store is None:
        raise errors.InternalError("Task store not initialized")
    return state.task_store


def get_extractor() -> TranscriptExtractor:
    return TranscriptExtractor(llm_client=LLMClient(provider=state.llm_provider))


def get_task_service(
    store: TaskStore = Depends(get_task_store),
    extractor: TranscriptExtractor = Depends(get_extractor),
) -> TaskService:
    return TaskService(store, extractor)
