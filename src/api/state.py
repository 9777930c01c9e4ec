from typing import Optional

from llm.providers.base import LLMProvider
from storage.task_store import TaskStore

# Global instances initialized at startup, read-only afterwards
task_store: Optional[TaskStore] = None
llm_provider: Optional[LLMProvider] = None
