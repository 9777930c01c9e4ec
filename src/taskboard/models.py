from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TaskStatus = Literal["To Do", "In Progress", "Done"]
TaskPriority = Literal["Low", "Medium", "High", "Critical"]

STATUSES: tuple[str, ...] = ("To Do", "In Progress", "Done")
PRIORITIES: tuple[str, ...] = ("Low", "Medium", "High", "Critical")

DEFAULT_STATUS = "To Do"
DEFAULT_PRIORITY = "Medium"

TITLE_BOUNDS = (10, 250)
DESCRIPTION_BOUNDS = (10, 500)
TRANSCRIPT_BOUNDS = (10, 1000)


class Task(BaseModel):
    """A stored task as returned by the task stores."""

    id: str
    title: str = Field(..., min_length=TITLE_BOUNDS[0], max_length=TITLE_BOUNDS[1])
    description: str = Field(
        ..., min_length=DESCRIPTION_BOUNDS[0], max_length=DESCRIPTION_BOUNDS[1]
    )
    status: TaskStatus = DEFAULT_STATUS
    priority: TaskPriority
    dueDate: Optional[str] = None
    transcript: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime


class TaskCreateIn(BaseModel):
    # Loose on purpose: field rules live in taskboard.validation so the API
    # can report the first violation with its own message.
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    dueDate: Optional[str] = None
    transcript: Optional[str] = None


class TaskUpdateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    dueDate: Optional[str] = None
    transcript: Optional[str] = None

    def changes(self) -> dict:
        """Fields the client actually sent, minus the id."""
        data = self.model_dump(exclude_unset=True, exclude={"id"})
        return {k: v for k, v in data.items() if v is not None}


class TranscriptIn(BaseModel):
    transcript: Optional[str] = None


class ParsedTranscript(BaseModel):
    """Structured guess derived from a voice transcript."""

    title: str
    description: str
    priority: TaskPriority = DEFAULT_PRIORITY
    dueDate: Optional[str] = None

    # "llm" when the extraction service answered, "fallback" otherwise.
    source: Literal["llm", "fallback"] = Field(default="llm", exclude=True)
