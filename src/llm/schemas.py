from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator


class ExtractedTaskFields(BaseModel):
    """Shape the extraction service is asked to return.

    Every field is optional: a missing or unusable value is reconciled by
    the transcript extractor rather than failing the whole response.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    dueDate: Optional[str] = None

    @field_validator("title", "description", "priority", "dueDate", mode="before")
    @classmethod
    def unusable_to_none(cls, v):
        # Non-string and blank values count as not provided.
        if not isinstance(v, str):
            return None
        v2 = v.strip()
        if not v2 or v2.lower() == "null":
            return None
        return v2
