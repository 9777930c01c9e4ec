from __future__ import annotations
import json
import re
from llm.providers.base import LLMProvider

_TRANSCRIPT_RE = re.compile(r'Task: "(.*?)"\n\nExtract:', re.DOTALL)


class MockProvider(LLMProvider):
    """Offline provider for local development (LLM_PROVIDER=mock)."""

    name = "mock"

    def generate(self, *, system: str, user: str) -> str:
        """
        Echo the transcript embedded in the prompt back as a structured guess.
        """
        match = _TRANSCRIPT_RE.search(user)
        if not match:
            return "{}"

        transcript = match.group(1).strip()
        lower = transcript.lower()
        priority = "Medium"
        for word in ("critical", "high", "low"):
            if word in lower:
                priority = word.capitalize()
                break

        return json.dumps({
            "title": transcript[:60].strip(),
            "description": transcript,
            "priority": priority,
            "dueDate": None,
        })
