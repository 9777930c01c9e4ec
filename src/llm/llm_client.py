import json
import logging
import re
from typing import Any, Optional

from llm.providers.base import LLMProvider
from taskboard import config

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You turn spoken task descriptions into structured task data. "
    "Reply with a single JSON object and nothing else."
)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def get_provider(name: Optional[str] = None) -> LLMProvider:
    """Build the provider selected by LLM_PROVIDER."""
    name = (name or config.LLM_PROVIDER).lower()

    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider
        return GeminiProvider()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider
        return OpenAIProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()

    raise ValueError(f"Unknown LLM provider: {name}")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the JSON object in a model reply.

    Tolerates markdown fences and chatter around the object. Raises
    ValueError when no JSON object can be recovered.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("no JSON object in model output")
        data = json.loads(cleaned[start:end + 1])

    if not isinstance(data, dict):
        raise ValueError("model output is not a JSON object")
    return data


class LLMClient:
    """Thin wrapper over an LLMProvider.

    The provider is resolved lazily so a missing API key only matters when
    an extraction is actually attempted.
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = get_provider()
        return self._provider

    def complete(self, prompt: str, system: str = SYSTEM_PROMPT) -> str:
        return self.provider.generate(system=system, user=prompt)

    def complete_json(self, prompt: str, system: str = SYSTEM_PROMPT) -> dict[str, Any]:
        text = self.complete(prompt, system=system)
        logger.debug(f"LLM raw output: {text[:200]}")
        return extract_json_object(text)
