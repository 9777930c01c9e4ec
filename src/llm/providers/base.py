from __future__ import annotations
from abc import ABC, abstractmethod


class LLMProvider(ABC):
    name: str = "base"

    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Return the model output as TEXT. JSON extraction and validation
        happen in LLMClient and the transcript extractor.
        """
        raise NotImplementedError
