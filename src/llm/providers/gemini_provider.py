from __future__ import annotations
import httpx

from taskboard import config
from .base import LLMProvider


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self):
        self.api_key = config.GEMINI_API_KEY
        self.model = config.GEMINI_MODEL
        self.base_url = config.GEMINI_BASE_URL

        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is missing")

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
            },
        }

        with httpx.Client(timeout=config.LLM_TIMEOUT_S) as client:
            r = client.post(url, headers=headers, json=payload)
            r.raise_for_status()
            data = r.json()

        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
