import json
from datetime import date

import pytest

from extraction.task_extractor import build_prompt
from llm.llm_client import LLMClient, extract_json_object, get_provider
from llm.providers.mock_provider import MockProvider
from taskboard import config


def test_plain_json():
    assert extract_json_object('{"title": "Review Code"}') == {"title": "Review Code"}


def test_markdown_fence_is_stripped():
    text = '```json\n{"title": "Review Code", "priority": "High"}\n```'
    assert extract_json_object(text) == {"title": "Review Code", "priority": "High"}


def test_extra_text_around_json():
    text = 'Sure! Here is the result: {"title": "Call the bank"} Thanks.'
    assert extract_json_object(text) == {"title": "Call the bank"}


@pytest.mark.parametrize("text", ["INVALID OUTPUT", "[1, 2, 3]", ""])
def test_unusable_output_raises(text):
    with pytest.raises(ValueError):
        extract_json_object(text)


def test_client_passes_prompt_to_provider(fake_provider_factory):
    provider = fake_provider_factory('{"title": "Send invoice"}')
    client = LLMClient(provider=provider)
    assert client.complete_json("Send the invoice") == {"title": "Send invoice"}
    assert provider.prompts == ["Send the invoice"]


def test_provider_factory():
    assert isinstance(get_provider("mock"), MockProvider)
    with pytest.raises(ValueError):
        get_provider("carrier-pigeon")


def test_gemini_requires_api_key(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")
    with pytest.raises(RuntimeError):
        get_provider("gemini")


def test_openai_requires_api_key(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    with pytest.raises(RuntimeError):
        get_provider("openai")


def test_mock_provider_reads_transcript_from_prompt():
    transcript = "High priority: fix the login bug on the staging server"
    out = MockProvider().generate(system="", user=build_prompt(transcript, date(2026, 10, 18)))
    data = json.loads(out)
    assert data["priority"] == "High"
    assert data["description"] == transcript
    assert data["dueDate"] is None


def test_gemini_settings_come_from_config(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(config, "GEMINI_MODEL", "gemini-test")
    provider = get_provider("gemini")
    assert provider.api_key == "test-key"
    assert provider.model == "gemini-test"
