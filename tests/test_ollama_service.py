import json

import pytest

from config import Config
from services import ollama_service
from services.ollama_service import GenerationError, OllamaGenerator


class FakeResponse:
    def __init__(self, lines):
        self._lines = [json.dumps(line).encode() for line in lines]

    def raise_for_status(self):
        pass

    def iter_lines(self):
        return iter(self._lines)


@pytest.fixture
def calls(monkeypatch):
    monkeypatch.setattr(Config, "OLLAMA_BASE_URL", "http://ollama:11434")
    recorded = []

    def install(lines):
        def fake_post(url, **kwargs):
            recorded.append((url, kwargs))
            return FakeResponse(lines)
        monkeypatch.setattr(ollama_service.requests, "post", fake_post)
        return recorded

    return install


def test_generate_joins_streamed_chunks(calls):
    recorded = calls([
        {"message": {"content": "どんな"}},
        {"message": {"content": "一日でしたか？ "}},
        {"done": True},
    ])

    assert OllamaGenerator().generate("質問して") == "どんな一日でしたか？"

    url, kwargs = recorded[0]
    assert url == "http://ollama:11434/api/chat"
    assert kwargs["timeout"] == Config.PROVIDER_TIMEOUT
    assert kwargs["json"]["messages"] == [{"role": "user", "content": "質問して"}]
    assert kwargs["json"]["options"]["temperature"] == Config.LLM_TEMPERATURE


def test_stops_at_done(calls):
    calls([{"message": {"content": "a"}}, {"done": True}, {"message": {"content": "b"}}])
    assert ollama_service.chat([]) == "a"


def test_system_prompt_goes_first(calls):
    recorded = calls([{"done": True}])
    ollama_service.chat([{"role": "user", "content": "x"}], system_prompt="sys")
    messages = recorded[0][1]["json"]["messages"]
    assert messages[0] == {"role": "system", "content": "sys"}


def test_error_line_raises(calls):
    calls([{"error": "model not found"}])
    with pytest.raises(GenerationError):
        OllamaGenerator().generate("x")


def test_empty_response_raises(calls):
    calls([{"message": {"content": "  "}}, {"done": True}])
    with pytest.raises(GenerationError):
        OllamaGenerator().generate("x")
