import json
import logging

import requests
from config import Config

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    pass


def _options():
    return {
        "temperature": Config.LLM_TEMPERATURE,
        "top_p": Config.LLM_TOP_P,
        "top_k": Config.LLM_TOP_K,
        "num_predict": Config.LLM_MAX_TOKENS,
    }


def stream_chat(messages, system_prompt=None):
    """Generator that yields text chunks from Ollama's streaming response."""
    all_messages = list(messages)
    if system_prompt:
        all_messages = [{"role": "system", "content": system_prompt}] + all_messages

    payload = {
        "model": Config.OLLAMA_MODEL,
        "messages": all_messages,
        "stream": True,
        "options": _options(),
    }

    response = requests.post(
        f"{Config.OLLAMA_BASE_URL}/api/chat",
        json=payload,
        stream=True,
        timeout=Config.PROVIDER_TIMEOUT,
    )
    response.raise_for_status()

    for line in response.iter_lines():
        if line:
            data = json.loads(line)
            if data.get("error"):
                raise GenerationError(data["error"])
            content = data.get("message", {}).get("content", "")
            if content:
                yield content
            if data.get("done", False):
                break


def chat(messages, system_prompt=None):
    """Non-streaming variant. Returns the complete response string."""
    return "".join(stream_chat(messages, system_prompt))


class OllamaGenerator:
    """Text generator backed by a local or remote Ollama server."""

    def generate(self, instruction):
        text = chat([{"role": "user", "content": instruction}]).strip()
        if not text:
            raise GenerationError("Ollama returned an empty response")
        return text

    def check(self):
        """Connection test: one tiny request, raises on any failure."""
        logger.info("Testing Ollama connection at %s", Config.OLLAMA_BASE_URL)
        self.generate("テスト")
