"""Speech-to-text against a Whisper-compatible HTTP server
(OpenAI's /v1/audio/transcriptions shape, e.g. faster-whisper-server)."""

import logging
import math
import os

import requests
from config import Config

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_LENGTH = 2


class TranscriptionError(RuntimeError):
    pass


def _confidence(result):
    """exp(avg_logprob) of the first segment, 0 when the server omits it."""
    segments = result.get("segments") or []
    if not segments:
        return 0
    avg_logprob = segments[0].get("avg_logprob")
    if avg_logprob is None:
        return 0
    return round(math.exp(avg_logprob), 4)


class WhisperTranscriber:
    def __init__(self, base_url=None, model=None, language=None):
        self.base_url = base_url or Config.WHISPER_BASE_URL
        self.model = model or Config.WHISPER_MODEL
        self.language = language or Config.SPEECH_LANGUAGE

    def transcribe(self, path):
        """Transcribe the audio file at path. Returns (text, confidence)."""
        with open(path, "rb") as f:
            resp = requests.post(
                f"{self.base_url}/v1/audio/transcriptions",
                files={"file": (os.path.basename(path), f, "audio/webm")},
                data={
                    "model": self.model,
                    "language": self.language,
                    "response_format": "verbose_json",
                },
                timeout=Config.PROVIDER_TIMEOUT,
            )
        resp.raise_for_status()
        result = resp.json()

        text = (result.get("text") or "").strip()
        if len(text) < MIN_TRANSCRIPT_LENGTH:
            raise TranscriptionError("音声認識結果が空です")
        return text, _confidence(result)

    def check(self):
        """Connection test: list models, raises on any failure."""
        logger.info("Testing speech server at %s", self.base_url)
        resp = requests.get(f"{self.base_url}/v1/models", timeout=Config.PROVIDER_TIMEOUT)
        resp.raise_for_status()
