import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _parse_ollama_base_url():
    """Build Ollama base URL, handling OLLAMA_HOST with or without port/scheme.

    Returns (None, port, None) when OLLAMA_HOST is unset, which keeps text
    generation in demo mode.
    """
    raw_host = os.getenv("OLLAMA_HOST", "")
    port = os.getenv("OLLAMA_PORT", "11434")

    if not raw_host:
        return None, int(port), None

    # Strip scheme if present (e.g. "http://192.168.1.14:11434")
    if "://" in raw_host:
        raw_host = raw_host.split("://", 1)[1]

    # Strip port if already included in host (e.g. "192.168.1.14:11434")
    if ":" in raw_host:
        host = raw_host.rsplit(":", 1)[0]
    else:
        host = raw_host

    return host, int(port), f"http://{host}:{port}"


class Config:
    # Flask
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"
    HOST = os.getenv("FLASK_HOST", "0.0.0.0")
    PORT = int(os.getenv("FLASK_PORT", "8080"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Ollama (text generation)
    OLLAMA_HOST, OLLAMA_PORT, OLLAMA_BASE_URL = _parse_ollama_base_url()
    OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gemma3:12b")
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    LLM_TOP_P = float(os.getenv("LLM_TOP_P", "0.8"))
    LLM_TOP_K = int(os.getenv("LLM_TOP_K", "40"))
    LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1000"))

    # Whisper-compatible speech-to-text
    WHISPER_BASE_URL = os.getenv("WHISPER_BASE_URL", "").rstrip("/") or None
    WHISPER_MODEL = os.getenv("WHISPER_MODEL", "whisper-1")
    SPEECH_LANGUAGE = os.getenv("SPEECH_LANGUAGE", "ja")

    # Upper bound for every outbound provider request, in seconds
    PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "30"))

    # Audio uploads
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "/tmp/uploads")
    DEMO_MIN_AUDIO_KB = float(os.getenv("DEMO_MIN_AUDIO_KB", "1"))
    DEMO_MAX_AUDIO_KB = float(os.getenv("DEMO_MAX_AUDIO_KB", "500"))

    # Session eviction
    SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "86400"))
    SESSION_SWEEP_INTERVAL = int(os.getenv("SESSION_SWEEP_INTERVAL", "600"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
