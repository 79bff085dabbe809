import atexit
import logging
import os
import tempfile
from contextlib import contextmanager

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import Config
from services.diary_service import DiaryService, InputError
from services.ollama_service import OllamaGenerator
from services.session_store import SessionStore
from services.speech_service import WhisperTranscriber

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_object(Config)

# Sessions live in memory only; idle ones are dropped by the sweeper
store = SessionStore(ttl_seconds=Config.SESSION_TTL_SECONDS)
diary = DiaryService(
    store,
    min_audio_kb=Config.DEMO_MIN_AUDIO_KB,
    max_audio_kb=Config.DEMO_MAX_AUDIO_KB,
)


def init_providers():
    """Connection-test each configured provider. Returns (generator, transcriber);
    a provider that is unset or fails its test is None (demo mode)."""
    generator = None
    if Config.OLLAMA_BASE_URL:
        candidate = OllamaGenerator()
        try:
            candidate.check()
            generator = candidate
        except Exception as e:
            logger.error("Ollama connection test failed (%s) - text generation in demo mode", e)
    else:
        logger.warning("OLLAMA_HOST not set - text generation in demo mode")

    transcriber = None
    if Config.WHISPER_BASE_URL:
        candidate = WhisperTranscriber()
        try:
            candidate.check()
            transcriber = candidate
        except Exception as e:
            logger.error("Speech server test failed (%s) - transcription in demo mode", e)
    else:
        logger.warning("WHISPER_BASE_URL not set - transcription in demo mode")

    return generator, transcriber


@contextmanager
def saved_upload(storage):
    """Save an uploaded file to UPLOAD_DIR and delete it on every exit path."""
    os.makedirs(Config.UPLOAD_DIR, exist_ok=True)
    fd, path = tempfile.mkstemp(dir=Config.UPLOAD_DIR, suffix=".webm")
    os.close(fd)
    try:
        storage.save(path)
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


def _clear_upload_dir():
    """Remove leftover uploads on shutdown."""
    if not os.path.isdir(Config.UPLOAD_DIR):
        return
    for name in os.listdir(Config.UPLOAD_DIR):
        try:
            os.remove(os.path.join(Config.UPLOAD_DIR, name))
        except OSError as e:
            logger.warning("Could not remove upload %s: %s", name, e)


def _json_body():
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@app.route("/health")
@app.route("/api/health")
def health():
    return jsonify(diary.health())


@app.route("/api/chat/start", methods=["POST"])
def start_chat():
    return jsonify(diary.start_session())


@app.route("/api/speech-to-text", methods=["POST"])
def speech_to_text():
    audio = request.files.get("audio")
    if audio is None:
        raise InputError("オーディオファイルが提供されていません")

    with saved_upload(audio) as path:
        return jsonify(diary.transcribe_audio(path))


@app.route("/api/chat/message", methods=["POST"])
def chat_message():
    body = _json_body()
    return jsonify(diary.post_message(body.get("sessionId"), body.get("message")))


@app.route("/api/generate-title", methods=["POST"])
def generate_title():
    return jsonify(diary.generate_title(_json_body().get("content")))


@app.route("/api/chat/summarize", methods=["POST"])
def summarize():
    return jsonify(diary.summarize_session(_json_body().get("sessionId")))


@app.route("/api/chat/sessions")
def list_sessions():
    return jsonify(diary.list_sessions())


@app.errorhandler(InputError)
def handle_input_error(e):
    return jsonify(e.to_dict()), e.status


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(e):
    return jsonify({"success": False, "error": "ファイルサイズが大きすぎます"}), 413


@app.errorhandler(HTTPException)
def handle_http_error(e):
    if e.code == 404:
        return jsonify({"error": "エンドポイントが見つかりません"}), 404
    return jsonify({"error": e.description}), e.code


@app.errorhandler(Exception)
def handle_unexpected(e):
    logger.exception("Unhandled server error")
    body = {"error": "内部サーバーエラーが発生しました"}
    if Config.DEBUG:
        body["details"] = str(e)
    return jsonify(body), 500


atexit.register(store.stop_sweeper)
atexit.register(_clear_upload_dir)


if __name__ == "__main__":
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    generator, transcriber = init_providers()
    diary = DiaryService(
        store,
        generator=generator,
        transcriber=transcriber,
        min_audio_kb=Config.DEMO_MIN_AUDIO_KB,
        max_audio_kb=Config.DEMO_MAX_AUDIO_KB,
    )
    store.start_sweeper(Config.SESSION_SWEEP_INTERVAL)
    logger.info(
        "Voice diary API on port %s (text generation: %s, speech: %s)",
        Config.PORT,
        "live" if generator else "demo",
        "live" if transcriber else "demo",
    )
    app.run(
        host=Config.HOST,
        port=Config.PORT,
        debug=Config.DEBUG,
        threaded=True,
    )
