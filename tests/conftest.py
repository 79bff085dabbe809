import threading
import time
from datetime import datetime, timedelta

import pytest
import requests

import app as app_module
from config import Config
from services.diary_service import DiaryService
from services.session_store import SessionStore


class FakeClock:
    def __init__(self, start=datetime(2026, 10, 17, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeGenerator:
    def __init__(self, replies=None, error=None, delay=0):
        self.replies = list(replies or [])
        self.error = error
        self.delay = delay
        self.instructions = []
        self._lock = threading.Lock()

    def generate(self, instruction):
        with self._lock:
            self.instructions.append(instruction)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "それで、どうなりましたか？"


class FakeTranscriber:
    def __init__(self, result=("今日は楽しかった", 0.92), error=None):
        self.result = result
        self.error = error
        self.paths = []

    def transcribe(self, path):
        self.paths.append(path)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return SessionStore(ttl_seconds=3600)


@pytest.fixture
def make_service(store, clock):
    def _make(generator=None, transcriber=None):
        return DiaryService(store, generator, transcriber, clock=clock)
    return _make


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def failing_generator():
    return FakeGenerator(error=requests.ConnectionError("ollama unreachable"))


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def failing_transcriber():
    return FakeTranscriber(error=requests.Timeout("speech server timed out"))


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(Config, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def use_service(monkeypatch, make_service):
    """Install a DiaryService built from fakes behind the Flask routes."""
    def _use(generator=None, transcriber=None):
        service = make_service(generator, transcriber)
        monkeypatch.setattr(app_module, "diary", service)
        return service
    return _use


@pytest.fixture
def client(use_service, upload_dir):
    use_service()
    return app_module.app.test_client()


@pytest.fixture
def make_generator():
    return FakeGenerator


@pytest.fixture
def make_transcriber():
    return FakeTranscriber
