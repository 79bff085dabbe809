"""Diary use cases: the interview turn, transcription, titles and the
final summary, each with its demo and error-recovery path.

Providers are optional collaborators. ``None`` means the capability is not
configured and runs in demo mode; a provider that raises is recovered with
the same deterministic output, tagged ``demo_fallback`` so operators can
tell masked failures from real demo traffic.
"""

import logging
import os
from datetime import datetime

from services.conversation_context import build_context
from services.diary_summarizer import (
    build_summary_prompt,
    demo_summary,
    duration_minutes,
    fallback_summary,
)
from services.emotion_classifier import classify
from services.fallback_responses import fallback_response
from services.interview_prompts import build_instruction, cycle_count, question_type
from services.title_service import (
    build_title_prompt,
    demo_title,
    fallback_title,
    sanitize_title,
)

logger = logging.getLogger(__name__)

MODE_LIVE = "live"
MODE_DEMO = "demo"
MODE_FALLBACK = "demo_fallback"

GREETING = "こんにちは！今日はどんなことがありましたか？音声またはテキストで自由にお話しください。"

SESSION_NOT_FOUND = "セッションが見つかりません"
MESSAGE_MISSING = "メッセージが提供されていません"
CONTENT_MISSING = "コンテンツが提供されていません"
AUDIO_TOO_SHORT = "音声が検出されませんでした。もう少し長く話してください。"
AUDIO_TOO_LONG = "音声が長すぎます。60秒以内で話してください。"
AUDIO_UNAVAILABLE = "デモモードでは音声認識は利用できません。"


class InputError(Exception):
    """A request the client has to fix; reported as-is, never retried."""

    def __init__(self, message, status=400, mode=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.mode = mode

    def to_dict(self):
        body = {"success": False, "error": self.message}
        if self.mode:
            body["mode"] = self.mode
        return body


def _isoformat(value):
    return value.isoformat() if value else None


class DiaryService:
    def __init__(self, store, generator=None, transcriber=None, clock=datetime.now,
                 min_audio_kb=1, max_audio_kb=500):
        self.store = store
        self.generator = generator
        self.transcriber = transcriber
        self.clock = clock
        self.min_audio_kb = min_audio_kb
        self.max_audio_kb = max_audio_kb

    # -- sessions ---------------------------------------------------------

    def start_session(self):
        session = self.store.create(self.clock())
        logger.info("Session started [%s]", session.id)
        return {"success": True, "sessionId": session.id, "message": GREETING}

    def list_sessions(self):
        sessions = [
            {
                "id": s.id,
                "status": s.status,
                "messageCount": len(s.messages),
                "startTime": _isoformat(s.start_time),
                "endTime": _isoformat(s.end_time),
                "hasSummary": bool(s.summary),
            }
            for s in self.store.list()
        ]
        return {"sessions": sessions}

    def _locked_session(self, session_id):
        """Return (session, lock) or raise InputError for unknown ids."""
        if not isinstance(session_id, str):
            raise InputError(SESSION_NOT_FOUND)
        try:
            lock = self.store.lock(session_id)
        except KeyError:
            raise InputError(SESSION_NOT_FOUND) from None
        session = self.store.get(session_id)
        if session is None:
            raise InputError(SESSION_NOT_FOUND)
        return session, lock

    # -- interview --------------------------------------------------------

    def post_message(self, session_id, message):
        session, lock = self._locked_session(session_id)
        if not isinstance(message, str) or not message.strip():
            raise InputError(MESSAGE_MISSING)

        with lock:
            # Recorded before generation so a provider failure keeps it
            session.add_message("user", message, self.clock())
            self.store.update(session)

            turn = session.turn_count
            emotion = classify(message)
            logger.info("User message [%s]: %s", session.id, message[:50])

            if self.generator is None:
                reply, mode = fallback_response(turn, emotion), MODE_DEMO
            else:
                try:
                    logger.info(
                        "Generating interview question (turn %d, pattern %d, cycle %d)",
                        turn, question_type(turn), cycle_count(turn),
                    )
                    instruction = build_instruction(
                        turn, message, emotion, session.messages,
                        build_context(session.messages),
                    )
                    reply, mode = self.generator.generate(instruction), MODE_LIVE
                except Exception:
                    logger.warning(
                        "Chat generation failed [%s], mode=%s",
                        session.id, MODE_FALLBACK, exc_info=True,
                    )
                    reply, mode = fallback_response(turn, emotion), MODE_FALLBACK

            session.add_message("assistant", reply, self.clock())
            self.store.update(session)

            return {
                "success": True,
                "response": reply,
                "turnCount": turn,
                "messageCount": len(session.messages),
                "canSummarize": turn >= 1,
                "emotion": emotion.type,
                "mode": mode,
            }

    # -- audio ------------------------------------------------------------

    def transcribe_audio(self, path):
        """Transcribe an uploaded audio file. The caller owns the file."""
        size_kb = os.path.getsize(path) / 1024
        logger.info("Audio received: %.1f KB", size_kb)

        mode = MODE_DEMO
        if self.transcriber is not None:
            try:
                transcript, confidence = self.transcriber.transcribe(path)
                logger.info("Transcription succeeded: %s", transcript[:50])
                return {
                    "success": True,
                    "transcript": transcript,
                    "confidence": confidence,
                    "mode": MODE_LIVE,
                }
            except Exception:
                logger.warning("Transcription failed, mode=%s", MODE_FALLBACK, exc_info=True)
                mode = MODE_FALLBACK

        if size_kb < self.min_audio_kb:
            raise InputError(AUDIO_TOO_SHORT, mode=mode)
        if size_kb > self.max_audio_kb:
            raise InputError(AUDIO_TOO_LONG, mode=mode)
        raise InputError(AUDIO_UNAVAILABLE, mode=mode)

    # -- diary ------------------------------------------------------------

    def generate_title(self, content):
        if not isinstance(content, str) or not content:
            raise InputError(CONTENT_MISSING)
        today = self.clock().date()

        if self.generator is None:
            return {"success": True, "title": demo_title(content, today), "mode": MODE_DEMO}

        try:
            raw = self.generator.generate(build_title_prompt(content))
            title, mode = sanitize_title(raw, today), MODE_LIVE
        except Exception:
            logger.warning("Title generation failed, mode=%s", MODE_FALLBACK, exc_info=True)
            title, mode = fallback_title(today), MODE_FALLBACK
        logger.info("Generated title: %s", title)
        return {"success": True, "title": title, "mode": mode}

    def summarize_session(self, session_id):
        session, lock = self._locked_session(session_id)

        with lock:
            logger.info("Summarizing [%s]: %d turn(s)", session.id, session.turn_count)
            if self.generator is None:
                diary, mode = demo_summary(session.messages), MODE_DEMO
            else:
                try:
                    diary = self.generator.generate(build_summary_prompt(session.messages))
                    mode = MODE_LIVE
                except Exception:
                    logger.warning(
                        "Summary generation failed [%s], mode=%s",
                        session.id, MODE_FALLBACK, exc_info=True,
                    )
                    diary, mode = fallback_summary(), MODE_FALLBACK

            session.complete(diary, self.clock())
            self.store.update(session)

            return {
                "success": True,
                "diary": diary,
                "conversationCount": session.turn_count,
                "duration": duration_minutes(session.start_time, session.end_time),
                "mode": mode,
            }

    # -- status -----------------------------------------------------------

    def health(self):
        return {
            "status": "OK",
            "timestamp": self.clock().isoformat(),
            "services": {
                "speechToText": MODE_DEMO if self.transcriber is None else MODE_LIVE,
                "textGeneration": MODE_DEMO if self.generator is None else MODE_LIVE,
            },
            "activeSessions": len(self.store),
        }
