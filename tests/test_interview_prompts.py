from datetime import datetime

import pytest

from services.conversation_context import build_context
from services.emotion_classifier import EmotionResult, NEGATIVE, NEUTRAL, POSITIVE
from services.interview_prompts import (
    BROADEN,
    DEEPEN,
    DEFAULT_TONE,
    EMOTION_PROBE,
    INITIAL,
    TONE_GUIDANCE,
    WRAP_UP,
    build_instruction,
    cycle_count,
    question_type,
    select_state,
)
from services.session_store import Message

NOW = datetime(2026, 10, 17, 9, 0)
POSITIVE_RESULT = EmotionResult(POSITIVE, 0.8)
NEUTRAL_RESULT = EmotionResult(NEUTRAL, 0.5)


def _history(count):
    roles = ("user", "assistant")
    return [Message(roles[i % 2], f"発言{i}番", NOW) for i in range(count)]


@pytest.mark.parametrize("turn,qtype,cycle", [
    (1, 1, 1), (2, 2, 1), (3, 3, 1),
    (4, 1, 2), (6, 3, 2),
    (7, 1, 3), (9, 3, 3), (13, 1, 5),
])
def test_question_type_and_cycle(turn, qtype, cycle):
    assert question_type(turn) == qtype
    assert cycle_count(turn) == cycle


@pytest.mark.parametrize("turn,state", [
    (1, INITIAL),
    (2, EMOTION_PROBE),
    (3, BROADEN),
    (4, DEEPEN),
    (5, EMOTION_PROBE),
    (6, BROADEN),
    (7, DEEPEN),
    (9, WRAP_UP),
    (10, DEEPEN),
    (12, WRAP_UP),
])
def test_select_state(turn, state):
    assert select_state(turn) == state


@pytest.mark.parametrize("turn", [0, -3])
def test_turn_below_one_is_rejected(turn):
    with pytest.raises(ValueError):
        select_state(turn)


def test_initial_instruction_quotes_message_and_tone():
    text = build_instruction(1, "今日は楽しかった", POSITIVE_RESULT, _history(1))
    assert '"今日は楽しかった"' in text
    assert TONE_GUIDANCE[POSITIVE] in text
    assert "50文字以内" in text


def test_negative_tone():
    text = build_instruction(1, "疲れた", EmotionResult(NEGATIVE, 0.8), _history(1))
    assert TONE_GUIDANCE[NEGATIVE] in text


def test_neutral_uses_default_tone():
    text = build_instruction(4, "会議", NEUTRAL_RESULT, _history(7))
    assert DEFAULT_TONE in text


def test_deepen_quotes_last_three_messages():
    text = build_instruction(4, "x", NEUTRAL_RESULT, _history(8))
    assert "発言5番" in text and "発言7番" in text
    assert "発言4番" not in text


def test_broaden_quotes_last_five_messages():
    text = build_instruction(3, "x", NEUTRAL_RESULT, _history(8))
    assert "発言3番" in text
    assert "発言2番" not in text
    assert "他にも何かありましたか" in text


def test_wrap_up_quotes_seven_and_allows_longer_reply():
    text = build_instruction(9, "x", NEUTRAL_RESULT, _history(10))
    assert "発言3番" in text
    assert "発言2番" not in text
    assert "60文字以内" in text
    assert "日記作成の提案" in text


def test_emotion_probe_does_not_ask_feelings_directly():
    text = build_instruction(2, "x", NEUTRAL_RESULT, _history(3))
    assert "気持ちを直接聞かない" in text
    assert "印象" in text


def test_context_topics_are_included():
    history = [
        Message("user", "仕事で会議があった", NOW),
        Message("assistant", "どんな会議でしたか？", NOW),
        Message("user", "ランチも楽しかった", NOW),
    ]
    text = build_instruction(2, "ランチも楽しかった", POSITIVE_RESULT, history, build_context(history))
    assert "これまでの話題: 仕事、食事" in text


def test_no_topics_line_without_known_topics():
    history = _history(3)
    text = build_instruction(2, "x", NEUTRAL_RESULT, history, build_context(history))
    assert "これまでの話題" not in text
