"""Interview question selection: a small state machine over the turn count.

Each user turn maps to one of five states. The selected state picks an
instruction template which is sent to the text generator; nothing here
talks to a provider. Turns run in cycles of three:

    deepen → emotion_probe → broaden   (cycles 1 and 2)
    deepen → emotion_probe → wrap_up   (cycle 3 onward)

with the very first turn handled separately as ``initial``.
"""

from services.emotion_classifier import NEGATIVE, POSITIVE

INITIAL = "initial"
DEEPEN = "deepen"
EMOTION_PROBE = "emotion_probe"
BROADEN = "broaden"
WRAP_UP = "wrap_up"

CYCLE_LENGTH = 3
WRAP_UP_CYCLE = 3

RESPONSE_LIMIT = 50
WRAP_UP_LIMIT = 60

# How many of the latest messages each state quotes back to the model
HISTORY_WINDOW = {
    DEEPEN: 3,
    EMOTION_PROBE: 3,
    BROADEN: 5,
    WRAP_UP: 7,
}

TONE_GUIDANCE = {
    POSITIVE: "相手の明るい気持ちに寄り添い、一緒に喜ぶような温かい口調",
    NEGATIVE: "相手を気遣い、否定せずに受け止める穏やかで優しい口調",
}
DEFAULT_TONE = "落ち着いた自然な聞き上手の口調"

INITIAL_TEMPLATE = """\
ユーザーが日記作成のために話しかけてきました。インタビュアーのように、まず今日何があったかを聞いてください。

ユーザーの発言: "{message}"
{topics}
応答のルール：
- {limit}文字以内の短い応答
- 共感を示す
- 今日の出来事について具体的に聞く
- 口調: {tone}

応答:"""

DEEPEN_TEMPLATE = """\
前回の話について詳細を深掘りしてください。インタビュアーのように具体的な状況や背景を聞き出してください。

これまでの会話:
{history}
{topics}
応答のルール：
- {limit}文字以内の短い応答
- 前回の話の詳細や背景を聞く
- 「具体的にはどのような」「そのときは誰と」など
- 口調: {tone}

応答:"""

EMOTION_PROBE_TEMPLATE = """\
その出来事の様子や印象を聞いてください。インタビュアーのように、状況を思い出してもらうことで相手の内面を自然に引き出してください。

これまでの会話:
{history}
{topics}
応答のルール：
- {limit}文字以内の短い応答
- 「どう感じましたか」「どんな気持ちでしたか」のように気持ちを直接聞かない
- 「一番印象に残った場面は」「そのときの様子は」など状況や印象を聞く
- 口調: {tone}

応答:"""

BROADEN_TEMPLATE = """\
他にも何か話題がないか聞いてください。インタビュアーのように新しい情報を引き出してください。

これまでの会話:
{history}
{topics}
応答のルール：
- {limit}文字以内の短い応答
- 他の出来事や話題を聞く
- 「他にも何かありましたか」「それ以外には」など
- 口調: {tone}

応答:"""

WRAP_UP_TEMPLATE = """\
十分な情報が集まりました。インタビューを締めくくり、日記作成を提案してください。

これまでの会話:
{history}
{topics}
応答のルール：
- {limit}文字以内
- 話を聞けたことに感謝
- 日記作成の提案
- 口調: {tone}

応答:"""

TEMPLATES = {
    INITIAL: INITIAL_TEMPLATE,
    DEEPEN: DEEPEN_TEMPLATE,
    EMOTION_PROBE: EMOTION_PROBE_TEMPLATE,
    BROADEN: BROADEN_TEMPLATE,
    WRAP_UP: WRAP_UP_TEMPLATE,
}


def question_type(turn_count):
    """1, 2 or 3: position of the turn within its cycle."""
    _check_turn(turn_count)
    return (turn_count - 1) % CYCLE_LENGTH + 1


def cycle_count(turn_count):
    """1-based index of the cycle the turn belongs to."""
    _check_turn(turn_count)
    return (turn_count - 1) // CYCLE_LENGTH + 1


def select_state(turn_count):
    """Pick the interview state for the given user turn."""
    if turn_count == 1:
        return INITIAL
    qtype = question_type(turn_count)
    if qtype == 1:
        return DEEPEN
    if qtype == 2:
        return EMOTION_PROBE
    if cycle_count(turn_count) >= WRAP_UP_CYCLE:
        return WRAP_UP
    return BROADEN


def tone_for(emotion):
    return TONE_GUIDANCE.get(emotion.type, DEFAULT_TONE)


def format_history(messages):
    return "\n".join(f"{m.role}: {m.content}" for m in messages)


def build_instruction(turn_count, message, emotion, history, context=None):
    """Build the generator instruction for this turn.

    ``history`` is the session's full message list (including the message
    just posted); each state quotes only its own window of it.
    """
    state = select_state(turn_count)
    topics = ""
    if context is not None and context.topics_string():
        topics = f"\nこれまでの話題: {context.topics_string()}\n"

    window = HISTORY_WINDOW.get(state)
    recent = history[-window:] if window else []

    return TEMPLATES[state].format(
        message=message,
        history=format_history(recent),
        topics=topics,
        limit=WRAP_UP_LIMIT if state == WRAP_UP else RESPONSE_LIMIT,
        tone=tone_for(emotion),
    )


def _check_turn(turn_count):
    if turn_count < 1:
        raise ValueError(f"turn count must be >= 1, got {turn_count}")
