"""Canned interview replies used when the text generator is unavailable.

One ladder per emotion; entry N answers user turn N+1 and the last entry
(thank the user, offer to write the diary) repeats once the ladder runs out.
"""

from services.emotion_classifier import NEGATIVE, NEUTRAL, POSITIVE

LADDERS = {
    POSITIVE: (
        "それは素敵ですね！今日はどんなことがありましたか？",
        "いいですね。一番印象に残ったのはどんな場面ですか？",
        "なるほど。他にも何かありましたか？",
        "ありがとうございます。素敵なお話でした！日記を作成しましょうか？",
    ),
    NEGATIVE: (
        "お疲れさまでした。今日はどんなことがありましたか？",
        "そうだったんですね。もう少し詳しく教えてもらえますか？",
        "話してくれてありがとうございます。他にも何かありましたか？",
        "お話を聞かせてくれてありがとうございます。日記にまとめましょうか？",
    ),
    NEUTRAL: (
        "こんにちは。今日はどんなことがありましたか？",
        "そうですね。もう少し詳しく教えてください。",
        "なるほど。他にも何かありましたか？",
        "ありがとうございます。日記を作成しましょう！",
    ),
}


def fallback_response(turn_count, emotion):
    """Pick the ladder entry for this turn, saturating at the last one."""
    ladder = LADDERS.get(emotion.type, LADDERS[NEUTRAL])
    index = max(0, min(turn_count - 1, len(ladder) - 1))
    return ladder[index]
