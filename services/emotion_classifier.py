"""Keyword-based emotion classifier. No LLM calls: the result only picks
the tone of the next interview question and the fallback ladder."""

from dataclasses import dataclass

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"

MATCH_CONFIDENCE = 0.8
DEFAULT_CONFIDENCE = 0.5

# Checked in this order; the first category with a hit wins.
KEYWORDS = (
    (POSITIVE, (
        "楽し", "嬉し", "うれし", "幸せ", "良かった", "よかった", "最高",
        "面白", "おもしろ", "感動", "ありがと", "好き", "わくわく",
        "happy", "fun", "great",
    )),
    (NEGATIVE, (
        "悲し", "辛い", "つらい", "疲れ", "不安", "怒", "寂し", "さみし",
        "落ち込", "最悪", "困っ", "嫌", "残念", "しんど",
        "sad", "tired", "angry",
    )),
    (NEUTRAL, (
        "普通", "ふつう", "いつも通り", "いつもどおり", "まあまあ",
        "特に", "変わらない", "okay",
    )),
)


@dataclass(frozen=True)
class EmotionResult:
    type: str
    confidence: float


def classify(text):
    """Return the first matching EmotionResult for text, or neutral/0.5."""
    lowered = (text or "").lower()
    for emotion, keywords in KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return EmotionResult(emotion, MATCH_CONFIDENCE)
    return EmotionResult(NEUTRAL, DEFAULT_CONFIDENCE)
