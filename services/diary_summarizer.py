"""Turning an interview transcript into diary prose.

The live path only builds the instruction; demo and fallback diaries are
fixed templates so a session can always be closed with some text.
"""

import math

DEMO_EXCERPT_LENGTH = 50

SUMMARY_PROMPT = """\
以下のユーザーとAIアシスタントの対話内容を基に、日記としてまとめてください。

対話内容:
{transcript}

要求事項：
- ユーザーが実際に話した具体的な内容と事実のみを使用してください
- AIの質問部分は省略し、ユーザーの回答内容を中心にまとめてください
- 実際に話されていない内容は追加しないでください
- 日付や時間、感情の解釈などの勝手な補完は行わないでください
- 対話形式ではなく、まとまった文章として整理してください
- 話された順序に従って内容を整理してください
- 段落分けや改行は行わず、一つの流れのある連続した文章として出力してください

日記："""

DEMO_SUMMARY = """\
今日は心温まる一日を過ごすことができました。{excerpt}...について振り返りながら、改めて日々の大切さを感じました。

対話を通じて自分の気持ちを整理することで、普段気づかない小さな幸せや感動に気づくことができました。こうした何気ない瞬間にこそ、生活の豊かさがあるのかもしれません。

明日もまた新しい発見や体験があることを楽しみにしながら、今日という日に感謝の気持ちを込めて、この日記を締めくくりたいと思います。"""

FALLBACK_SUMMARY = """\
今日は特別な一日でした。様々な出来事があり、多くのことを感じ、考えることができました。

日々の小さな出来事の中にも、大切な意味や価値を見つけることができます。今日もそんな瞬間がいくつもありました。

これからも一日一日を大切に過ごしていきたいと思います。今日という日に感謝しながら。"""

SPEAKER_LABELS = {"user": "ユーザー", "assistant": "AI"}


def build_summary_prompt(messages):
    transcript = "\n".join(
        f"{SPEAKER_LABELS.get(m.role, m.role)}: {m.content}" for m in messages
    )
    return SUMMARY_PROMPT.format(transcript=transcript)


def demo_summary(messages):
    """Template diary quoting the start of what the user said."""
    spoken = " ".join(m.content for m in messages if m.role == "user")
    return DEMO_SUMMARY.format(excerpt=spoken[:DEMO_EXCERPT_LENGTH])


def fallback_summary():
    """Generic diary with nothing taken from the conversation."""
    return FALLBACK_SUMMARY


def duration_minutes(start, end):
    """Elapsed whole minutes between two datetimes, rounded half-up."""
    seconds = (end - start).total_seconds()
    return int(math.floor(seconds / 60 + 0.5))
