"""Diary titles: the generator prompt, the cleanup applied to whatever
the model returns, and the date/keyword titles used without a model."""

import re
from datetime import date

MAX_TITLE_LENGTH = 12
MIN_TITLE_LENGTH = 2
PROMPT_CONTENT_LIMIT = 500

MARKUP_PATTERN = re.compile(r"[*_`#\[\](){}|\\~]")
LEADING_QUOTE_PATTERN = re.compile(r'^["「『]')
TRAILING_QUOTE_PATTERN = re.compile(r'["」』]$')
LABEL_PATTERN = re.compile(r"^タイトル[：:]?")
DOTS_PATTERN = re.compile(r"\.{2,}")
WHITESPACE_PATTERN = re.compile(r"\s+")

DEMO_KEYWORDS = ("楽しい", "嬉しい", "悲しい", "忙しい", "平和", "特別", "普通", "新しい", "大変")

TITLE_PROMPT = """\
以下の日記内容を読んで、シンプルで読みやすいタイトルを生成してください：

日記内容：
{content}

要件：
- {limit}文字以内のシンプルなタイトル
- 日記の内容や感情を表現
- 記号や装飾文字は一切使用しない
- ひらがな、カタカナ、漢字、数字のみ使用
- 「〜な日」「〜の記録」「〜について」などの自然な形式
- マークダウン記法（**、*、_など）は使用禁止

例：
- 楽しい一日
- 新しい発見
- 忙しい日々
- 穏やかな時間

タイトルのみを出力してください："""


def build_title_prompt(content):
    return TITLE_PROMPT.format(
        content=content[:PROMPT_CONTENT_LIMIT], limit=MAX_TITLE_LENGTH
    )


def fallback_title(today=None):
    """Date-based title, e.g. '10月17日の日記'."""
    today = today or date.today()
    return f"{today.month}月{today.day}日の日記"


def sanitize_title(raw, today=None):
    """Clean a generated title down to at most 12 plain characters.

    Falls back to the date title when nothing usable is left.
    """
    title = (raw or "").strip()
    title = MARKUP_PATTERN.sub("", title)
    title = LEADING_QUOTE_PATTERN.sub("", title)
    title = TRAILING_QUOTE_PATTERN.sub("", title)
    title = LABEL_PATTERN.sub("", title.strip())
    title = DOTS_PATTERN.sub("", title)
    title = title.replace("…", "")
    title = WHITESPACE_PATTERN.sub("", title)
    title = title[:MAX_TITLE_LENGTH]

    if len(title) < MIN_TITLE_LENGTH:
        return fallback_title(today)
    return title


def demo_title(content, today=None):
    """Keyword title for demo mode: '楽しい一日', else '10月17日の記録'."""
    for keyword in DEMO_KEYWORDS:
        if keyword in content:
            return f"{keyword}一日"
    today = today or date.today()
    return f"{today.month}月{today.day}日の記録"
