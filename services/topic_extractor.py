"""Map free text onto a small, fixed topic vocabulary."""

GENERAL = "general"

# Priority order matters: "会社の飲み会" is work before food.
TOPICS = (
    ("work", ("仕事", "会社", "職場", "会議", "上司", "残業", "バイト")),
    ("school", ("学校", "授業", "勉強", "試験", "テスト", "宿題", "大学")),
    ("family", ("家族", "母", "父", "子ども", "子供", "妻", "兄", "姉", "弟", "妹")),
    ("friends", ("友達", "友人", "仲間", "彼氏", "彼女")),
    ("health", ("病院", "体調", "風邪", "運動", "ジム", "睡眠", "散歩")),
    ("food", ("ご飯", "ごはん", "料理", "ランチ", "夕食", "朝食", "カフェ", "食べ")),
    ("hobby", ("趣味", "映画", "音楽", "読書", "ゲーム", "漫画")),
    ("travel", ("旅行", "出張", "電車", "海", "山", "観光")),
    ("weather", ("天気", "雨", "晴れ", "雪", "暑", "寒")),
)


def extract_topic(text):
    """Return the first topic whose keyword occurs in text, else 'general'."""
    lowered = (text or "").lower()
    for topic, keywords in TOPICS:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return GENERAL


LABELS = {
    "work": "仕事",
    "school": "学校",
    "family": "家族",
    "friends": "友人",
    "health": "健康",
    "food": "食事",
    "hobby": "趣味",
    "travel": "お出かけ",
    "weather": "天気",
}


def label(topic):
    """Japanese display name for a topic, '' for the catch-all."""
    return LABELS.get(topic, "")
