import pytest

from services.topic_extractor import GENERAL, extract_topic, label


@pytest.mark.parametrize("text,expected", [
    ("今日は仕事で会議があった", "work"),
    ("学校で試験を受けた", "school"),
    ("母と電話した", "family"),
    ("友達とカラオケ", "friends"),
    ("朝に散歩した", "health"),
    ("ランチがおいしかった", "food"),
    ("映画を観た", "hobby"),
    ("旅行の計画", "travel"),
    ("雨が降っていた", "weather"),
])
def test_topic_match(text, expected):
    assert extract_topic(text) == expected


def test_first_topic_in_priority_order_wins():
    # both work and food keywords present
    assert extract_topic("会社のランチ会") == "work"


def test_unknown_text_is_general():
    assert extract_topic("今日は楽しかった") == GENERAL
    assert extract_topic("") == GENERAL


def test_labels():
    assert label("work") == "仕事"
    assert label(GENERAL) == ""
