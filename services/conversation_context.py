"""Rolling conversation context derived from a session's message history.

Plays the role the emotion tracker's history string plays for a chat
persona: a compact view of where the conversation has been, built fresh
from the stored messages on every turn.
"""

from dataclasses import dataclass, field

from services.emotion_classifier import classify
from services.topic_extractor import extract_topic, label

MAX_RECENT = 4
FLOW_CONTINUING = "continuing"


@dataclass(frozen=True)
class ConversationContext:
    recent_topics: tuple = field(default_factory=tuple)
    recent_emotions: tuple = field(default_factory=tuple)
    flow_state: str = FLOW_CONTINUING

    def topics_string(self):
        """Distinct topic labels oldest→newest, skipping the catch-all."""
        names = []
        for topic in self.recent_topics:
            name = label(topic)
            if name and name not in names:
                names.append(name)
        return "、".join(names)


def build_context(messages):
    """Build a ConversationContext from the last MAX_RECENT user messages."""
    user_texts = [m.content for m in messages if m.role == "user"][-MAX_RECENT:]
    return ConversationContext(
        recent_topics=tuple(extract_topic(text) for text in user_texts),
        recent_emotions=tuple(classify(text) for text in user_texts),
    )
