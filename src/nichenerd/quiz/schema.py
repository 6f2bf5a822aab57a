"""
Quiz schema and data structures

Defines the normalized agent turn (QuizState), chat history entries and the
screens the session moves through.
"""

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


DEFAULT_TOTAL = 10


class ScreenState(str, Enum):
    """Which screen the session is on."""
    HOME = "home"
    QUIZ = "quiz"
    SCORECARD = "scorecard"


class Role(str, Enum):
    """Who wrote a chat message."""
    AGENT = "agent"
    USER = "user"


class Correctness(str, Enum):
    """Verdict on an answer, as read from the agent's reply."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNKNOWN = "unknown"

    def as_flag(self) -> Optional[bool]:
        """True/False for a verdict, None when unknown."""
        if self is Correctness.CORRECT:
            return True
        if self is Correctness.INCORRECT:
            return False
        return None


def _as_count(value: Any, default: int, minimum: int = 0) -> int:
    """Real numbers only; booleans, NaN and out-of-range values fall back to default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    number = int(value)
    return number if number >= minimum else default


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class QuizState:
    """
    One normalized agent turn.

    Every field is always a plain scalar of its declared type. A state is
    valid when ``message`` is non-empty.
    """
    message: str
    question_number: int = 0
    is_complete: bool = False
    score: int = 0
    total: int = DEFAULT_TOTAL
    level_name: str = ""
    tagline: str = ""
    topic: str = ""

    @property
    def is_valid(self) -> bool:
        return isinstance(self.message, str) and len(self.message) > 0

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "question_number": self.question_number,
            "is_complete": self.is_complete,
            "score": self.score,
            "total": self.total,
            "level_name": self.level_name,
            "tagline": self.tagline,
            "topic": self.topic,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "QuizState":
        """
        Coerce an agent payload field by field.

        Never raises for a mapping: a field of the wrong type is replaced by
        its default rather than converted.
        """
        return cls(
            message=_as_text(data.get("message")),
            question_number=_as_count(data.get("question_number"), 0),
            is_complete=data.get("is_complete") is True,
            score=_as_count(data.get("score"), 0),
            total=_as_count(data.get("total"), DEFAULT_TOTAL, minimum=1),
            level_name=_as_text(data.get("level_name")),
            tagline=_as_text(data.get("tagline")),
            topic=_as_text(data.get("topic")),
        )

    @classmethod
    def from_text(cls, text: str) -> "QuizState":
        """Wrap plain prose as an unnumbered, incomplete turn."""
        return cls(message=text)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class ChatMessage:
    """A single turn in the quiz conversation."""
    id: str
    role: Role
    text: str
    question_number: Optional[int] = None
    is_correct: Optional[bool] = None

    @property
    def is_agent(self) -> bool:
        return self.role is Role.AGENT

    def to_dict(self) -> dict:
        result = {"id": self.id, "role": self.role.value, "text": self.text}
        if self.question_number is not None:
            result["question_number"] = self.question_number
        if self.role is Role.AGENT:
            result["is_correct"] = self.is_correct
        return result


# =============================================================================
# SAMPLE SESSION (Static)
# =============================================================================

EXAMPLE_TOPICS = [
    "Sourdough Starters",
    "Kubernetes",
    "90s Anime",
    "Mechanical Keyboards",
    "Byzantine History",
]

SAMPLE_HISTORY = [
    ChatMessage(
        id="s1",
        role=Role.AGENT,
        text="Welcome to NicheNerd! You've chosen Mechanical Keyboards - excellent taste! "
             "Let's see how deep your knowledge goes. Here's question 1:\n\n"
             "What does the term \"hot-swappable\" refer to in mechanical keyboards?",
        question_number=1,
    ),
    ChatMessage(
        id="s2",
        role=Role.USER,
        text="It means you can change the switches without soldering.",
    ),
    ChatMessage(
        id="s3",
        role=Role.AGENT,
        text="Correct! Hot-swappable means you can replace switches without desoldering. Nice one! "
             "Here's question 2:\n\n"
             "What is the difference between Cherry MX Red and Cherry MX Brown switches?",
        question_number=2,
        is_correct=True,
    ),
    ChatMessage(
        id="s4",
        role=Role.USER,
        text="Reds are linear and Browns are tactile with a small bump.",
    ),
    ChatMessage(
        id="s5",
        role=Role.AGENT,
        text="Spot on! MX Reds are linear (smooth) while MX Browns have a tactile bump at actuation. "
             "You really know your switches! Question 3:\n\n"
             "What material is \"PBT\" in the context of keycaps?",
        question_number=3,
        is_correct=True,
    ),
]

SAMPLE_FINAL = QuizState(
    message="Incredible run! You scored 8/10 on Mechanical Keyboards. "
            "You clearly spend as much time researching as you do typing.",
    question_number=10,
    is_complete=True,
    score=8,
    total=10,
    level_name="Keeb Sensei",
    tagline="Types at 150 WPM and judges your membrane keyboard silently.",
    topic="Mechanical Keyboards",
)
