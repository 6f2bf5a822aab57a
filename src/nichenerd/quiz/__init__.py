"""
Quiz data and decoding for nichenerd

Normalizes agent replies into QuizState and grades answer turns.
"""

from .schema import (
    QuizState,
    ChatMessage,
    Role,
    ScreenState,
    Correctness,
    EXAMPLE_TOPICS,
    SAMPLE_HISTORY,
    SAMPLE_FINAL,
)
from .normalizer import normalize, extract_json, ParseFailure
from .classifier import classify

__all__ = [
    "QuizState",
    "ChatMessage",
    "Role",
    "ScreenState",
    "Correctness",
    "EXAMPLE_TOPICS",
    "SAMPLE_HISTORY",
    "SAMPLE_FINAL",
    "normalize",
    "extract_json",
    "ParseFailure",
    "classify",
]
