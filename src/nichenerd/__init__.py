"""
nichenerd: AI-run trivia quizzes on niche topics.

Drives a ten-question conversation with a quiz master agent, turns its
loosely structured replies into typed quiz state, and produces a shareable
scorecard.
"""

__version__ = "0.1.0"

from .config import config
from .orchestrator import (
    QuizOrchestrator,
    QuizSnapshot,
    ErrorKind,
    play_scripted,
)
from .exporter import ScorecardExporter
from .session import SessionIdentity, MemorySessionStore
from .quiz import QuizState, ChatMessage, ScreenState, Correctness, normalize, classify, ParseFailure

__all__ = [
    # Config
    "config",
    # Orchestrator
    "QuizOrchestrator",
    "QuizSnapshot",
    "ErrorKind",
    "play_scripted",
    # Delivery
    "ScorecardExporter",
    # Identity
    "SessionIdentity",
    "MemorySessionStore",
    # Quiz data
    "QuizState",
    "ChatMessage",
    "ScreenState",
    "Correctness",
    "normalize",
    "classify",
    "ParseFailure",
]
