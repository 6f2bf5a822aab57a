"""
Agent prompts for nichenerd

The quiz master runs the Q&A; the scorecard generator turns a final result
into a shareable image.
"""

from .prompts import (
    QUIZ_MASTER_SYSTEM_PROMPT,
    SCORECARD_SYSTEM_PROMPT,
    format_start_prompt,
    format_scorecard_prompt,
    format_quiz_master_system,
)

__all__ = [
    "QUIZ_MASTER_SYSTEM_PROMPT",
    "SCORECARD_SYSTEM_PROMPT",
    "format_start_prompt",
    "format_scorecard_prompt",
    "format_quiz_master_system",
]
