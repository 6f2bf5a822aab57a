"""
Correctness classifier

Reads the quiz master's feedback and guesses whether the previous answer
was right. This is best-effort keyword matching on free text; the agent's
own ``score`` stays authoritative for scoring.
"""

from typing import Callable

from .schema import Correctness

NEGATIVE_PHRASES = ("incorrect", "wrong", "not correct", "not quite")

Classifier = Callable[[str], Correctness]


def classify(message: str) -> Correctness:
    """
    Classify an agent reply as correct, incorrect or unknown.

    Args:
        message: The agent's reply to an answer

    Returns:
        Correctness verdict
    """
    if not isinstance(message, str):
        return Correctness.UNKNOWN

    text = message.lower()
    if "correct" in text and "incorrect" not in text and "not correct" not in text:
        return Correctness.CORRECT
    if any(phrase in text for phrase in NEGATIVE_PHRASES):
        return Correctness.INCORRECT
    return Correctness.UNKNOWN
