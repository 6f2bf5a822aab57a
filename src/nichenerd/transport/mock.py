"""
Mock transport for testing and offline play

Returns configurable results without making network calls. With no
configuration it plays a complete quiz: numbered questions, alternating
feedback and a final level name, plus a scorecard artifact URL.
"""

import asyncio
import json
import random
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .base import AgentTransport, AgentCallResult, TransportError
from ..config import config


# (minimum score, level name, tagline)
MOCK_LEVELS = [
    (9, "Grand Nerd", "Knows things the topic itself has forgotten."),
    (7, "Sensei", "Quietly judges everyone's trivia night answers."),
    (4, "Enthusiast", "Has opinions and a few receipts."),
    (0, "Curious Tourist", "Bought the map, skipped the guidebook."),
]

START_PATTERN = re.compile(r"start a quiz on the topic:\s*(.+?)\.\s+all\b", re.IGNORECASE)


def mock_level(score: int) -> Tuple[str, str]:
    """Level name and tagline for a final score."""
    for minimum, level_name, tagline in MOCK_LEVELS:
        if score >= minimum:
            return level_name, tagline
    return MOCK_LEVELS[-1][1], MOCK_LEVELS[-1][2]


def mock_question(topic: str, number: int) -> str:
    """A placeholder question about the topic."""
    return f"Question {number}: What is one little-known fact about {topic}?"


@dataclass
class MockSession:
    """Quiz progress the mock keeps per (user, session)."""
    topic: str
    question_number: int = 1
    score: int = 0


@dataclass
class MockAgentTransport(AgentTransport):
    """
    Mock transport for testing.

    Can be configured with a fixed result, a result generator, or left to
    emulate the quiz master and scorecard agents.
    """

    _name: str = "mock"
    fixed_result: Optional[AgentCallResult] = None
    result_generator: Optional[Callable[[str, str, dict], AgentCallResult]] = None
    delay_seconds: float = 0.0
    fail_rate: float = 0.0  # Probability of raising an error
    total_questions: int = field(default_factory=lambda: config.quiz.total_questions)
    scorecard_agent_id: str = field(default_factory=lambda: config.agents.scorecard_agent_id)
    prose_replies: bool = False  # Wrap quiz JSON in chatter instead of a structured result
    calls: List[Tuple[str, str, dict]] = field(default_factory=list)
    sessions: Dict[Tuple[str, str], MockSession] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self._name

    async def call(
        self,
        prompt: str,
        agent_id: str,
        context: Optional[Dict[str, str]] = None,
    ) -> AgentCallResult:
        """Return a mock agent result."""
        context = dict(context or {})
        self.calls.append((prompt, agent_id, context))

        # Simulate delay
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)

        # Simulate failures
        if self.fail_rate > 0 and random.random() < self.fail_rate:
            raise TransportError("Simulated mock transport failure")

        if self.fixed_result is not None:
            return self.fixed_result
        if self.result_generator is not None:
            return self.result_generator(prompt, agent_id, context)
        return self._default_result(prompt, agent_id, context)

    def _default_result(self, prompt: str, agent_id: str, context: dict) -> AgentCallResult:
        """
        Emulate the agents based on which one is addressed and what was said.
        """
        if agent_id == self.scorecard_agent_id:
            topic_match = re.search(r"topic:\s*([^,]+)", prompt, re.IGNORECASE)
            slug = re.sub(r"\W+", "-", topic_match.group(1).strip().lower()) if topic_match else "score"
            return AgentCallResult(
                success=True,
                response={"result": {"text": "Your score card is ready."}},
                module_outputs={
                    "artifact_files": [{"file_url": f"https://mock.nichenerd.local/scorecards/{slug}.png"}]
                },
            )

        key = (context.get("user_id", ""), context.get("session_id", ""))
        start = START_PATTERN.search(prompt)
        if start:
            session = MockSession(topic=start.group(1).strip())
            self.sessions[key] = session
            return self._quiz_result({
                "message": f"Welcome to NicheNerd! Let's dig into {session.topic}.\n\n"
                           + mock_question(session.topic, 1),
                "question_number": 1,
                "is_complete": False,
                "score": 0,
                "total": self.total_questions,
                "level_name": "",
                "tagline": "",
                "topic": session.topic,
            })

        session = self.sessions.get(key)
        if session is None:
            return AgentCallResult(success=False, error="No quiz in progress for this session.")

        # Odd-numbered questions are answered correctly
        correct = session.question_number % 2 == 1
        if correct:
            session.score += 1
            feedback = "Correct! Nicely done."
        else:
            feedback = "Incorrect, but a good guess."

        if session.question_number >= self.total_questions:
            level_name, tagline = mock_level(session.score)
            return self._quiz_result({
                "message": f"{feedback} That's the quiz! You scored {session.score}/{self.total_questions} "
                           f"on {session.topic}.",
                "question_number": session.question_number,
                "is_complete": True,
                "score": session.score,
                "total": self.total_questions,
                "level_name": level_name,
                "tagline": tagline,
                "topic": session.topic,
            })

        session.question_number += 1
        return self._quiz_result({
            "message": f"{feedback}\n\n" + mock_question(session.topic, session.question_number),
            "question_number": session.question_number,
            "is_complete": False,
            "score": session.score,
            "total": self.total_questions,
            "level_name": "",
            "tagline": "",
            "topic": session.topic,
        })

    def _quiz_result(self, payload: dict) -> AgentCallResult:
        if self.prose_replies:
            raw = "Sure! Here is the next turn:\n```json\n" + json.dumps(payload, indent=2) + "\n```\nGood luck!"
            return AgentCallResult(success=True, response={"result": {}}, raw_response=raw)
        return AgentCallResult(success=True, response={"result": payload})


def quiz_reply(message: str, **fields) -> AgentCallResult:
    """Build a structured quiz-master result for tests and demos."""
    return AgentCallResult(success=True, response={"result": dict(message=message, **fields)})
