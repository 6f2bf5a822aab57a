"""
Quiz Orchestrator

The state machine behind a NicheNerd session:
1. start: open a quiz on a topic with the quiz master agent
2. submit_answer: one answer/feedback turn at a time
3. generate_scorecard: ask the scorecard agent for a shareable image
4. play_again: back to the home screen

Home -> Quiz -> Scorecard -> Home are the only screen transitions. At most
one agent call is in flight per orchestrator.
"""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .agents.prompts import format_start_prompt, format_scorecard_prompt
from .config import config
from .quiz.classifier import Classifier, classify
from .quiz.normalizer import ParseFailure, normalize
from .quiz.schema import ChatMessage, QuizState, Role, ScreenState
from .session import SessionIdentity
from .transport import AgentTransport, MockAgentTransport, get_transport

logger = logging.getLogger(__name__)

PARSE_ERROR_MESSAGE = "Could not parse agent response. Please try again."
NETWORK_ERROR_MESSAGE = "Network error. Please try again."


class ErrorKind(str, Enum):
    """Why the last action failed."""
    PARSE = "parse"
    TRANSPORT = "transport"
    AGENT = "agent"


@dataclass
class SessionState:
    """Mutable state owned by the orchestrator."""
    screen: ScreenState = ScreenState.HOME
    topic: str = ""
    history: list[ChatMessage] = field(default_factory=list)
    current_question: int = 0
    loading: bool = False
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    quiz_complete: bool = False
    final_result: Optional[QuizState] = None
    scorecard_url: Optional[str] = None
    scorecard_loading: bool = False
    active_agent_id: Optional[str] = None

    def reset_quiz(self):
        """Clear everything scoped to one quiz attempt."""
        self.history = []
        self.current_question = 0
        self.quiz_complete = False
        self.final_result = None
        self.scorecard_url = None
        self.error = None
        self.error_kind = None


@dataclass(frozen=True)
class QuizSnapshot:
    """Read-only view handed to the presentation layer."""
    screen: ScreenState
    topic: str
    history: tuple
    current_question: int
    loading: bool
    error: Optional[str]
    error_kind: Optional[ErrorKind]
    quiz_complete: bool
    final_result: Optional[QuizState]
    scorecard_url: Optional[str]
    scorecard_loading: bool
    active_agent_id: Optional[str]
    user_id: str
    session_id: str

    def to_dict(self) -> dict:
        return {
            "screen": self.screen.value,
            "topic": self.topic,
            "history": [m.to_dict() for m in self.history],
            "current_question": self.current_question,
            "loading": self.loading,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "quiz_complete": self.quiz_complete,
            "final_result": self.final_result.to_dict() if self.final_result else None,
            "scorecard_url": self.scorecard_url,
            "scorecard_loading": self.scorecard_loading,
            "active_agent_id": self.active_agent_id,
            "user_id": self.user_id,
            "session_id": self.session_id,
        }


class QuizOrchestrator:
    """
    Main orchestrator for a quiz session.

    Actions return True when accepted and False when a guard rejected them
    (wrong screen, blank input, or a call already in flight). An accepted
    action that fails records the error and leaves the screen unchanged,
    except generate_scorecard, which always moves on to the scorecard.
    """

    def __init__(
        self,
        transport: Optional[AgentTransport] = None,
        identity: Optional[SessionIdentity] = None,
        classifier: Classifier = classify,
        use_mock: bool = False,
        quiz_master_agent_id: Optional[str] = None,
        scorecard_agent_id: Optional[str] = None,
        total_questions: Optional[int] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            transport: Agent transport (defaults to the configured backend)
            identity: Session identity (a fresh in-memory one if None)
            classifier: Grades answer turns from the agent's reply text
            use_mock: Force the mock transport
            quiz_master_agent_id: Override for the quiz master agent id
            scorecard_agent_id: Override for the scorecard agent id
            total_questions: Quiz length announced to the agent
        """
        if use_mock:
            transport = MockAgentTransport()
        elif transport is None:
            transport = get_transport(config.transport.backend)

        self.transport = transport
        self.identity = identity or SessionIdentity()
        self.classifier = classifier
        self.quiz_master_agent_id = quiz_master_agent_id or config.agents.quiz_master_agent_id
        self.scorecard_agent_id = scorecard_agent_id or config.agents.scorecard_agent_id
        self.total_questions = total_questions or config.quiz.total_questions

        self._state = SessionState()
        self._busy = False
        self._message_ids = itertools.count(1)
        self._user_id = self.identity.ensure_user_id()

    # ---------- Read surface ----------

    @property
    def busy(self) -> bool:
        return self._busy

    def snapshot(self) -> QuizSnapshot:
        state = self._state
        return QuizSnapshot(
            screen=state.screen,
            topic=state.topic,
            history=tuple(state.history),
            current_question=state.current_question,
            loading=state.loading,
            error=state.error,
            error_kind=state.error_kind,
            quiz_complete=state.quiz_complete,
            final_result=state.final_result,
            scorecard_url=state.scorecard_url,
            scorecard_loading=state.scorecard_loading,
            active_agent_id=state.active_agent_id,
            user_id=self._user_id,
            session_id=self.identity.session_id,
        )

    # ---------- Actions ----------

    async def start(self, topic: str) -> bool:
        """
        Start a quiz on a topic.

        Legal from the home screen, and from the quiz screen to retry an
        opening turn that failed.

        Args:
            topic: Topic the player picked

        Returns:
            Whether the action was accepted
        """
        chosen = topic.strip() if isinstance(topic, str) else ""
        if not chosen:
            return False
        if self._busy:
            logger.debug("start ignored: a call is already in flight")
            return False
        state = self._state
        if state.screen is ScreenState.SCORECARD:
            logger.warning("start ignored: finish the scorecard with play_again first")
            return False
        if state.screen is ScreenState.QUIZ and (state.history or state.quiz_complete):
            logger.warning("start ignored: a quiz is already under way")
            return False

        state.screen = ScreenState.QUIZ
        state.topic = chosen
        state.reset_quiz()
        session_id = self.identity.new_session_id()
        logger.info(f"Starting quiz on {chosen!r} (session {session_id})")

        self._begin(self.quiz_master_agent_id)
        try:
            result = await self.transport.call(
                format_start_prompt(chosen, self.total_questions),
                self.quiz_master_agent_id,
                self.identity.context(),
            )
            if not result.success:
                self._fail(ErrorKind.AGENT, result.error or "Failed to start quiz. Please try again.")
                return True

            data = normalize(result)
            if isinstance(data, ParseFailure):
                self._fail(ErrorKind.PARSE, PARSE_ERROR_MESSAGE, data.reason)
                return True

            state.history.append(self._agent_message(data))
            self._advance_question(data)
        except Exception as e:
            self._fail(ErrorKind.TRANSPORT, NETWORK_ERROR_MESSAGE, f"{type(e).__name__}: {e}")
        finally:
            self._end()

        return True

    async def submit_answer(self, text: str) -> bool:
        """
        Send the player's answer and record the quiz master's reply.

        The user message is appended before the call; the agent message only
        after its reply decodes.

        Args:
            text: The player's answer

        Returns:
            Whether the action was accepted
        """
        answer = text.strip() if isinstance(text, str) else ""
        state = self._state
        if not answer or self._busy or state.quiz_complete:
            return False
        if state.screen is not ScreenState.QUIZ:
            logger.warning("submit_answer ignored: no quiz in progress")
            return False

        state.history.append(ChatMessage(id=self._next_id(), role=Role.USER, text=answer))

        self._begin(self.quiz_master_agent_id)
        try:
            result = await self.transport.call(
                answer,
                self.quiz_master_agent_id,
                self.identity.context(),
            )
            if not result.success:
                self._fail(ErrorKind.AGENT, result.error or "Failed to submit answer.")
                return True

            data = normalize(result)
            if isinstance(data, ParseFailure):
                self._fail(ErrorKind.PARSE, PARSE_ERROR_MESSAGE, data.reason)
                return True

            verdict = self.classifier(data.message)
            state.history.append(self._agent_message(data, is_correct=verdict.as_flag()))
            self._advance_question(data)

            if data.is_complete:
                state.quiz_complete = True
                state.final_result = data
                logger.info(f"Quiz complete: {data.score}/{data.total} ({data.level_name or 'no level'})")
        except Exception as e:
            self._fail(ErrorKind.TRANSPORT, NETWORK_ERROR_MESSAGE, f"{type(e).__name__}: {e}")
        finally:
            self._end()

        return True

    async def generate_scorecard(self) -> bool:
        """
        Ask the scorecard agent for an image of the final result.

        Moves to the scorecard screen whatever happens; without an image the
        presentation falls back to a text scorecard.

        Returns:
            Whether the action was accepted
        """
        state = self._state
        final = state.final_result
        if final is None or self._busy or state.screen is not ScreenState.QUIZ:
            return False

        prompt = format_scorecard_prompt(
            topic=final.topic or state.topic,
            score=final.score,
            total=final.total,
            level_name=final.level_name,
            tagline=final.tagline,
        )

        self._begin(self.scorecard_agent_id, scorecard=True)
        try:
            result = await self.transport.call(prompt, self.scorecard_agent_id)
            if result.success:
                urls = result.artifact_urls
                state.scorecard_url = urls[0] if urls else None
                if not urls:
                    logger.info("Scorecard agent returned no artifact; using text scorecard")
            else:
                self._fail(ErrorKind.AGENT, result.error or "Failed to generate score card.")
        except Exception as e:
            self._fail(ErrorKind.TRANSPORT, "Network error generating score card.", f"{type(e).__name__}: {e}")
        finally:
            self._end()

        state.screen = ScreenState.SCORECARD
        return True

    def play_again(self) -> bool:
        """Return to the home screen, dropping the finished quiz."""
        state = self._state
        if state.screen is not ScreenState.SCORECARD or self._busy:
            return False

        state.screen = ScreenState.HOME
        state.topic = ""
        state.reset_quiz()
        return True

    async def close(self):
        await self.transport.close()

    # ---------- helpers ----------

    def _next_id(self) -> str:
        return f"msg-{next(self._message_ids)}"

    def _agent_message(self, data: QuizState, is_correct: Optional[bool] = None) -> ChatMessage:
        return ChatMessage(
            id=self._next_id(),
            role=Role.AGENT,
            text=data.message,
            question_number=data.question_number,
            is_correct=is_correct,
        )

    def _advance_question(self, data: QuizState):
        # 0 means the agent did not number this turn
        if data.question_number > 0:
            self._state.current_question = data.question_number

    def _begin(self, agent_id: str, scorecard: bool = False):
        state = self._state
        self._busy = True
        if scorecard:
            state.scorecard_loading = True
        else:
            state.loading = True
        state.active_agent_id = agent_id
        state.error = None
        state.error_kind = None

    def _end(self):
        state = self._state
        self._busy = False
        state.loading = False
        state.scorecard_loading = False
        state.active_agent_id = None

    def _fail(self, kind: ErrorKind, message: str, detail: Optional[str] = None):
        self._state.error = message
        self._state.error_kind = kind
        logger.warning(f"{kind.value} failure: {detail or message}")


# Convenience function for scripted sessions
async def play_scripted(
    topic: str,
    answers: Iterable[str],
    use_mock: bool = True,
    transport: Optional[AgentTransport] = None,
) -> QuizSnapshot:
    """
    Run a quiz end to end with canned answers.

    Args:
        topic: Quiz topic
        answers: Answers to submit in order (extra answers are ignored once complete)
        use_mock: Use the mock transport (True for testing)
        transport: Explicit transport, overrides use_mock

    Returns:
        Snapshot after the last step
    """
    orchestrator = QuizOrchestrator(transport=transport, use_mock=use_mock and transport is None)
    await orchestrator.start(topic)
    for answer in answers:
        if orchestrator.snapshot().quiz_complete:
            break
        await orchestrator.submit_answer(answer)

    if orchestrator.snapshot().quiz_complete:
        await orchestrator.generate_scorecard()
    return orchestrator.snapshot()
