"""
Claude (Anthropic) agent transport

Runs the quiz master and scorecard agents locally on Claude instead of the
hosted agent platform. Conversation state is kept in-process, one message
history per (agent, user, session), which is what the hosted agents do
server-side. A new session for the same agent and user replaces the old one.
"""

import os
import logging
from typing import Dict, List, Optional, Tuple

from .base import (
    AgentTransport, AgentCallResult, TransportError, RateLimitError,
    AuthenticationError,
)
from ..agents.prompts import SCORECARD_SYSTEM_PROMPT, format_quiz_master_system
from ..config import config

logger = logging.getLogger(__name__)

HistoryKey = Tuple[str, str, str]


class ClaudeAgentTransport(AgentTransport):
    """
    Anthropic Claude as the agent backend.

    Uses the anthropic SDK. API key is read from:
    1. Constructor argument
    2. ANTHROPIC_API_KEY environment variable
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        system_prompts: Optional[Dict[str, str]] = None,
        client=None,
    ):
        """
        Initialize Claude transport.

        Args:
            api_key: Anthropic API key (falls back to env var)
            model: Model to use
            max_tokens: Reply length cap
            system_prompts: Mapping of agent id to system prompt
            client: Pre-built AsyncAnthropic-compatible client
        """
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self._model = model or config.transport.claude_model
        self._max_tokens = max_tokens or config.transport.claude_max_tokens
        self._client = client
        self.system_prompts = system_prompts or {
            config.agents.quiz_master_agent_id: format_quiz_master_system(config.quiz.total_questions),
            config.agents.scorecard_agent_id: SCORECARD_SYSTEM_PROMPT,
        }
        self._histories: Dict[HistoryKey, List[dict]] = {}

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "No Anthropic API key provided. Set ANTHROPIC_API_KEY or pass api_key to constructor."
                )
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    @property
    def name(self) -> str:
        return "claude"

    def history(self, agent_id: str, context: Optional[Dict[str, str]] = None) -> List[dict]:
        """Messages exchanged so far with an agent in one session."""
        return list(self._histories.get(self._key(agent_id, context), []))

    def _key(self, agent_id: str, context: Optional[Dict[str, str]]) -> HistoryKey:
        context = context or {}
        return (agent_id, context.get("user_id", ""), context.get("session_id", ""))

    def _drop_stale(self, key: HistoryKey):
        """Forget earlier sessions of the same agent and user."""
        agent_id, user_id, _ = key
        stale = [k for k in self._histories if k[0] == agent_id and k[1] == user_id]
        for k in stale:
            del self._histories[k]
        if stale:
            logger.debug(f"Dropped {len(stale)} finished session(s) for {agent_id}")

    async def call(
        self,
        prompt: str,
        agent_id: str,
        context: Optional[Dict[str, str]] = None,
    ) -> AgentCallResult:
        """Send a message to a Claude-backed agent."""
        system = self.system_prompts.get(agent_id)
        if system is None:
            return AgentCallResult(success=False, error=f"Unknown agent: {agent_id}")

        client = self._get_client()
        key = self._key(agent_id, context)
        if key not in self._histories:
            self._drop_stale(key)
        messages = self._histories.setdefault(key, [])
        messages.append({"role": "user", "content": prompt})

        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=system,
                messages=list(messages),
            )
        except Exception as e:
            # Drop the unanswered turn so a retry does not repeat it
            messages.pop()
            error_str = str(e).lower()

            if "rate" in error_str or "429" in error_str:
                raise RateLimitError(f"Claude rate limit exceeded: {e}")

            if "auth" in error_str or "401" in error_str or "api key" in error_str:
                raise AuthenticationError(f"Claude authentication failed: {e}")

            raise TransportError(f"Claude API error: {e}")

        content = ""
        for block in response.content or []:
            if getattr(block, "type", "text") == "text":
                content += getattr(block, "text", "")

        if content:
            messages.append({"role": "assistant", "content": content})
        else:
            # The API rejects empty assistant turns in later requests
            messages.pop()
        logger.debug(f"Claude agent {agent_id} replied with {len(content)} chars")

        return AgentCallResult(
            success=True,
            response={"result": {"text": content}},
            raw_response=content,
        )
