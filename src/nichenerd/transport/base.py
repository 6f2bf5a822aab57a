"""
Base protocol for agent transports

Defines the request/reply interface used to reach the quiz master and
scorecard agents, plus the result record every transport returns.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class TransportError(Exception):
    """Base exception for transport errors."""
    pass


class RateLimitError(TransportError):
    """Rate limit exceeded."""
    pass


class AuthenticationError(TransportError):
    """Authentication failed."""
    pass


@dataclass
class AgentCallResult:
    """
    Result of one agent call.

    Only ``success`` is guaranteed. Everything else is whatever the agent
    platform sent back and is read tolerantly by the normalizer.
    """
    success: bool
    response: Optional[Any] = None
    raw_response: Optional[Any] = None
    module_outputs: Optional[Any] = None
    error: Optional[str] = None

    @property
    def artifact_urls(self) -> List[str]:
        """File URLs of generated artifacts, in the order the agent listed them."""
        outputs = self.module_outputs
        if not isinstance(outputs, Mapping):
            return []
        files = outputs.get("artifact_files")
        if not isinstance(files, list):
            return []

        urls = []
        for item in files:
            if isinstance(item, Mapping):
                url = item.get("file_url")
                if isinstance(url, str) and url:
                    urls.append(url)
        return urls

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "response": self.response,
            "raw_response": self.raw_response,
            "module_outputs": self.module_outputs,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "AgentCallResult":
        """Build from a decoded payload without trusting any field's type."""
        error = data.get("error")
        return cls(
            success=data.get("success") is True,
            response=data.get("response"),
            raw_response=data.get("raw_response"),
            module_outputs=data.get("module_outputs"),
            error=error if isinstance(error, str) else None,
        )


class AgentTransport(ABC):
    """
    Abstract base class for agent transports.

    The remote agent keeps its own conversation state keyed by the
    ``user_id``/``session_id`` pair passed in ``context``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Transport name (e.g., 'http', 'claude')."""
        pass

    @abstractmethod
    async def call(
        self,
        prompt: str,
        agent_id: str,
        context: Optional[Dict[str, str]] = None,
    ) -> AgentCallResult:
        """
        Send one message to an agent and wait for its reply.

        Args:
            prompt: Message text for the agent
            agent_id: Which agent capability to address
            context: Correlation ids (``user_id``, ``session_id``)

        Returns:
            AgentCallResult; ``success`` is False when the agent reported a failure

        Raises:
            TransportError: When the agent could not be reached
        """
        pass

    async def close(self):
        """Release network resources."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
