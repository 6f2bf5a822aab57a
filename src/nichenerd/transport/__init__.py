"""
Agent transports for nichenerd

All transports share one interface: send a message to an agent, get an
AgentCallResult back.
Transports: hosted agent platform (HTTP), Claude (Anthropic), mock
"""

from .base import (
    AgentTransport, AgentCallResult, TransportError, RateLimitError,
    AuthenticationError,
)
from .http import HttpAgentTransport
from .claude import ClaudeAgentTransport
from .mock import MockAgentTransport, quiz_reply

__all__ = [
    # Base classes and types
    "AgentTransport",
    "AgentCallResult",
    "TransportError",
    "RateLimitError",
    "AuthenticationError",
    # Transports
    "HttpAgentTransport",
    "ClaudeAgentTransport",
    "MockAgentTransport",
    "quiz_reply",
]


def get_transport(name: str, **kwargs) -> AgentTransport:
    """
    Factory function to get a transport by name.

    Args:
        name: Transport name ('http', 'claude', 'mock')
        **kwargs: Transport-specific options

    Returns:
        Configured AgentTransport instance

    Raises:
        ValueError: If transport name is unknown
    """
    transports = {
        "http": HttpAgentTransport,
        "claude": ClaudeAgentTransport,
        "mock": MockAgentTransport,
    }

    if name not in transports:
        raise ValueError(f"Unknown transport: {name}. Valid options: {list(transports.keys())}")

    return transports[name](**kwargs)
