"""
HTTP agent transport

Posts messages to the agent platform's REST endpoint. The endpoint answers
with the ``{success, response, raw_response, module_outputs, error}``
envelope that AgentCallResult mirrors.
"""

import logging
from typing import Dict, Optional

import httpx

from .base import (
    AgentTransport, AgentCallResult, TransportError, RateLimitError,
    AuthenticationError,
)
from ..config import config

logger = logging.getLogger(__name__)


class HttpAgentTransport(AgentTransport):
    """
    Agent platform over HTTP.

    Endpoint and key are read from:
    1. Constructor arguments
    2. AGENT_API_URL / AGENT_API_KEY environment variables (via config)
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize HTTP transport.

        Args:
            api_url: Agent endpoint URL
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            client: Pre-built client (tests pass one with a mock transport)
        """
        self._api_url = api_url or config.agents.api_url
        self._api_key = api_key if api_key is not None else config.agents.api_key
        self._timeout = timeout or config.agents.timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(headers=headers, timeout=self._timeout)
        return self._client

    @property
    def name(self) -> str:
        return "http"

    async def call(
        self,
        prompt: str,
        agent_id: str,
        context: Optional[Dict[str, str]] = None,
    ) -> AgentCallResult:
        """Send a message to the agent endpoint."""
        client = self._get_client()

        payload = {"message": prompt, "agent_id": agent_id}
        if context:
            payload.update(context)

        try:
            response = await client.post(self._api_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError(f"Agent rate limit exceeded: {e}")
            if e.response.status_code in (401, 403):
                raise AuthenticationError(f"Agent authentication failed: {e}")
            raise TransportError(f"Agent API error: {e}")
        except httpx.HTTPError as e:
            raise TransportError(f"Agent request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            # Some deployments answer with bare text; hand it on for the normalizer
            logger.debug("Agent endpoint returned a non-JSON body")
            return AgentCallResult(success=True, raw_response=response.text)

        if not isinstance(data, dict):
            return AgentCallResult(success=True, raw_response=response.text)

        return AgentCallResult.from_dict(data)

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
