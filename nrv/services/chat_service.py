"""
Chat proxy service.

Forwards a prompt to an Ollama-compatible /api/generate endpoint and yields
the text chunks of its streamed NDJSON reply.
"""

import json
import logging
from typing import Iterator, Optional

import httpx

from .base import BaseService, ServiceContext
from ..errors import ChatError

logger = logging.getLogger(__name__)


class ChatService(BaseService):
    """Client for the upstream chat model."""

    def __init__(self, context: ServiceContext, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the chat client.

        Args:
            context: Shared service context
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        super().__init__(context)
        self._client = httpx.Client(timeout=self.config.chat.timeout_seconds, transport=transport)

    def stream(self, prompt: str) -> Iterator[str]:
        """
        Start a streamed generation.

        The upstream connection is opened before returning, so connection
        and status errors surface here rather than mid-stream.

        Args:
            prompt: User prompt

        Returns:
            Iterator over response text chunks

        Raises:
            ChatError: If the upstream is unreachable or answers with an error
        """
        payload = {"model": self.config.chat.model, "prompt": prompt, "stream": True}
        request = self._client.build_request("POST", self.config.chat.url, json=payload)

        try:
            response = self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Chat upstream unreachable: {e}")
            raise ChatError("Chat upstream unreachable") from e

        if response.is_error:
            response.close()
            logger.error(f"Chat upstream returned {response.status_code}")
            raise ChatError(f"Chat upstream returned {response.status_code}")

        return self._iter_chunks(response)

    def _iter_chunks(self, response: httpx.Response) -> Iterator[str]:
        try:
            for line in response.iter_lines():
                if not line.strip():
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(data, dict):
                    continue

                chunk = data.get("response", "")
                if chunk:
                    yield chunk
                if data.get("done"):
                    break
        except httpx.HTTPError as e:
            logger.warning(f"Chat stream interrupted: {e}")
        finally:
            response.close()

    def close(self):
        """Close the HTTP client."""
        self._client.close()
