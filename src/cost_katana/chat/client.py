"""HTTP client for the cost-katana chat endpoint.

Sends one message per call to ``POST {base_url}/api/chat/message`` and turns
the backend's ``{success, data}`` envelope into a ChatReply. Retries are the
backend's job, so every call is a single attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from cost_katana.errors import ChatAPIError, ChatResponseError, ChatTransportError

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat/message"
DEFAULT_TIMEOUT = 30.0

_INVALID_FORMAT = "Invalid response format"


@dataclass(frozen=True)
class ChatReply:
    """A successful endpoint response."""

    content: str
    cost: float
    tokens: int


def _error_message(response: httpx.Response) -> str | None:
    """Pull the ``message`` field out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


# =============================================================================
# Pydantic Schema for the Response Envelope
# =============================================================================


class ChatResponseData(BaseModel):
    """``data`` member of a successful chat response."""

    response: str | None = None
    cost: float | None = None
    tokenCount: int | None = None


class ChatEnvelope(BaseModel):
    """Top-level body returned by ``/api/chat/message``."""

    success: bool = False
    data: ChatResponseData | None = None
    message: str | None = None


def parse_envelope(body: Any) -> ChatReply:
    """Convert a decoded response body into a ChatReply.

    Missing cost and token figures count as zero; a missing response text
    becomes a placeholder.

    Raises:
        ChatResponseError: If the body is not ``{success: true, data: {...}}``.
    """
    if not isinstance(body, dict):
        raise ChatResponseError(_INVALID_FORMAT)

    try:
        envelope = ChatEnvelope.model_validate(body)
    except ValidationError as e:
        raise ChatResponseError(_INVALID_FORMAT) from e

    if not envelope.success or envelope.data is None:
        raise ChatResponseError(envelope.message or _INVALID_FORMAT)

    data = envelope.data
    return ChatReply(
        content=data.response or "No response received",
        cost=data.cost or 0.0,
        tokens=data.tokenCount or 0,
    )


class ChatClient:
    """Sync httpx client for the chat endpoint.

    Usage::

        with ChatClient(api_key="ck-...", base_url="https://backend") as client:
            reply = client.send_message("Hello", model="gpt-4", temperature=0.7,
                                        max_tokens=2000)
            print(reply.content, reply.cost)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Bearer token for the backend.
            base_url: Backend root URL; a trailing slash is ignored.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
        )

    @property
    def url(self) -> str:
        return f"{self._base_url}{CHAT_PATH}"

    def send_message(
        self,
        message: str,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> ChatReply:
        """Send one message and return the parsed reply.

        Raises:
            ChatTransportError: No response was received (connection error, timeout).
            ChatAPIError: The endpoint answered with a non-2xx status.
            ChatResponseError: The response was not a successful envelope.
        """
        payload = {
            "modelId": model,
            "message": message,
            "temperature": temperature,
            "maxTokens": max_tokens,
        }
        logger.debug(f"POST {self.url} model={model} chars={len(message)}")

        try:
            response = self._client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise ChatTransportError(f"Request timed out after {self._timeout:g}s") from e
        except httpx.TransportError as e:
            raise ChatTransportError(f"No response from {self._base_url}: {e}") from e

        if not response.is_success:
            message_text = _error_message(response) or f"API returned status {response.status_code}"
            raise ChatAPIError(message_text, status_code=response.status_code)

        if response.status_code != 200:
            raise ChatResponseError(f"API returned status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise ChatResponseError(_INVALID_FORMAT) from e

        return parse_envelope(body)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ChatClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
