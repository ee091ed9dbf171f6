"""Exception hierarchy for cost-katana.

All cost-katana exceptions inherit from CostKatanaError. Per-turn chat
failures inherit from ChatError so the session loop can contain them in one
place; ConfigurationError is the only error that ends a session.
"""

from __future__ import annotations


class CostKatanaError(Exception):
    """Base exception for all cost-katana errors."""


class ConfigurationError(CostKatanaError):
    """Raised when required configuration (API key, base URL) is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Configuration incomplete: missing {', '.join(self.missing)}. "
            "Run 'cost-katana init' to set up your API key and base URL."
        )


class InvalidConfigValue(CostKatanaError):
    """Raised when a configuration key is unknown or its value fails validation."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"{key}: {reason}")


class ChatError(CostKatanaError):
    """Base for failures of a single chat turn.

    A ChatError never corrupts the transcript; the user can simply retry.
    """


class ChatTransportError(ChatError):
    """Raised when no response was received (connection error, timeout)."""


class ChatAPIError(ChatError):
    """Raised when the endpoint answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(message)


class ChatResponseError(ChatError):
    """Raised when a response arrives but is not a successful envelope."""
