"""In-memory state for one interactive chat session.

The transcript always starts with exactly one system message. It only grows
by appending, except for ``clear()`` which truncates it back to that system
message. Nothing here is persisted; ``to_dict()`` exists so a finished
session can be exported.

Example:
    ```python
    state = SessionState(model="gpt-4", temperature=0.7)
    state.add_user_message("Hello")
    state.add_assistant_message("Hi!", cost=0.002, tokens=15)
    state.total_cost  # 0.002
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


class Role(str, Enum):
    """Author of a transcript message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """One conversation turn.

    Attributes:
        role: Who wrote the message.
        content: Message text.
        timestamp: When the message was created.
        cost: Cost reported by the endpoint. None means unknown, which is
            different from a known zero cost.
        tokens: Token count reported by the endpoint, None if unknown.
    """

    role: Role
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    cost: float | None = None
    tokens: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "cost": self.cost,
            "tokens": self.tokens,
        }


@dataclass
class SessionState:
    """Transcript plus the parameters the session was started with.

    Attributes:
        model: Model identifier sent as ``modelId``.
        temperature: Sampling temperature (0.0-2.0).
        system_prompt: Content of the leading system message.
        history_enabled: Recorded for display; does not change the payload.
        max_tokens: ``maxTokens`` sent with every request.
    """

    model: str
    temperature: float = DEFAULT_TEMPERATURE
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    history_enabled: bool = True
    max_tokens: int = DEFAULT_MAX_TOKENS
    messages: list[Message] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}, "
                f"got {self.temperature}"
            )
        self.messages.append(Message(role=Role.SYSTEM, content=self.system_prompt))

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_user_message(self, content: str) -> Message:
        message = Message(role=Role.USER, content=content)
        self.messages.append(message)
        return message

    def add_assistant_message(
        self,
        content: str,
        *,
        cost: float | None = None,
        tokens: int | None = None,
    ) -> Message:
        message = Message(role=Role.ASSISTANT, content=content, cost=cost, tokens=tokens)
        self.messages.append(message)
        return message

    def clear(self) -> None:
        """Drop every message except the leading system message."""
        del self.messages[1:]

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def system_message(self) -> Message:
        return self.messages[0]

    @property
    def conversation(self) -> list[Message]:
        """Messages after the system message, in transcript order."""
        return self.messages[1:]

    @property
    def user_message_count(self) -> int:
        return sum(1 for m in self.messages if m.role is Role.USER)

    @property
    def assistant_message_count(self) -> int:
        return sum(1 for m in self.messages if m.role is Role.ASSISTANT)

    @property
    def total_cost(self) -> float:
        return sum(m.cost or 0.0 for m in self.messages)

    @property
    def total_tokens(self) -> int:
        return sum(m.tokens or 0 for m in self.messages)

    def to_dict(self) -> dict[str, Any]:
        """Export the session as a JSON-serializable dict."""
        return {
            "model": self.model,
            "temperature": self.temperature,
            "systemPrompt": self.system_prompt,
            "historyEnabled": self.history_enabled,
            "maxTokens": self.max_tokens,
            "messages": [m.to_dict() for m in self.messages],
            "totals": {
                "cost": self.total_cost,
                "tokens": self.total_tokens,
            },
        }
