"""Interactive chat session controller.

Owns the read-eval loop of ``cost-katana chat``:

    STARTING -> PROMPTING -> DISPATCHING -> LOCAL | AWAITING_RESPONSE -> PROMPTING ... -> ENDING

Reading a line of input is the only place the loop waits on the user; the
network call blocks it behind a spinner. A turn that fails for any reason,
including Ctrl-C while a request is in flight, is reported and discarded, so
the session only ends on an exit command or end of input. The summary and
export run on every way out of the loop. Missing configuration is the one
fatal error and is raised before any request is made.

Example:
    ```python
    controller = ChatController.from_config(store, model="gpt-4")
    state = controller.run()
    print(state.total_cost)
    ```
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from rich.prompt import Prompt

from cost_katana.chat.client import DEFAULT_TIMEOUT, ChatClient, ChatReply
from cost_katana.chat.commands import SessionCommand, classify
from cost_katana.chat.session import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    SessionState,
)
from cost_katana.cli import output
from cost_katana.cli.console import get_console, print_error, print_success, status_spinner
from cost_katana.errors import ChatError, ConfigurationError

if TYPE_CHECKING:
    import httpx
    from rich.console import Console

log = logging.getLogger(__name__)

REQUIRED_SETTINGS = ("apiKey", "baseUrl")
DEFAULT_MODEL = "gpt-4"


class SessionPhase(str, Enum):
    """Where the controller is in its loop."""

    STARTING = "starting"
    PROMPTING = "prompting"
    DISPATCHING = "dispatching"
    LOCAL = "local"
    AWAITING_RESPONSE = "awaiting_response"
    ENDING = "ending"


class ChatEndpoint(Protocol):
    """Anything that can answer one chat message (ChatClient in production)."""

    def send_message(
        self, message: str, *, model: str, temperature: float, max_tokens: int
    ) -> ChatReply: ...

    def close(self) -> None: ...


class SettingsSource(Protocol):
    """Read side of the configuration store."""

    def get(self, key: str) -> Any: ...


class ChatController:
    """Drives one interactive chat session.

    Args:
        state: Fresh session state (transcript holding only the system message).
        endpoint: Chat endpoint used for every message turn.
        console: Console for all output. Defaults to the themed singleton.
        reader: Returns one line of user input; raises EOFError at end of input.
        output_path: If set, the transcript is written there as JSON on exit.
    """

    def __init__(
        self,
        state: SessionState,
        endpoint: ChatEndpoint,
        *,
        console: Console | None = None,
        reader: Callable[[], str] | None = None,
        output_path: Path | None = None,
    ) -> None:
        self.state = state
        self.endpoint = endpoint
        self.console = console or get_console()
        self._reader = reader or self._prompt
        self.output_path = output_path
        self.phase = SessionPhase.STARTING

    @classmethod
    def from_config(
        cls,
        config: SettingsSource,
        *,
        model: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        system_prompt: str | None = None,
        history_enabled: bool = True,
        max_tokens: int | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        **kwargs: Any,
    ) -> ChatController:
        """Build a controller from stored settings.

        Raises:
            ConfigurationError: If the API key or base URL is not configured.
                Raised before any client is created.
        """
        missing = [key for key in REQUIRED_SETTINGS if not config.get(key)]
        if missing:
            raise ConfigurationError(missing)

        state = SessionState(
            model=model or config.get("defaultModel") or DEFAULT_MODEL,
            temperature=temperature,
            system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
            history_enabled=history_enabled,
            max_tokens=max_tokens or config.get("defaultMaxTokens") or DEFAULT_MAX_TOKENS,
        )
        client = ChatClient(
            api_key=config.get("apiKey"),
            base_url=config.get("baseUrl"),
            timeout=timeout,
            transport=transport,
        )
        return cls(state, client, **kwargs)

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    def run(self) -> SessionState:
        """Run the loop until an exit command or end of input.

        Returns:
            The final session state.
        """
        output.print_welcome(self.state, console=self.console)
        try:
            while True:
                self.phase = SessionPhase.PROMPTING
                try:
                    line = self._reader()
                except (EOFError, KeyboardInterrupt):
                    self.console.print()
                    break

                try:
                    if not self.handle(line):
                        break
                except Exception as e:
                    # a single bad turn must not end the session
                    log.debug("Unexpected error in chat turn", exc_info=True)
                    log.error(f"Error in chat session: {e}")
                    print_error("An error occurred. Please try again.", console=self.console)
        finally:
            self.phase = SessionPhase.ENDING
            self.endpoint.close()
            self._end()

        return self.state

    def handle(self, line: str) -> bool:
        """Process one line of input.

        Returns:
            False when the session should end, True otherwise.
        """
        self.phase = SessionPhase.DISPATCHING
        command = classify(line)

        if command is SessionCommand.EXIT:
            return False
        if command is SessionCommand.EMPTY:
            return True
        if command is SessionCommand.MESSAGE:
            self.phase = SessionPhase.AWAITING_RESPONSE
            self.send(line.strip())
            return True

        self.phase = SessionPhase.LOCAL
        if command is SessionCommand.HELP:
            output.print_help(console=self.console)
        elif command is SessionCommand.CLEAR:
            self.state.clear()
            output.print_cleared(console=self.console)
        elif command is SessionCommand.HISTORY:
            output.print_history(self.state, console=self.console)
        elif command is SessionCommand.STATS:
            output.print_stats(self.state, console=self.console)
        return True

    def send(self, content: str) -> ChatReply | None:
        """Send a chat message and record the reply.

        The user message is kept even when the request fails; the assistant
        message is only added on success.

        Returns:
            The reply, or None if the turn failed.
        """
        self.state.add_user_message(content)

        # Only the latest message goes over the wire; the backend keeps no
        # conversation and history_enabled does not change the payload.
        try:
            with status_spinner("AI is thinking...", console=self.console):
                reply = self.endpoint.send_message(
                    content,
                    model=self.state.model,
                    temperature=self.state.temperature,
                    max_tokens=self.state.max_tokens,
                )
        except ChatError as e:
            log.warning(f"Chat request failed: {e}")
            output.print_turn_failed(str(e), console=self.console)
            return None
        except KeyboardInterrupt:
            log.info("Chat request interrupted")
            output.print_turn_failed("Interrupted.", console=self.console)
            return None

        self.state.add_assistant_message(reply.content, cost=reply.cost, tokens=reply.tokens)
        output.print_reply(reply, model=self.state.model, console=self.console)
        return reply

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _prompt(self) -> str:
        return Prompt.ask("[chat.user]You[/]", console=self.console)

    def _end(self) -> None:
        output.print_summary(self.state, console=self.console)
        if self.output_path is not None:
            self.export(self.output_path)

    def export(self, path: Path) -> bool:
        """Write the transcript to ``path`` as JSON. Returns False on failure."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(self.state.to_dict(), f, indent=2)
        except OSError as e:
            log.error(f"Failed to save conversation to {path}: {e}")
            print_error(f"Could not save conversation to {path}", console=self.console)
            return False
        print_success(f"Conversation saved to {path}", console=self.console)
        return True
