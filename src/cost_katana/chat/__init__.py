"""Interactive chat: session state, command dispatch, endpoint client and REPL controller."""

from cost_katana.chat.client import ChatClient, ChatReply
from cost_katana.chat.commands import SessionCommand, classify
from cost_katana.chat.controller import ChatController, SessionPhase
from cost_katana.chat.session import Message, Role, SessionState

__all__ = [
    "ChatClient",
    "ChatController",
    "ChatReply",
    "Message",
    "Role",
    "SessionCommand",
    "SessionPhase",
    "SessionState",
    "classify",
]
