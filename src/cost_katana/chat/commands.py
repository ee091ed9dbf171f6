"""Classification of REPL input into built-in session commands."""

from __future__ import annotations

from enum import Enum


class SessionCommand(str, Enum):
    """What a line of session input asks for."""

    EXIT = "exit"
    HELP = "help"
    CLEAR = "clear"
    HISTORY = "history"
    STATS = "stats"
    MESSAGE = "message"
    EMPTY = "empty"


EXIT_WORDS = frozenset({"quit", "exit", "bye", "q"})

# Checked in this order; the first match wins.
_KEYWORDS: tuple[tuple[SessionCommand, frozenset[str]], ...] = (
    (SessionCommand.EXIT, EXIT_WORDS),
    (SessionCommand.HELP, frozenset({"help"})),
    (SessionCommand.CLEAR, frozenset({"clear"})),
    (SessionCommand.HISTORY, frozenset({"history"})),
    (SessionCommand.STATS, frozenset({"stats"})),
)

# (command, description) pairs shown by the help command
COMMAND_REFERENCE: list[tuple[str, str]] = [
    ("help", "Show this help message"),
    ("clear", "Clear conversation history"),
    ("history", "Show conversation history"),
    ("stats", "Show session statistics"),
    ("quit/exit", "End the session"),
]


def classify(line: str) -> SessionCommand:
    """Classify one line of user input.

    Matching is case-insensitive after trimming surrounding whitespace.
    Blank input maps to EMPTY; anything that is not a built-in command is a
    chat MESSAGE.

    Example:
        >>> classify("  Stats ")
        <SessionCommand.STATS: 'stats'>
        >>> classify("What is 2+2?")
        <SessionCommand.MESSAGE: 'message'>
    """
    normalized = line.strip().lower()
    if not normalized:
        return SessionCommand.EMPTY

    for command, words in _KEYWORDS:
        if normalized in words:
            return command

    return SessionCommand.MESSAGE
