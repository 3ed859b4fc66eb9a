"""Classifies a line typed at the chat prompt.

A line is either text for the model or a slash command. ``//`` escapes a
prompt that really starts with a slash.
"""

from enum import Enum
from typing import NamedTuple

COMMAND_PREFIX = "/"

COMMAND_ALIASES = {
    "exit": "quit",
    "q": "quit",
    "?": "help",
    "ls": "chats",
    "rm": "delete",
    "switch": "open",
}


def resolve_command(name: str) -> str:
    return COMMAND_ALIASES.get(name.lower(), name.lower())


class RouteKind(str, Enum):
    PROMPT = "prompt"
    COMMAND = "command"
    UNKNOWN = "unknown"


class Route(NamedTuple):
    kind: RouteKind
    text: str
    command: str | None = None


class InputRouter:
    def __init__(self, builtins):
        self.builtins = builtins

    def route(self, line: str) -> Route:
        if not line.startswith(COMMAND_PREFIX):
            return Route(RouteKind.PROMPT, line)
        if line.startswith(COMMAND_PREFIX * 2):
            return Route(RouteKind.PROMPT, line[1:])

        head, _, rest = line[1:].strip().partition(" ")
        name = resolve_command(head)
        kind = RouteKind.COMMAND if self.builtins.has_command(name) else RouteKind.UNKNOWN
        return Route(kind, rest.strip(), name)
