# bundler/assets/directives.py
from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "Directive",
    "DIRECTIVES_WITH_TARGET",
    "Command",
    "RawCommand",
    "normalizeCommand",
    "isComment",
]



class Directive(str, Enum):
    APPEND = "append"
    PREPEND = "prepend"
    AFTER = "after"
    BEFORE = "before"
    REMOVE = "remove"
    REPLACE = "replace"
    INCLUDE = "include"

    @property
    def needsTarget(self) -> bool:
        return self in DIRECTIVES_WITH_TARGET



DIRECTIVES_WITH_TARGET = frozenset({Directive.AFTER, Directive.BEFORE, Directive.REPLACE})

RawCommand = str | Sequence[str]



@dataclass(frozen=True, slots=True)
class Command:
    """A normalized asset instruction: directive, optional target, path expression."""
    directive: Directive
    target: str | None
    path: str



def isComment(command: RawCommand) -> bool:
    return isinstance(command, str) and command.startswith("#")



def normalizeCommand(command: RawCommand) -> Command:
    """
    Parses a manifest command into a Command.

    Accepted forms:
        "base/static/src/app.js"                            -> append, no target
        ["prepend", "base/static/src/boot.js"]
        ["include", "web.assets_common"]
        ["after", "base/static/src/app.js", "mine/x.js"]    -> directive, target, path
    """
    if isinstance(command, str):
        return Command(Directive.APPEND, None, command)

    parts = list(command)
    if not parts:
        raise ValueError("Empty asset command")
    try:
        directive = Directive(parts[0])
    except ValueError:
        raise ValueError(f"Unknown asset directive {parts[0]!r} in command {parts!r}") from None

    if directive.needsTarget:
        if len(parts) != 3:
            raise ValueError(f"Directive {directive.value!r} expects [directive, target, path], got {parts!r}")
        _directive, target, path = parts
        return Command(directive, target, path)

    if len(parts) != 2:
        raise ValueError(f"Directive {directive.value!r} expects [directive, path], got {parts!r}")
    return Command(directive, None, parts[1])
