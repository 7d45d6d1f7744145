"""Completion grammar inputs: word delimiters and argument-aware completers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from .sqlintel import MAX_SUGGESTIONS, SqlIntelService


class WordDelimiter:
    """Splits a buffer into words the way SQL identifiers are delimited.

    A character is a delimiter unless it is a letter, a digit, an underscore
    or one of the dialect's extra name characters.
    """

    def __init__(self, extra_name_characters: str = "") -> None:
        self.extra_name_characters = extra_name_characters

    def is_delimiter(self, buffer: str, pos: int) -> bool:
        char = buffer[pos]
        if char.isspace():
            return True
        return not char.isalnum() and char != "_" and char not in self.extra_name_characters

    def delimit(self, buffer: str, cursor: int) -> "ArgumentList":
        arguments: list[str] = []
        current: list[str] = []
        cursor_argument = -1
        argument_cursor = -1
        for pos in range(len(buffer)):
            if pos == cursor:
                cursor_argument = len(arguments)
                argument_cursor = len(current)
            if self.is_delimiter(buffer, pos):
                if current:
                    arguments.append("".join(current))
                    current = []
            else:
                current.append(buffer[pos])
        if cursor == len(buffer):
            cursor_argument = len(arguments)
            argument_cursor = len(current)
        if current:
            arguments.append("".join(current))
        return ArgumentList(tuple(arguments), cursor_argument, argument_cursor)


@dataclass(frozen=True, slots=True)
class ArgumentList:
    arguments: tuple[str, ...]
    cursor_argument: int
    argument_cursor: int

    @property
    def cursor_word(self) -> str:
        if 0 <= self.cursor_argument < len(self.arguments):
            return self.arguments[self.cursor_argument]
        return ""


@dataclass(frozen=True, slots=True)
class Completion:
    """Candidates for the word under the cursor, replacing text from ``start``."""

    candidates: tuple[str, ...]
    start: int


class Completer(Protocol):
    def complete(self, word: str, *, context: str = "") -> list[str]: ...


class SqlCompleter:
    """Completes SQL keywords plus table and column names from the schema cache."""

    def __init__(self, service: SqlIntelService) -> None:
        self._service = service

    def complete(self, word: str, *, context: str = "") -> list[str]:
        prefix = word.casefold()
        candidates: list[str] = []
        for suggestion in self._service.suggest(context, len(context)):
            label = suggestion.label
            if _matches(label, prefix) and label not in candidates:
                candidates.append(label)
            if len(candidates) >= MAX_SUGGESTIONS:
                break
        return candidates


class ArgumentCompleter:
    """Picks a completer per argument position.

    When ``strict`` every argument before the cursor must itself be a
    candidate of its position's completer; otherwise only the word under
    the cursor is considered.
    """

    def __init__(self, delimiter: WordDelimiter, *completers: Completer, strict: bool = True) -> None:
        if not completers:
            raise ValueError("ArgumentCompleter needs at least one completer.")
        self.delimiter = delimiter
        self.completers: tuple[Completer, ...] = completers
        self.strict = strict

    def complete(self, buffer: str, cursor: int | None = None) -> Completion:
        if cursor is None:
            cursor = len(buffer)
        args = self.delimiter.delimit(buffer, cursor)
        if args.cursor_argument < 0:
            return Completion((), cursor)
        if self.strict and not self._preceding_arguments_match(args, buffer[:cursor]):
            return Completion((), cursor)
        completer = self._completer_at(args.cursor_argument)
        prefix = args.cursor_word[: args.argument_cursor]
        candidates = completer.complete(prefix, context=buffer[:cursor])
        return Completion(tuple(candidates), cursor - len(prefix))

    def _preceding_arguments_match(self, args: ArgumentList, context: str) -> bool:
        for idx in range(args.cursor_argument):
            argument = args.arguments[idx]
            if argument not in self._completer_at(idx).complete(argument, context=context):
                return False
        return True

    def _completer_at(self, index: int) -> Completer:
        return self.completers[min(index, len(self.completers) - 1)]


def _matches(label: str, prefix: str) -> bool:
    if not prefix:
        return True
    folded = label.casefold()
    if folded.startswith(prefix):
        return True
    # quoted identifiers match on their unquoted text
    return bool(folded) and not folded[0].isalnum() and folded[1:].startswith(prefix)


def apply_completion(buffer: str, completion: Completion, candidate: str) -> str:
    """Replace the word under the cursor with ``candidate``."""

    end = completion.start
    while end < len(buffer) and not buffer[end].isspace():
        end += 1
    return buffer[: completion.start] + candidate + buffer[end:]


__all__ = [
    "ArgumentCompleter",
    "ArgumentList",
    "Completer",
    "Completion",
    "SqlCompleter",
    "WordDelimiter",
    "apply_completion",
]
