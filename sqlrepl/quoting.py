"""Identifier quoting rules and their detection from driver metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, ClassVar

from .errors import UnsupportedQuotingError

LOG = logging.getLogger(__name__)

NUL = "\0"

QuotingErrorHandler = Callable[[UnsupportedQuotingError], None]


@dataclass(frozen=True, slots=True)
class IdentifierQuoting:
    """How a dialect delimits identifiers, e.g. ``"My Table"`` or ``[My Table]``."""

    start: str
    end: str
    upper: bool

    DEFAULT: ClassVar[IdentifierQuoting]
    NONE: ClassVar[IdentifierQuoting]

    @property
    def enabled(self) -> bool:
        return self.start != NUL

    def quote(self, name: str) -> str:
        """Wrap ``name`` in quote characters, doubling any embedded end quote."""

        if not self.enabled:
            return name
        escaped = name.replace(self.end, self.end * 2)
        return f"{self.start}{escaped}{self.end}"

    def needs_quoting(self, name: str, extra_name_characters: str = "") -> bool:
        """Whether ``name`` would be altered or split if written bare."""

        if not name:
            return False
        if name[0].isdigit():
            return True
        for char in name:
            if not (char.isalnum() or char == "_" or char in extra_name_characters):
                return True
        folded = name.upper() if self.upper else name.lower()
        return folded != name

    def quote_if_needed(self, name: str, extra_name_characters: str = "") -> str:
        if self.enabled and self.needs_quoting(name, extra_name_characters):
            return self.quote(name)
        return name


IdentifierQuoting.DEFAULT = IdentifierQuoting('"', '"', False)
IdentifierQuoting.NONE = IdentifierQuoting(NUL, NUL, False)


def detect_quoting(
    quote: str | None,
    upper: bool,
    product_name: str | None,
    *,
    on_error: QuotingErrorHandler | None = None,
) -> IdentifierQuoting:
    """Derive the quoting rule from what a driver reports.

    Pure apart from the optional ``on_error`` callback, which receives an
    :class:`UnsupportedQuotingError` when the quote string has more than one
    character. The result in that case is :attr:`IdentifierQuoting.DEFAULT`.
    """

    if quote is None or quote in ("", " "):
        # Some MySQL drivers report no quote string even though backticks work.
        if (product_name or "").startswith("MySQL"):
            return IdentifierQuoting("`", "`", upper)
        return IdentifierQuoting.NONE
    if quote == "[":
        return IdentifierQuoting("[", "]", upper)
    if len(quote) > 1:
        error = UnsupportedQuotingError(quote)
        LOG.warning(str(error), extra={"quote": quote, "product": product_name})
        if on_error is not None:
            on_error(error)
        return IdentifierQuoting.DEFAULT
    return IdentifierQuoting(quote, quote, upper)


__all__ = ["IdentifierQuoting", "NUL", "detect_quoting"]
