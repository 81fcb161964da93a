"""Text matchers used by tag definitions and routing heuristics.

A matcher is anything with a ``matches(text) -> bool`` method.  The classifier
never looks past that method, so regexes can be swapped for other matchers
without touching it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol

from glowup.errors import CatalogError

SUBSTRING_PREFIX = "substr:"


class Matcher(Protocol):
    """Coarse text test; false positives and negatives are acceptable."""

    def matches(self, text: str) -> bool:
        ...


@dataclass(frozen=True)
class RegexMatcher:
    """Case-insensitive regular-expression search."""

    pattern: str
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern, re.IGNORECASE)
        except re.error as exc:
            raise CatalogError(f"Invalid pattern {self.pattern!r}: {exc}") from exc
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, text: str) -> bool:
        return self._compiled.search(text) is not None


@dataclass(frozen=True)
class SubstringMatcher:
    """Case-insensitive plain substring test."""

    needle: str

    def matches(self, text: str) -> bool:
        return self.needle.lower() in text.lower()


def compile_pattern(raw: str) -> Matcher:
    """Turn a catalog pattern string into a matcher.

    ``substr:<text>`` yields a :class:`SubstringMatcher`; anything else is
    compiled as a regex.
    """
    if raw.startswith(SUBSTRING_PREFIX):
        needle = raw[len(SUBSTRING_PREFIX):]
        if not needle:
            raise CatalogError("Empty substring pattern")
        return SubstringMatcher(needle)
    return RegexMatcher(raw)


def any_match(matchers: tuple[Matcher, ...] | list[Matcher], text: str) -> bool:
    """True if any matcher accepts *text*; stops at the first hit."""
    return any(m.matches(text) for m in matchers)
