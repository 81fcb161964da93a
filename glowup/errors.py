"""Exception hierarchy for the GlowUp triage engine."""

from __future__ import annotations


class GlowupError(Exception):
    """Base class for every error raised by the engine."""


class InvariantViolation(GlowupError, AssertionError):
    """Session state broke one of its invariants.

    Never expected at runtime; raised loudly so corruption surfaces early.
    """


class UnknownTagError(GlowupError, KeyError):
    """A tag id was referenced that the rule catalog does not define."""

    def __init__(self, tag_id: str) -> None:
        super().__init__(tag_id)
        self.tag_id = tag_id

    def __str__(self) -> str:
        return f"Unknown tag: {self.tag_id!r}"


class CatalogError(GlowupError, ValueError):
    """A rule catalog file could not be parsed into tag definitions."""


class SafetyLockError(GlowupError):
    """AI-drafted content was offered while the session's safety lock is on."""


class GenerationError(GlowupError):
    """The drafting model failed to produce a reply.

    ``retryable`` tells the operator surface whether a retry makes sense.
    """

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class UnknownScriptError(GlowupError, KeyError):
    """An operator script key that is not in the script table."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown script: {self.key!r}"
