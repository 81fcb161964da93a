"""Session tag state: confirmed (``active``) and detected-but-unconfirmed (``suggested``) tags.

Both transitions return a new :class:`TagState`; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from glowup.errors import InvariantViolation
from glowup.triage.catalog import RuleCatalog


@dataclass(frozen=True)
class TagUpdate:
    """What a call to :meth:`TagState.apply_matches` changed."""

    newly_active_high: frozenset[str] = frozenset()
    newly_suggested: frozenset[str] = frozenset()


@dataclass(frozen=True)
class TagState:
    active: frozenset[str] = field(default_factory=frozenset)
    suggested: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        overlap = self.active & self.suggested
        if overlap:
            raise InvariantViolation(
                f"Tags both active and suggested: {sorted(overlap)}"
            )

    def is_active(self, tag_id: str) -> bool:
        return tag_id in self.active

    def is_suggested(self, tag_id: str) -> bool:
        return tag_id in self.suggested

    def apply_matches(
        self, matches: Iterable[str], catalog: RuleCatalog
    ) -> tuple[TagState, TagUpdate]:
        """Fold classifier output into the session state.

        High-severity matches skip the suggestion step and go straight to
        ``active``.  Medium and low matches land in ``suggested`` unless they
        are already active.
        """
        high: set[str] = set()
        other: set[str] = set()
        for tag_id in matches:
            if catalog.get(tag_id).is_high:
                high.add(tag_id)
            else:
                other.add(tag_id)

        newly_active_high = frozenset(high - self.active)
        active = self.active | high
        newly_suggested = frozenset(other - active - self.suggested)
        suggested = (self.suggested | other) - active

        state = TagState(active=frozenset(active), suggested=frozenset(suggested))
        return state, TagUpdate(
            newly_active_high=newly_active_high,
            newly_suggested=newly_suggested,
        )

    def toggle(self, tag_id: str) -> TagState:
        """Operator action: clear an active tag, or confirm/apply an inactive one."""
        if tag_id in self.active:
            return TagState(active=self.active - {tag_id}, suggested=self.suggested)
        return TagState(
            active=self.active | {tag_id},
            suggested=self.suggested - {tag_id},
        )
