"""Message classifier: scan one message against the rule catalog."""

from __future__ import annotations

from glowup.triage.catalog import RuleCatalog
from glowup.triage.matchers import any_match


def classify(text: str, catalog: RuleCatalog) -> frozenset[str]:
    """Return the ids of every tag whose patterns match *text*.

    A heuristic filter, not a scored classifier.  Manual-only tags (no
    patterns) never match.
    """
    if not text:
        return frozenset()
    return frozenset(
        tag.id for tag in catalog if tag.patterns and any_match(tag.patterns, text)
    )
