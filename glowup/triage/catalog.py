"""Rule catalog: the ordered table of session tags and their detection patterns.

Tags with an empty pattern list are manual-only: the classifier never
matches them and they can only be applied by the operator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

import yaml

from glowup.errors import CatalogError, UnknownTagError
from glowup.triage.matchers import Matcher, compile_pattern


class Severity(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


@dataclass(frozen=True)
class TagDefinition:
    """A single tag the operator console can show, detect, and toggle."""

    id: str
    label: str
    severity: Severity
    patterns: tuple[Matcher, ...] = ()

    @property
    def manual_only(self) -> bool:
        return not self.patterns

    @property
    def is_high(self) -> bool:
        return self.severity == Severity.high


@dataclass(frozen=True)
class RuleCatalog:
    """Ordered, immutable collection of tag definitions keyed by id."""

    tags: tuple[TagDefinition, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for tag in self.tags:
            if tag.id in seen:
                raise CatalogError(f"Duplicate tag id: {tag.id!r}")
            seen.add(tag.id)

    def __iter__(self) -> Iterator[TagDefinition]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __contains__(self, tag_id: object) -> bool:
        return any(t.id == tag_id for t in self.tags)

    def get(self, tag_id: str) -> TagDefinition:
        for tag in self.tags:
            if tag.id == tag_id:
                return tag
        raise UnknownTagError(tag_id)

    def severity_of(self, tag_id: str) -> Severity:
        return self.get(tag_id).severity

    def high_severity_ids(self) -> frozenset[str]:
        return frozenset(t.id for t in self.tags if t.is_high)

    def ordered(self, tag_ids) -> list[str]:
        """Return *tag_ids* in catalog order (stable output for display)."""
        wanted = set(tag_ids)
        return [t.id for t in self.tags if t.id in wanted]


def _tag(tag_id: str, label: str, severity: Severity, *patterns: str) -> TagDefinition:
    return TagDefinition(
        id=tag_id,
        label=label,
        severity=severity,
        patterns=tuple(compile_pattern(p) for p in patterns),
    )


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------

DEFAULT_CATALOG = RuleCatalog(
    tags=(
        _tag(
            "safety", "Safety", Severity.high,
            r"(kill|end|take)\s+(my)?\s*(self|life)",
            r"want to die|unalive",
            r"hurt myself",
        ),
        _tag(
            "distress", "Distress", Severity.high,
            r"panic|scared|terrified|crying|help me|overwhelmed",
            r"bad day",
        ),
        _tag("risk_lang", "Risk Language", Severity.medium, r"kms|kys|jump off"),
        _tag("boundary", "Boundary", Severity.medium, r"stalk|creepy|address|location|meet"),
        _tag(
            "drift", "Tone Drift", Severity.low,
            r"robot|ai\b|fake|human\?",
            r"cringe|annoying",
        ),
        _tag("resolved", "Resolved", Severity.low),
    )
)


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def load_catalog(path: str | Path) -> RuleCatalog:
    """Load a rule catalog from a YAML file.

    Expected shape::

        tags:
          - id: safety
            label: Safety
            severity: high
            patterns: ["want to die", "substr:unalive"]
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise CatalogError(f"Could not parse {path}: {exc}") from exc

    entries = data.get("tags") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise CatalogError(f"{path}: expected a top-level 'tags' list")

    tags = []
    for entry in entries:
        if not isinstance(entry, dict) or "id" not in entry:
            raise CatalogError(f"{path}: every tag needs an 'id'")
        try:
            severity = Severity(entry.get("severity", "low"))
        except ValueError as exc:
            raise CatalogError(f"{path}: bad severity for tag {entry['id']!r}") from exc
        tags.append(
            _tag(
                str(entry["id"]),
                str(entry.get("label", entry["id"])),
                severity,
                *[str(p) for p in entry.get("patterns") or []],
            )
        )
    return RuleCatalog(tags=tuple(tags))
