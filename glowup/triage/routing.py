"""Routing policy: pick the generation tier that drafts the next reply.

Rules are evaluated top to bottom and the first match wins.  The order is the
policy: a message that trips several rules is always attributed to the
earliest one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from glowup.triage.catalog import RuleCatalog
from glowup.triage.matchers import Matcher, any_match, compile_pattern

DEFAULT_LONG_TEXT_THRESHOLD = 200
DEFAULT_MAX_SENTENCE_MARKS = 3

_SENTENCE_MARK = re.compile(r"[.!?]")


class Tier(str, Enum):
    fast = "fast"
    deep = "deep"


@dataclass(frozen=True)
class RoutingContext:
    text: str
    active_tags: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RoutingRule:
    """One step of the cascade."""

    name: str
    predicate: Callable[[RoutingContext], bool]
    tier: Tier
    reason: str


@dataclass(frozen=True)
class RouteDecision:
    tier: Tier
    reason: str
    rule: str


# ---------------------------------------------------------------------------
# Emotional-content heuristics
# ---------------------------------------------------------------------------

EMOTIONAL_FAMILIES: dict[str, tuple[str, ...]] = {
    "self_distress": (
        r"\bi can'?t (cope|handle|do this)",
        r"\b(exhausted|drained|hopeless|numb|lonely|anxious|depressed)\b",
        r"\bfalling apart\b",
        r"\bso tired of\b",
    ),
    "social_conflict": (
        r"\b(fight|fought|argu(e|ed|ing|ment))\b",
        r"\b(betrayed|ignored me|left me out|talking behind)\b",
        r"\bmad at me\b",
    ),
    "relationship": (
        r"\b(boyfriend|girlfriend|partner|crush|husband|wife)\b",
        r"\b(break ?up|broke up|dumped|ex)\b",
        r"\b(dating|divorce|situationship)\b",
    ),
    "shame": (
        r"\b(ashamed|embarrassed|humiliated|mortified)\b",
        r"\bso stupid of me\b",
        r"\bhate myself\b",
    ),
    "self_esteem": (
        r"\bnot good enough\b",
        r"\b(ugly|worthless|insecure|unlovable)\b",
        r"\bno one (likes|cares about) me\b",
        r"\bhate (how i look|my body)\b",
    ),
    "bad_day": (
        r"\b(bad|rough|awful|terrible|long) (day|week|night)\b",
        r"\bugh+\b",
        r"\bnot my day\b",
    ),
}


_FAMILY_MATCHERS: dict[str, tuple[Matcher, ...]] = {
    name: tuple(compile_pattern(p) for p in patterns)
    for name, patterns in EMOTIONAL_FAMILIES.items()
}


def emotional_family(text: str) -> str | None:
    """Return the first emotional family *text* falls into, if any."""
    for name, matchers in _FAMILY_MATCHERS.items():
        if any_match(matchers, text):
            return name
    return None


def sentence_marks(text: str) -> int:
    return len(_SENTENCE_MARK.findall(text))


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoutingPolicy:
    rules: tuple[RoutingRule, ...] = field(default_factory=tuple)
    fallback: RouteDecision = RouteDecision(
        tier=Tier.fast, reason="Standard Interaction", rule="standard"
    )

    def select_tier(self, text: str, active_tags: Iterable[str] = ()) -> RouteDecision:
        ctx = RoutingContext(text=text, active_tags=frozenset(active_tags))
        for rule in self.rules:
            if rule.predicate(ctx):
                return RouteDecision(tier=rule.tier, reason=rule.reason, rule=rule.name)
        return self.fallback


def build_default_policy(
    catalog: RuleCatalog,
    long_text_threshold: int = DEFAULT_LONG_TEXT_THRESHOLD,
    max_sentence_marks: int = DEFAULT_MAX_SENTENCE_MARKS,
    critical_combinations: tuple[frozenset[str], ...] = (
        frozenset({"risk_lang", "distress"}),
    ),
) -> RoutingPolicy:
    """The production cascade: critical tags, emotion, complexity, then fast."""
    critical = catalog.high_severity_ids()

    def has_critical_tag(ctx: RoutingContext) -> bool:
        return bool(ctx.active_tags & critical)

    # Only reachable when distress is below high severity; otherwise critical-tag fires first.
    def has_critical_combination(ctx: RoutingContext) -> bool:
        return any(combo <= ctx.active_tags for combo in critical_combinations)

    def is_emotional(ctx: RoutingContext) -> bool:
        return emotional_family(ctx.text) is not None

    def is_complex(ctx: RoutingContext) -> bool:
        return (
            len(ctx.text) > long_text_threshold
            or sentence_marks(ctx.text) > max_sentence_marks
        )

    return RoutingPolicy(
        rules=(
            RoutingRule("critical-tag", has_critical_tag, Tier.deep, "Critical Safety Context"),
            RoutingRule(
                "critical-combination", has_critical_combination, Tier.deep, "Critical Safety Context"
            ),
            RoutingRule("emotional-content", is_emotional, Tier.deep, "Emotional Nuance"),
            RoutingRule("high-complexity", is_complex, Tier.deep, "High Complexity"),
        )
    )
