"""Tests for the routing cascade."""

from glowup.triage.catalog import DEFAULT_CATALOG, RuleCatalog, Severity, TagDefinition
from glowup.triage.routing import Tier, build_default_policy, emotional_family, sentence_marks

POLICY = build_default_policy(DEFAULT_CATALOG)

LONG_NEUTRAL = (
    "I went to the library this morning and picked up two novels. "
    "The first one is about a lighthouse keeper on a quiet island. "
    "The second one follows a chef who opens a small bakery in the city. "
    "Which one should I start with tonight?"
)


def test_standard_interaction():
    decision = POLICY.select_tier("hey, how's it going")
    assert decision.tier == Tier.fast
    assert decision.reason == "Standard Interaction"


def test_critical_tag_wins():
    decision = POLICY.select_tier(LONG_NEUTRAL, {"safety"})
    assert decision.tier == Tier.deep
    assert decision.reason == "Critical Safety Context"
    assert decision.rule == "critical-tag"


def test_critical_combination():
    catalog = RuleCatalog(tags=(
        TagDefinition("risk_lang", "Risk Language", Severity.medium),
        TagDefinition("distress", "Distress", Severity.medium),
    ))
    policy = build_default_policy(catalog)

    decision = policy.select_tier("ok", {"risk_lang", "distress"})
    assert decision.rule == "critical-combination"
    assert decision.reason == "Critical Safety Context"
    assert policy.select_tier("ok", {"risk_lang"}).tier == Tier.fast


def test_emotional_content():
    assert POLICY.select_tier("I had a fight with my sister").reason == "Emotional Nuance"
    assert POLICY.select_tier("my boyfriend forgot our plans").reason == "Emotional Nuance"
    assert emotional_family("ugh work was rough today") == "bad_day"
    assert emotional_family("hey, how's it going") is None


def test_high_complexity_long_text():
    assert len(LONG_NEUTRAL) > 200
    assert sentence_marks(LONG_NEUTRAL) == 4
    decision = POLICY.select_tier(LONG_NEUTRAL)
    assert decision.tier == Tier.deep
    assert decision.reason == "High Complexity"


def test_high_complexity_thresholds():
    assert POLICY.select_tier("a" * 200).tier == Tier.fast
    assert POLICY.select_tier("a" * 201).reason == "High Complexity"
    assert POLICY.select_tier("ok. sure. fine.").tier == Tier.fast
    assert POLICY.select_tier("ok. sure. fine. yes.").reason == "High Complexity"


def test_custom_thresholds():
    policy = build_default_policy(DEFAULT_CATALOG, long_text_threshold=10, max_sentence_marks=0)
    assert policy.select_tier("hello there friend").reason == "High Complexity"
    assert policy.select_tier("hi.").reason == "High Complexity"


def test_medium_tag_alone_stays_fast():
    assert POLICY.select_tier("kms lol", {"risk_lang"}).tier == Tier.fast
