"""Tests for session tag state transitions."""

import pytest

from glowup.errors import InvariantViolation
from glowup.triage.catalog import DEFAULT_CATALOG
from glowup.triage.tags import TagState


def test_high_matches_activate_immediately():
    state, update = TagState().apply_matches({"safety"}, DEFAULT_CATALOG)
    assert state.active == {"safety"}
    assert state.suggested == frozenset()
    assert update.newly_active_high == {"safety"}


def test_medium_and_low_matches_are_suggested():
    state, update = TagState().apply_matches({"risk_lang", "drift"}, DEFAULT_CATALOG)
    assert state.active == frozenset()
    assert state.suggested == {"risk_lang", "drift"}
    assert update.newly_active_high == frozenset()
    assert update.newly_suggested == {"risk_lang", "drift"}


def test_already_active_high_is_not_new():
    state, _ = TagState().apply_matches({"safety"}, DEFAULT_CATALOG)
    state, update = state.apply_matches({"safety", "distress"}, DEFAULT_CATALOG)
    assert update.newly_active_high == {"distress"}
    assert state.active == {"safety", "distress"}


def test_active_tag_is_not_suggested_again():
    state = TagState(active=frozenset({"drift"}))
    state, update = state.apply_matches({"drift"}, DEFAULT_CATALOG)
    assert state.suggested == frozenset()
    assert update.newly_suggested == frozenset()


def test_apply_matches_does_not_mutate():
    original = TagState()
    original.apply_matches({"safety", "drift"}, DEFAULT_CATALOG)
    assert original == TagState()


def test_toggle_suggested_moves_to_active():
    state = TagState(suggested=frozenset({"risk_lang"}))
    state = state.toggle("risk_lang")
    assert state.is_active("risk_lang")
    assert not state.is_suggested("risk_lang")


def test_toggle_active_clears():
    state = TagState(active=frozenset({"safety"})).toggle("safety")
    assert state.active == frozenset()


def test_toggle_untouched_tag_applies_it():
    assert TagState().toggle("resolved").active == {"resolved"}


def test_overlap_is_rejected():
    with pytest.raises(InvariantViolation):
        TagState(active=frozenset({"drift"}), suggested=frozenset({"drift"}))


def test_disjoint_after_mixed_sequence():
    ids = [t.id for t in DEFAULT_CATALOG]
    state = TagState()
    for i, tag_id in enumerate(ids * 3):
        if i % 3 == 0:
            state = state.toggle(tag_id)
        else:
            matches = {tag_id, ids[(i + 2) % len(ids)]}
            state, _ = state.apply_matches(matches, DEFAULT_CATALOG)
        assert not (state.active & state.suggested)
