"""Tests for the rule catalog, matchers, and classifier."""

import tempfile
from pathlib import Path

import pytest
import yaml

from glowup.errors import CatalogError, UnknownTagError
from glowup.triage.catalog import DEFAULT_CATALOG, RuleCatalog, Severity, TagDefinition, load_catalog
from glowup.triage.classifier import classify
from glowup.triage.matchers import RegexMatcher, SubstringMatcher, compile_pattern


def _write_yaml(directory: str, data) -> Path:
    path = Path(directory) / "catalog.yaml"
    path.write_text(yaml.dump(data))
    return path


def test_default_catalog_order_and_severities():
    assert [t.id for t in DEFAULT_CATALOG] == ["safety", "distress", "risk_lang", "boundary", "drift", "resolved"]
    assert DEFAULT_CATALOG.high_severity_ids() == frozenset({"safety", "distress"})
    assert DEFAULT_CATALOG.severity_of("risk_lang") == Severity.medium
    assert DEFAULT_CATALOG.get("resolved").manual_only


def test_unknown_tag_raises():
    with pytest.raises(UnknownTagError) as exc:
        DEFAULT_CATALOG.get("nope")
    assert exc.value.tag_id == "nope"
    assert "nope" not in DEFAULT_CATALOG


def test_duplicate_ids_rejected():
    tag = TagDefinition(id="x", label="X", severity=Severity.low)
    with pytest.raises(CatalogError):
        RuleCatalog(tags=(tag, tag))


def test_ordered_follows_catalog_order():
    assert DEFAULT_CATALOG.ordered({"drift", "safety", "boundary"}) == ["safety", "boundary", "drift"]


def test_compile_pattern_prefix():
    assert isinstance(compile_pattern("substr:kms"), SubstringMatcher)
    assert isinstance(compile_pattern(r"hurt\s+myself"), RegexMatcher)


def test_substring_matcher_is_case_insensitive():
    assert SubstringMatcher("Unalive").matches("i want to UNALIVE")
    assert not SubstringMatcher("unalive").matches("alive and well")


def test_bad_regex_is_catalog_error():
    with pytest.raises(CatalogError):
        RegexMatcher("(unclosed")


# ── classify ────────────────────────────────────────────────────────


def test_classify_self_harm():
    assert classify("I want to end my life", DEFAULT_CATALOG) == frozenset({"safety"})


def test_classify_is_case_insensitive():
    assert classify("I WANT TO DIE", DEFAULT_CATALOG) == frozenset({"safety"})


def test_classify_multiple_tags():
    assert classify("I'm so scared, I want to die", DEFAULT_CATALOG) == frozenset({"safety", "distress"})


def test_classify_medium_and_low():
    assert classify("kms lol", DEFAULT_CATALOG) == frozenset({"risk_lang"})
    assert classify("are you a robot?", DEFAULT_CATALOG) == frozenset({"drift"})
    assert classify("can we meet up", DEFAULT_CATALOG) == frozenset({"boundary"})


def test_classify_benign_and_empty():
    assert classify("hey, how's it going", DEFAULT_CATALOG) == frozenset()
    assert classify("", DEFAULT_CATALOG) == frozenset()


def test_manual_only_tag_never_detected():
    assert "resolved" not in classify("all resolved now, thanks", DEFAULT_CATALOG)


# ── YAML loading ────────────────────────────────────────────────────


def test_load_catalog_from_yaml():
    with tempfile.TemporaryDirectory() as tmp:
        path = _write_yaml(tmp, {
            "tags": [
                {"id": "safety", "label": "Safety", "severity": "high", "patterns": ["want to die", "substr:unalive"]},
                {"id": "spam", "severity": "low", "patterns": ["buy now"]},
                {"id": "resolved", "label": "Resolved", "severity": "low"},
            ]
        })
        catalog = load_catalog(path)

    assert [t.id for t in catalog] == ["safety", "spam", "resolved"]
    assert catalog.get("spam").label == "spam"
    assert classify("BUY NOW please", catalog) == frozenset({"spam"})
    assert classify("unalive", catalog) == frozenset({"safety"})


def test_load_catalog_requires_tags_list():
    with tempfile.TemporaryDirectory() as tmp:
        path = _write_yaml(tmp, {"rules": []})
        with pytest.raises(CatalogError):
            load_catalog(path)


def test_load_catalog_bad_severity():
    with tempfile.TemporaryDirectory() as tmp:
        path = _write_yaml(tmp, {"tags": [{"id": "x", "severity": "extreme"}]})
        with pytest.raises(CatalogError):
            load_catalog(path)
