"""Tests for settings loading."""

import tempfile
from pathlib import Path

import pytest
import yaml

from glowup.config import Settings, load_settings
from glowup.triage.catalog import DEFAULT_CATALOG
from glowup.triage.routing import Tier


def test_defaults():
    settings = Settings()
    assert settings.pause_delay_seconds == 0.6
    assert settings.long_text_threshold == 200
    assert settings.max_sentence_marks == 3
    assert settings.load_catalog() is DEFAULT_CATALOG


def test_yaml_then_environment():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "config.yaml"
        path.write_text(yaml.dump({"long_text_threshold": 50, "temperature": 0.2, "unknown": 1}))

        settings = load_settings(path, environ={"GLOWUP_TEMPERATURE": "0.4", "GLOWUP_DATA_DIR": tmp})

    assert settings.long_text_threshold == 50
    assert settings.temperature == 0.4
    assert settings.data_path == Path(tmp)


def test_missing_explicit_path():
    with pytest.raises(FileNotFoundError):
        load_settings("/nonexistent/glowup.yaml", environ={})


def test_settings_drive_routing_policy():
    settings = Settings(long_text_threshold=10)
    policy = settings.routing_policy(settings.load_catalog())
    assert policy.select_tier("a fairly plain sentence").tier == Tier.deep


def test_custom_catalog_path():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "tags.yaml"
        path.write_text(yaml.dump({"tags": [{"id": "spam", "severity": "medium", "patterns": ["buy now"]}]}))
        catalog = Settings(catalog_path=str(path)).load_catalog()
    assert [t.id for t in catalog] == ["spam"]
