"""Tests for the LLM client wrapper and usage tracking."""

import asyncio
import tempfile

import pytest

from glowup.errors import GenerationError
from glowup.llm.client import DEEP_MODEL, FAST_MODEL, LLMClient, build_messages
from glowup.llm.usage_tracker import UsageRecord, UsageTracker
from glowup.models import Message, Role
from glowup.triage.routing import Tier


def test_build_messages_prepends_opener_and_merges_context():
    history = [
        Message.create(Role.assistant, "hey! I'm Sage"),
        Message.create(Role.system, "Session context: cozy"),
        Message.create(Role.user, "hi"),
        Message.create(Role.assistant, "hello!"),
    ]
    turns = build_messages(history)

    assert [t["role"] for t in turns] == ["user", "assistant", "user", "assistant"]
    assert turns[0]["content"] == "(session started)"
    assert turns[2]["content"] == "Session context: cozy\n\nhi"


def test_build_messages_empty():
    assert build_messages([]) == []


def test_model_for_tier():
    client = LLMClient(api_key="test-key")
    assert client.configured
    assert client.model_for(Tier.fast) == FAST_MODEL
    assert client.model_for(Tier.deep) == DEEP_MODEL


def test_unconfigured_client_raises(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    client = LLMClient()
    assert not client.configured

    with pytest.raises(GenerationError) as exc:
        asyncio.run(client.generate([], "system", 0.85, Tier.fast))
    assert exc.value.retryable is False


def test_estimate_cost():
    assert LLMClient._estimate_cost(FAST_MODEL, 1_000_000, 0) == 0.8
    assert LLMClient._estimate_cost("unknown-model", 0, 1_000_000) == 15.0


def test_usage_tracker_by_tier():
    with tempfile.TemporaryDirectory() as tmp:
        tracker = UsageTracker(tmp)
        tracker.record(UsageRecord(session_id="s1", tier="fast", model=FAST_MODEL, input_tokens=10, output_tokens=5))
        tracker.record(UsageRecord(session_id="s1", tier="deep", model=DEEP_MODEL, input_tokens=20, output_tokens=8))
        tracker.record(UsageRecord(session_id="s2", tier="deep", model=DEEP_MODEL, input_tokens=1, output_tokens=1))

        assert len(tracker.get_usage(session_id="s1")) == 2
        assert len(tracker.get_usage(tier="deep")) == 2
        summary = tracker.summary_by_tier()
        assert set(summary) == {"fast", "deep"}
