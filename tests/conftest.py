"""Shared test doubles."""

import tempfile

import pytest

from glowup.config import Settings
from glowup.drafting import DraftingService
from glowup.errors import GenerationError
from glowup.escalation import EscalationLog
from glowup.llm.client import LLMResponse
from glowup.service import SessionService
from glowup.storage.message_store import InMemoryMessageStore
from glowup.triage.catalog import DEFAULT_CATALOG


class FakeLLM:
    """Stands in for LLMClient; records calls and returns canned drafts."""

    def __init__(self, content: str = "Here's a thought...", error: GenerationError | None = None):
        self.content = content
        self.error = error
        self.calls = []
        self.store = None
        self.drafting_during_call = None
        # Runs inside generate(), i.e. while the draft is in flight.
        self.on_call = None

    async def generate(self, history, system_instruction, temperature, tier):
        self.calls.append({"history": list(history), "tier": tier, "temperature": temperature})
        if self.store is not None:
            self.drafting_during_call = self.store.is_drafting("s1")
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error
        return LLMResponse(
            content=self.content,
            model=f"fake-{tier.value}",
            tier=tier.value,
            input_tokens=10,
            output_tokens=5,
            total_tokens=15,
            latency_ms=3,
        )


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def service(fake_llm):
    with tempfile.TemporaryDirectory() as tmp:
        store = InMemoryMessageStore()
        yield SessionService(
            store=store,
            escalations=EscalationLog(tmp),
            drafting=DraftingService(store, fake_llm),
            catalog=DEFAULT_CATALOG,
            settings=Settings(data_dir=tmp, pause_delay_seconds=0),
        )
