"""Drafting service: ask the model for a suggested reply the operator can edit.

Failures never propagate: they come back as a :class:`DraftResult` with
``error`` set, so the operator console can show an inline, retryable notice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from glowup.errors import GenerationError
from glowup.llm.client import LLMClient
from glowup.llm.prompts import SYSTEM_INSTRUCTION
from glowup.llm.usage_tracker import UsageRecord, UsageTracker
from glowup.storage.message_store import MessageStore
from glowup.triage.routing import RouteDecision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftResult:
    """A suggested reply, or the reason there is none."""

    tier: str
    reason: str
    text: str = ""
    model: str = ""
    error: str = ""
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return not self.error


class DraftingService:
    def __init__(
        self,
        store: MessageStore,
        llm: LLMClient,
        tracker: UsageTracker | None = None,
        system_instruction: str = SYSTEM_INSTRUCTION,
        temperature: float = 0.85,
    ) -> None:
        self.store = store
        self.llm = llm
        self.tracker = tracker
        self.system_instruction = system_instruction
        self.temperature = temperature

    async def request_draft(self, session_id: str, decision: RouteDecision) -> DraftResult:
        """Generate a draft for the session's current history on ``decision.tier``.

        The shared drafting flag is raised for the duration of the call and
        cleared even if the call fails or is cancelled.
        """
        history = self.store.read(session_id)
        self.store.set_drafting(session_id, True)
        try:
            response = await self.llm.generate(
                history,
                system_instruction=self.system_instruction,
                temperature=self.temperature,
                tier=decision.tier,
            )
        except GenerationError as exc:
            logger.warning("Draft failed for session %s: %s", session_id, exc)
            return DraftResult(
                tier=decision.tier.value,
                reason=decision.reason,
                error=str(exc),
                retryable=exc.retryable,
            )
        finally:
            self.store.set_drafting(session_id, False)

        if self.tracker is not None:
            self.tracker.record(
                UsageRecord(
                    session_id=session_id,
                    tier=response.tier,
                    model=response.model,
                    input_tokens=response.input_tokens,
                    output_tokens=response.output_tokens,
                    latency_ms=response.latency_ms,
                    cost_estimate=response.cost_estimate,
                )
            )
        logger.info(
            "Draft ready for session %s (%s tier, %d ms)",
            session_id,
            decision.tier.value,
            response.latency_ms,
        )
        return DraftResult(
            tier=decision.tier.value,
            reason=decision.reason,
            text=response.content,
            model=response.model,
        )
