"""Session service: message ingress, operator actions, and effect execution.

Owns one :class:`TriageSession` per chat session plus the collaborators the
triage engine talks to: the message store, the escalation log, and the
drafting service.  Triage runs synchronously and commits before any draft
is requested; drafting is the only coroutine on the hot path.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable

from glowup.config import Settings
from glowup.drafting import DraftingService, DraftResult
from glowup.errors import SafetyLockError
from glowup.escalation import EscalationLog
from glowup.llm.prompts import VIBE_CONTEXT_TEMPLATE
from glowup.models import EscalationCategory, EscalationRecord, Message, Role
from glowup.storage.message_store import MessageStore
from glowup.triage.catalog import RuleCatalog
from glowup.triage.gate import CreateEscalation, Effect, SchedulePause
from glowup.triage.orchestrator import Duplicate, Proceed, TriageResult, TriageSession, TriageSnapshot
from glowup.triage.routing import RouteDecision, RoutingPolicy
from glowup.triage.scripts import get_script

logger = logging.getLogger(__name__)

REPLY_SOURCES = ("manual", "draft")


@dataclass
class SessionView:
    """Everything the operator console needs to render a session."""

    triage: TriageSnapshot
    messages: list[Message] = field(default_factory=list)
    drafting: bool = False
    last_draft: DraftResult | None = None


class SessionService:
    def __init__(
        self,
        store: MessageStore,
        escalations: EscalationLog,
        drafting: DraftingService,
        catalog: RuleCatalog,
        policy: RoutingPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.escalations = escalations
        self.drafting = drafting
        self.catalog = catalog
        self.settings = settings or Settings()
        self.policy = policy or self.settings.routing_policy(catalog)
        self._sessions: dict[str, TriageSession] = {}
        self._last_drafts: dict[str, DraftResult] = {}
        self._registry_lock = threading.Lock()
        self._ingress_locks: dict[str, threading.Lock] = {}
        # Bumped on every triaged message and on reset; a draft is only kept
        # if the counter has not moved while it was being generated.
        self._generations: dict[str, int] = {}

    # -- sessions ------------------------------------------------------------

    def session(self, session_id: str) -> TriageSession:
        with self._registry_lock:
            triage = self._sessions.get(session_id)
            if triage is None:
                triage = TriageSession(
                    session_id,
                    catalog=self.catalog,
                    policy=self.policy,
                    pause_delay_seconds=self.settings.pause_delay_seconds,
                )
                self._sessions[session_id] = triage
            return triage

    def _ingress(self, session_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._ingress_locks.setdefault(session_id, threading.Lock())

    def view(self, session_id: str) -> SessionView:
        return SessionView(
            triage=self.session(session_id).snapshot(),
            messages=self.store.read(session_id),
            drafting=self.store.is_drafting(session_id),
            last_draft=self._last_drafts.get(session_id),
        )

    def reset(self, session_id: str) -> None:
        """Drop the conversation and all triage state for *session_id*."""
        self.store.reset(session_id)
        with self._registry_lock:
            self._sessions.pop(session_id, None)
            self._last_drafts.pop(session_id, None)
        self._bump_generation(session_id)
        logger.info("Session %s reset", session_id)

    def _bump_generation(self, session_id: str) -> None:
        with self._registry_lock:
            self._generations[session_id] = self._generations.get(session_id, 0) + 1

    def _generation(self, session_id: str) -> int:
        with self._registry_lock:
            return self._generations.get(session_id, 0)

    # -- ingress -------------------------------------------------------------

    def receive_user_message(self, session_id: str, content: str) -> tuple[Message, TriageResult]:
        """Log a user message and triage it.

        Escalations are filed before returning.  A scheduled pause message is
        left to the caller (see :meth:`deliver_pause`) so the lock never waits
        on the delay.
        """
        with self._ingress(session_id):
            return self._accept(session_id, content)

    def start_session(self, session_id: str, vibe: str, content: str) -> tuple[Message, TriageResult]:
        """Record the user's chosen vibe as operator context, then their first message."""
        with self._ingress(session_id):
            self.store.append(session_id, Message.create(Role.system, VIBE_CONTEXT_TEMPLATE.format(vibe=vibe)))
            return self._accept(session_id, content)

    def _accept(self, session_id: str, content: str) -> tuple[Message, TriageResult]:
        message = self.store.append(session_id, Message.create(Role.user, content))
        return message, self.triage(session_id, message)

    def triage(self, session_id: str, message: Message) -> TriageResult:
        result = self.session(session_id).on_user_message(message)
        if not isinstance(result, Duplicate):
            self._bump_generation(session_id)
        self._run_immediate(getattr(result, "effects", ()))
        return result

    def triage_latest(self, session_id: str) -> TriageResult | None:
        """Triage the newest message if it is from the user (no-op if already seen)."""
        messages = self.store.read(session_id)
        if not messages or messages[-1].role != Role.user:
            return None
        return self.triage(session_id, messages[-1])

    def _run_immediate(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, CreateEscalation):
                self.escalations.append(effect.record)

    @staticmethod
    def pending_pauses(result: TriageResult) -> list[SchedulePause]:
        return [e for e in getattr(result, "effects", ()) if isinstance(e, SchedulePause)]

    async def deliver_pause(self, session_id: str, effect: SchedulePause) -> Message:
        """Send the pause acknowledgement after its delay."""
        await asyncio.sleep(effect.delay_seconds)
        return self.store.append(session_id, Message.create(Role.assistant, effect.message))

    # -- drafting ------------------------------------------------------------

    async def draft(self, session_id: str, result: Proceed | RouteDecision) -> DraftResult:
        """Request a draft for a triage decision; refused while locked.

        The lock is checked again once the model answers.  A draft that outlived
        the state it was requested for is discarded and never reaches the
        draft surface.
        """
        decision = (
            RouteDecision(tier=result.tier, reason=result.reason, rule=result.rule)
            if isinstance(result, Proceed)
            else result
        )
        if self.session(session_id).locked:
            draft = self._locked_draft(decision)
            self._last_drafts[session_id] = draft
            return draft

        generation = self._generation(session_id)
        draft = await self.drafting.request_draft(session_id, decision)

        with self._registry_lock:
            current = self._generations.get(session_id, 0) == generation
            if self._is_locked(session_id):
                logger.info("Discarding draft for session %s: locked while drafting", session_id)
                draft = self._locked_draft(decision)
                self._last_drafts[session_id] = draft
            elif not current:
                logger.info("Discarding stale draft for session %s", session_id)
                draft = DraftResult(
                    tier=decision.tier.value,
                    reason=decision.reason,
                    error="Draft superseded by a newer message",
                    retryable=True,
                )
            else:
                self._last_drafts[session_id] = draft
        return draft

    def _is_locked(self, session_id: str) -> bool:
        triage = self._sessions.get(session_id)
        return triage is not None and triage.locked

    @staticmethod
    def _locked_draft(decision: RouteDecision) -> DraftResult:
        return DraftResult(
            tier=decision.tier.value,
            reason=decision.reason,
            error="Session is locked; AI drafting is paused",
        )

    async def regenerate(self, session_id: str) -> DraftResult:
        """Re-route the latest user message with current tags and draft again.

        Raises :class:`SafetyLockError` while the session is locked.
        """
        latest = next(
            (m for m in reversed(self.store.read(session_id)) if m.role == Role.user),
            None,
        )
        decision = self.session(session_id).reroute(latest.content if latest else "")
        return await self.draft(session_id, decision)

    # -- operator actions ----------------------------------------------------

    def send_reply(self, session_id: str, content: str, source: str = "manual") -> Message:
        """Send an operator-approved reply as the persona.

        Hand-typed replies (``manual``) are always allowed, including while
        locked.  AI-drafted ones (``draft``) are refused while locked.
        """
        if source not in REPLY_SOURCES:
            raise ValueError(f"Unknown reply source: {source!r}")
        if not content.strip():
            raise ValueError("Reply is empty")
        if source == "draft" and self.session(session_id).locked:
            raise SafetyLockError("Session is locked; AI-drafted replies cannot be sent")
        self._last_drafts.pop(session_id, None)
        return self.store.append(session_id, Message.create(Role.assistant, content))

    def send_script(self, session_id: str, key: str) -> Message:
        """Send one of the canned operator scripts; allowed while locked.

        Raises :class:`UnknownScriptError` for a key not in ``OPERATOR_SCRIPTS``.
        """
        return self.send_reply(session_id, get_script(key), source="manual")

    def toggle_tag(self, session_id: str, tag_id: str) -> TriageSnapshot:
        triage = self.session(session_id)
        triage.toggle_tag(tag_id)
        return triage.snapshot()

    def unlock(self, session_id: str) -> TriageSnapshot:
        triage = self.session(session_id)
        triage.unlock()
        return triage.snapshot()

    def submit_escalation(
        self, session_id: str, category: EscalationCategory | str, summary: str
    ) -> EscalationRecord:
        """File an operator escalation with a snapshot of the active tags."""
        active = self.session(session_id).snapshot().active
        return self.escalations.submit(session_id, category, summary, tags=active)


def build_service(settings: Settings) -> SessionService:
    """Wire a file-backed service from settings."""
    from glowup.llm.client import LLMClient
    from glowup.llm.usage_tracker import UsageTracker
    from glowup.storage.message_store import JsonlMessageStore

    data = settings.data_path
    store = JsonlMessageStore(data / "sessions")
    llm = LLMClient(
        fast_model=settings.fast_model,
        deep_model=settings.deep_model,
        max_tokens=settings.max_tokens,
    )
    drafting = DraftingService(
        store,
        llm,
        tracker=UsageTracker(data / "llm_usage"),
        temperature=settings.temperature,
    )
    catalog = settings.load_catalog()
    return SessionService(
        store=store,
        escalations=EscalationLog(data / "escalations"),
        drafting=drafting,
        catalog=catalog,
        settings=settings,
    )
