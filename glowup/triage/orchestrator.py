"""Triage orchestrator: classify, update tags, run the safety gate, route.

One :class:`TriageSession` per chat session.  Every state change happens
under the session's lock and is committed before :meth:`on_user_message`
returns, so the (slow, fallible) drafting call that follows can never undo or
race it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Union

from glowup.errors import SafetyLockError
from glowup.models import Message, Role
from glowup.triage.catalog import DEFAULT_CATALOG, RuleCatalog
from glowup.triage.classifier import classify
from glowup.triage.gate import DEFAULT_PAUSE_DELAY_SECONDS, Effect, SafetyGate, SchedulePause
from glowup.triage.routing import RouteDecision, RoutingPolicy, Tier, build_default_policy
from glowup.triage.tags import TagState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Locked:
    """The gate just locked.  Deliver ``pause_message``; do not draft."""

    message_id: str
    pause_message: str
    matches: frozenset[str]
    effects: tuple[Effect, ...] = ()


@dataclass(frozen=True)
class Blocked:
    """The gate was already locked.  No draft, no further pause message."""

    message_id: str
    matches: frozenset[str]


@dataclass(frozen=True)
class Proceed:
    """Gate is READY.  Request a draft from ``tier``."""

    message_id: str
    tier: Tier
    reason: str
    rule: str
    matches: frozenset[str]


@dataclass(frozen=True)
class Duplicate:
    """The message id was already triaged; nothing changed."""

    message_id: str


TriageResult = Union[Locked, Blocked, Proceed, Duplicate]


@dataclass(frozen=True)
class TriageSnapshot:
    """What the operator console shows for a session."""

    session_id: str
    active: list[str]
    suggested: list[str]
    locked: bool
    last_matches: list[str] = field(default_factory=list)
    last_decision: RouteDecision | None = None


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class TriageSession:
    """Serialized triage state for a single chat session."""

    def __init__(
        self,
        session_id: str,
        catalog: RuleCatalog = DEFAULT_CATALOG,
        policy: RoutingPolicy | None = None,
        pause_delay_seconds: float = DEFAULT_PAUSE_DELAY_SECONDS,
    ) -> None:
        self.session_id = session_id
        self.catalog = catalog
        self.policy = policy or build_default_policy(catalog)
        self.pause_delay_seconds = pause_delay_seconds
        self._lock = threading.Lock()
        self._tags = TagState()
        self._gate = SafetyGate()
        self._processed: set[str] = set()
        self._last_matches: frozenset[str] = frozenset()
        self._last_decision: RouteDecision | None = None

    # -- read-only views -----------------------------------------------------

    @property
    def tags(self) -> TagState:
        return self._tags

    @property
    def gate(self) -> SafetyGate:
        return self._gate

    @property
    def locked(self) -> bool:
        return self._gate.locked

    def is_active(self, tag_id: str) -> bool:
        return self._tags.is_active(tag_id)

    def is_suggested(self, tag_id: str) -> bool:
        return self._tags.is_suggested(tag_id)

    def snapshot(self) -> TriageSnapshot:
        with self._lock:
            return TriageSnapshot(
                session_id=self.session_id,
                active=self.catalog.ordered(self._tags.active),
                suggested=self.catalog.ordered(self._tags.suggested),
                locked=self._gate.locked,
                last_matches=self.catalog.ordered(self._last_matches),
                last_decision=self._last_decision,
            )

    # -- inbound messages ----------------------------------------------------

    def on_user_message(self, message: Message) -> TriageResult:
        """Triage one inbound user message, exactly once per message id."""
        if message.role != Role.user:
            raise ValueError(f"Only user messages are triaged, got {message.role.value!r}")

        with self._lock:
            if message.id in self._processed:
                logger.debug("Skipping already triaged message %s", message.id)
                return Duplicate(message_id=message.id)
            self._processed.add(message.id)

            matches = classify(message.content, self.catalog)
            self._last_matches = matches
            self._tags, update = self._tags.apply_matches(matches, self.catalog)
            self._gate, effects = self._gate.evaluate(
                update,
                self._tags.active,
                self.session_id,
                pause_delay_seconds=self.pause_delay_seconds,
            )

            if effects:
                pause = next(e for e in effects if isinstance(e, SchedulePause))
                return Locked(
                    message_id=message.id,
                    pause_message=pause.message,
                    matches=matches,
                    effects=tuple(effects),
                )
            if self._gate.locked:
                logger.info("Session %s locked; no draft for message %s", self.session_id, message.id)
                return Blocked(message_id=message.id, matches=matches)

            decision = self.policy.select_tier(message.content, self._tags.active)
            self._last_decision = decision
            logger.info(
                "Session %s routed message %s to %s (%s)",
                self.session_id,
                message.id,
                decision.tier.value,
                decision.reason,
            )
            return Proceed(
                message_id=message.id,
                tier=decision.tier,
                reason=decision.reason,
                rule=decision.rule,
                matches=matches,
            )

    def reroute(self, text: str) -> RouteDecision:
        """Route *text* again with the current tags (draft regeneration)."""
        with self._lock:
            if self._gate.locked:
                raise SafetyLockError("Session is locked; AI drafting is paused")
            decision = self.policy.select_tier(text, self._tags.active)
            self._last_decision = decision
            return decision

    # -- operator actions ----------------------------------------------------

    def toggle_tag(self, tag_id: str) -> TagState:
        """Confirm, apply, or clear a tag.  Never touches the gate."""
        self.catalog.get(tag_id)
        with self._lock:
            self._tags = self._tags.toggle(tag_id)
            logger.info(
                "Session %s tag %s %s",
                self.session_id,
                tag_id,
                "applied" if self._tags.is_active(tag_id) else "cleared",
            )
            return self._tags

    def unlock(self) -> bool:
        """Operator override of the safety lock.  Returns whether it was locked."""
        with self._lock:
            was_locked = self._gate.locked
            self._gate = self._gate.unlock()
        if was_locked:
            logger.warning("Safety lock released by operator for session %s", self.session_id)
        return was_locked
