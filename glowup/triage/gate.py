"""Safety gate: the two-state (READY / LOCKED) machine guarding AI drafting.

Transitions are pure: they take the current gate and return the next one
together with the effects the caller must carry out (send a pause message,
file an escalation).  Nothing here touches I/O or clocks beyond stamping the
escalation record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

from glowup.models import EscalationCategory, EscalationRecord, EscalationSource
from glowup.triage.scripts import SAFETY_SCRIPTS
from glowup.triage.tags import TagUpdate

logger = logging.getLogger(__name__)

DEFAULT_PAUSE_DELAY_SECONDS = 0.6


class GateStatus(str, Enum):
    ready = "READY"
    locked = "LOCKED"


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchedulePause:
    """Deliver *message* to the end user as an assistant reply after *delay_seconds*."""

    message: str
    delay_seconds: float


@dataclass(frozen=True)
class CreateEscalation:
    """Append *record* to the team-visible escalation log."""

    record: EscalationRecord


Effect = Union[SchedulePause, CreateEscalation]


def auto_escalation_summary(tag_ids: Iterable[str]) -> str:
    tags = ", ".join(sorted(tag_ids))
    return (
        f"Automatic safety lock: high-severity content detected ({tags}). "
        "AI drafting paused pending operator review."
    )


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SafetyGate:
    locked: bool = False

    @property
    def status(self) -> GateStatus:
        return GateStatus.locked if self.locked else GateStatus.ready

    def evaluate(
        self,
        update: TagUpdate,
        active_tags: Iterable[str],
        session_id: str,
        pause_delay_seconds: float = DEFAULT_PAUSE_DELAY_SECONDS,
    ) -> tuple[SafetyGate, list[Effect]]:
        """Lock when a high-severity tag has just become active.

        An already locked gate stays locked and emits nothing, however many
        further high-severity matches arrive.
        """
        if self.locked or not update.newly_active_high:
            return self, []

        logger.warning(
            "Safety lock engaged for session %s (tags: %s)",
            session_id,
            ", ".join(sorted(update.newly_active_high)),
        )
        record = EscalationRecord(
            session_id=session_id,
            category=EscalationCategory.safety_risk,
            summary=auto_escalation_summary(update.newly_active_high),
            tags=tuple(sorted(active_tags)),
            source=EscalationSource.auto,
        )
        effects: list[Effect] = [
            CreateEscalation(record=record),
            SchedulePause(message=SAFETY_SCRIPTS["pause"], delay_seconds=pause_delay_seconds),
        ]
        return SafetyGate(locked=True), effects

    def unlock(self) -> SafetyGate:
        """Operator override.  The only way out of LOCKED."""
        return SafetyGate(locked=False)
