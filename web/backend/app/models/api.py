"""Pydantic models for the operator API.

These models mirror the engine dataclasses and provide JSON serialization
for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from glowup.drafting import DraftResult
from glowup.models import EscalationCategory, EscalationRecord, Message
from glowup.triage.catalog import TagDefinition
from glowup.triage.orchestrator import Blocked, Locked, Proceed, TriageResult, TriageSnapshot


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class UserMessageRequest(BaseModel):
    content: str = Field(min_length=1)


class SessionStartRequest(BaseModel):
    vibe: str = "Warm & Soft"
    content: str = Field(min_length=1)


class ReplyRequest(BaseModel):
    content: str = Field(min_length=1)
    source: Literal["manual", "draft"] = "manual"


class EscalationRequest(BaseModel):
    category: EscalationCategory = EscalationCategory.safety_risk
    summary: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    """Mirrors glowup.models.Message."""

    id: str
    role: str
    content: str
    timestamp: str
    status: str

    @classmethod
    def from_message(cls, msg: Message) -> MessageResponse:
        return cls(**msg.to_dict())


class RouteResponse(BaseModel):
    tier: str
    reason: str
    rule: str = ""


class TriageStateResponse(BaseModel):
    """Mirrors glowup.triage.orchestrator.TriageSnapshot."""

    session_id: str
    active: list[str] = Field(default_factory=list)
    suggested: list[str] = Field(default_factory=list)
    locked: bool = False
    status: str = "READY"
    last_matches: list[str] = Field(default_factory=list)
    last_route: Optional[RouteResponse] = None

    @classmethod
    def from_snapshot(cls, snap: TriageSnapshot) -> TriageStateResponse:
        decision = snap.last_decision
        return cls(
            session_id=snap.session_id,
            active=snap.active,
            suggested=snap.suggested,
            locked=snap.locked,
            status="LOCKED" if snap.locked else "READY",
            last_matches=snap.last_matches,
            last_route=(
                RouteResponse(tier=decision.tier.value, reason=decision.reason, rule=decision.rule)
                if decision
                else None
            ),
        )


class TriageOutcomeResponse(BaseModel):
    outcome: Literal["locked", "blocked", "proceed", "duplicate"]
    message_id: str
    matches: list[str] = Field(default_factory=list)
    tier: str = ""
    reason: str = ""
    rule: str = ""
    pause_message: str = ""

    @classmethod
    def from_result(cls, result: TriageResult, ordered: list[str]) -> TriageOutcomeResponse:
        if isinstance(result, Locked):
            return cls(
                outcome="locked",
                message_id=result.message_id,
                matches=ordered,
                pause_message=result.pause_message,
            )
        if isinstance(result, Blocked):
            return cls(outcome="blocked", message_id=result.message_id, matches=ordered)
        if isinstance(result, Proceed):
            return cls(
                outcome="proceed",
                message_id=result.message_id,
                matches=ordered,
                tier=result.tier.value,
                reason=result.reason,
                rule=result.rule,
            )
        return cls(outcome="duplicate", message_id=result.message_id)


class DraftResponse(BaseModel):
    """Mirrors glowup.drafting.DraftResult."""

    tier: str
    reason: str
    text: str = ""
    model: str = ""
    error: str = ""
    retryable: bool = False

    @classmethod
    def from_draft(cls, draft: DraftResult) -> DraftResponse:
        return cls(
            tier=draft.tier,
            reason=draft.reason,
            text=draft.text,
            model=draft.model,
            error=draft.error,
            retryable=draft.retryable,
        )


class MessageTurnResponse(BaseModel):
    message: MessageResponse
    triage: TriageOutcomeResponse
    state: TriageStateResponse


class SessionStateResponse(BaseModel):
    triage: TriageStateResponse
    messages: list[MessageResponse] = Field(default_factory=list)
    drafting: bool = False
    last_draft: Optional[DraftResponse] = None


class EscalationResponse(BaseModel):
    """Mirrors glowup.models.EscalationRecord."""

    id: str
    session_id: str
    category: str
    summary: str
    tags: list[str] = Field(default_factory=list)
    source: str
    timestamp: str

    @classmethod
    def from_record(cls, record: EscalationRecord) -> EscalationResponse:
        return cls(**record.to_dict())


class TagDefinitionResponse(BaseModel):
    id: str
    label: str
    severity: str
    manual_only: bool = False

    @classmethod
    def from_tag(cls, tag: TagDefinition) -> TagDefinitionResponse:
        return cls(id=tag.id, label=tag.label, severity=tag.severity.value, manual_only=tag.manual_only)


class ScriptResponse(BaseModel):
    key: str
    text: str
