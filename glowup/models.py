"""Conversation and escalation records shared across the engine."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Role(str, Enum):
    """Author of a message in the conversation log."""

    user = "user"
    assistant = "assistant"
    system = "system"


class MessageStatus(str, Enum):
    """``pending`` until the operator answers, ``approved`` once part of history."""

    pending = "pending"
    approved = "approved"


@dataclass(frozen=True)
class Message:
    """A single entry in the append-only conversation log.

    ``system`` messages carry operator-only context (session metadata such as
    the tone the user picked).  They are never shown to the end user and never
    risk-scanned, but they do go into the generation context.
    """

    role: Role
    content: str
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now)
    status: MessageStatus = MessageStatus.approved

    @classmethod
    def create(cls, role: Role | str, content: str) -> Message:
        """Build a new message; user messages start out ``pending``."""
        role = Role(role)
        status = MessageStatus.pending if role == Role.user else MessageStatus.approved
        return cls(role=role, content=content, status=status)

    @property
    def visible_to_user(self) -> bool:
        return self.role != Role.system

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role.value
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        return cls(
            role=Role(data["role"]),
            content=data.get("content", ""),
            id=data["id"],
            timestamp=data.get("timestamp", ""),
            status=MessageStatus(data.get("status", "approved")),
        )


class EscalationCategory(str, Enum):
    """Team-facing escalation buckets."""

    safety_risk = "Safety Risk"
    boundary_violation = "Boundary Violation"
    tone_concern = "Tone Concern"
    technical_issue = "Technical Issue"
    other = "Other"


class EscalationSource(str, Enum):
    operator = "operator"
    auto = "auto"


@dataclass(frozen=True)
class EscalationRecord:
    """An immutable escalation appended to the team-visible log."""

    session_id: str
    category: EscalationCategory
    summary: str
    tags: tuple[str, ...] = ()
    source: EscalationSource = EscalationSource.operator
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "category": self.category.value,
            "summary": self.summary,
            "tags": list(self.tags),
            "source": self.source.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EscalationRecord:
        return cls(
            session_id=data["session_id"],
            category=EscalationCategory(data["category"]),
            summary=data.get("summary", ""),
            tags=tuple(data.get("tags", [])),
            source=EscalationSource(data.get("source", "operator")),
            id=data["id"],
            timestamp=data.get("timestamp", ""),
        )
