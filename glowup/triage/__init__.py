"""Message triage and response routing.

This package provides:
- Rule catalog: tag definitions with severities and detection patterns
- Classifier: which tags a message trips
- Tag state and safety gate: session-level tags, lock, auto-escalation
- Routing policy: which generation tier drafts the next reply
- Orchestrator: the per-message pipeline tying them together
"""

from glowup.triage.catalog import DEFAULT_CATALOG, RuleCatalog, Severity, TagDefinition, load_catalog
from glowup.triage.classifier import classify
from glowup.triage.gate import CreateEscalation, GateStatus, SafetyGate, SchedulePause
from glowup.triage.orchestrator import (
    Blocked,
    Duplicate,
    Locked,
    Proceed,
    TriageResult,
    TriageSession,
    TriageSnapshot,
)
from glowup.triage.routing import RouteDecision, RoutingPolicy, RoutingRule, Tier, build_default_policy
from glowup.triage.tags import TagState, TagUpdate

__all__ = [
    "DEFAULT_CATALOG",
    "RuleCatalog",
    "Severity",
    "TagDefinition",
    "load_catalog",
    "classify",
    "CreateEscalation",
    "GateStatus",
    "SafetyGate",
    "SchedulePause",
    "Blocked",
    "Duplicate",
    "Locked",
    "Proceed",
    "TriageResult",
    "TriageSession",
    "TriageSnapshot",
    "RouteDecision",
    "RoutingPolicy",
    "RoutingRule",
    "Tier",
    "build_default_policy",
    "TagState",
    "TagUpdate",
]
