"""Catalog router: tag table, operator scripts and the team escalation log."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from glowup.models import EscalationCategory
from glowup.service import SessionService
from glowup.triage.scripts import OPERATOR_SCRIPTS
from web.backend.app.dependencies import get_service
from web.backend.app.models.api import EscalationResponse, ScriptResponse, TagDefinitionResponse

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/tags", response_model=list[TagDefinitionResponse])
async def list_tags(svc: SessionService = Depends(get_service)):
    """Return the session tags in display order."""
    return [TagDefinitionResponse.from_tag(t) for t in svc.catalog]


@router.get("/escalations", response_model=list[EscalationResponse])
async def team_escalations(
    category: EscalationCategory | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    svc: SessionService = Depends(get_service),
):
    """Team-visible escalation log across all sessions."""
    records = svc.escalations.get_escalations(category=category, limit=limit)
    return [EscalationResponse.from_record(r) for r in records]


@router.get("/scripts", response_model=list[ScriptResponse])
async def list_scripts():
    """Canned replies the operator can send with one click."""
    return [ScriptResponse(key=k, text=v) for k, v in OPERATOR_SCRIPTS.items()]
