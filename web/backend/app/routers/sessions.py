"""Session router: user message ingress and operator console actions.

User messages are triaged synchronously; the pause acknowledgement and the
AI draft run as background tasks so the sender is never held up by the
drafting model.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from glowup.errors import SafetyLockError, UnknownScriptError, UnknownTagError
from glowup.service import SessionService
from glowup.triage.orchestrator import Proceed, TriageResult
from web.backend.app.dependencies import get_service
from web.backend.app.models.api import (
    DraftResponse,
    EscalationRequest,
    EscalationResponse,
    MessageResponse,
    MessageTurnResponse,
    ReplyRequest,
    SessionStartRequest,
    SessionStateResponse,
    TriageOutcomeResponse,
    TriageStateResponse,
    UserMessageRequest,
)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _schedule(
    svc: SessionService,
    session_id: str,
    result: TriageResult,
    background: BackgroundTasks,
) -> None:
    """Queue the side effects of a triage result."""
    for pause in svc.pending_pauses(result):
        background.add_task(svc.deliver_pause, session_id, pause)
    if isinstance(result, Proceed):
        background.add_task(svc.draft, session_id, result)


def _turn_response(svc: SessionService, session_id: str, message, result) -> MessageTurnResponse:
    ordered = svc.catalog.ordered(getattr(result, "matches", ()))
    return MessageTurnResponse(
        message=MessageResponse.from_message(message),
        triage=TriageOutcomeResponse.from_result(result, ordered),
        state=TriageStateResponse.from_snapshot(svc.session(session_id).snapshot()),
    )


# ---------------------------------------------------------------------------
# User-side endpoints
# ---------------------------------------------------------------------------


@router.post("/{session_id}/messages", response_model=MessageTurnResponse)
async def post_user_message(
    session_id: str,
    req: UserMessageRequest,
    background: BackgroundTasks,
    svc: SessionService = Depends(get_service),
):
    """Accept a message from the end user and triage it."""
    message, result = svc.receive_user_message(session_id, req.content)
    _schedule(svc, session_id, result, background)
    return _turn_response(svc, session_id, message, result)


@router.post("/{session_id}/start", response_model=MessageTurnResponse)
async def start_session(
    session_id: str,
    req: SessionStartRequest,
    background: BackgroundTasks,
    svc: SessionService = Depends(get_service),
):
    """Open a session with the user's chosen vibe and first message."""
    message, result = svc.start_session(session_id, req.vibe, req.content)
    _schedule(svc, session_id, result, background)
    return _turn_response(svc, session_id, message, result)


@router.get("/{session_id}", response_model=SessionStateResponse)
async def get_session(
    session_id: str,
    audience: str = Query("operator", pattern="^(operator|user)$"),
    svc: SessionService = Depends(get_service),
):
    """Return the conversation and triage state.

    ``audience=user`` hides operator-only context messages.
    """
    view = svc.view(session_id)
    messages = [m for m in view.messages if audience == "operator" or m.visible_to_user]
    return SessionStateResponse(
        triage=TriageStateResponse.from_snapshot(view.triage),
        messages=[MessageResponse.from_message(m) for m in messages],
        drafting=view.drafting,
        last_draft=DraftResponse.from_draft(view.last_draft) if view.last_draft else None,
    )


# ---------------------------------------------------------------------------
# Operator actions
# ---------------------------------------------------------------------------


@router.post("/{session_id}/tags/{tag_id}/toggle", response_model=TriageStateResponse)
async def toggle_tag(session_id: str, tag_id: str, svc: SessionService = Depends(get_service)):
    """Confirm, apply, or clear a session tag."""
    try:
        snap = svc.toggle_tag(session_id, tag_id)
    except UnknownTagError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return TriageStateResponse.from_snapshot(snap)


@router.post("/{session_id}/unlock", response_model=TriageStateResponse)
async def unlock(session_id: str, svc: SessionService = Depends(get_service)):
    """Release the safety lock (operator override)."""
    return TriageStateResponse.from_snapshot(svc.unlock(session_id))


@router.post("/{session_id}/drafts", response_model=DraftResponse)
async def regenerate_draft(session_id: str, svc: SessionService = Depends(get_service)):
    """Draft (again) for the latest user message with the current tags.

    Generation failures come back in the body with ``error`` set so the
    console can show a retryable notice.
    """
    try:
        draft = await svc.regenerate(session_id)
    except SafetyLockError as exc:
        raise HTTPException(status_code=423, detail=str(exc))
    return DraftResponse.from_draft(draft)


@router.post("/{session_id}/replies", response_model=MessageResponse)
async def send_reply(session_id: str, req: ReplyRequest, svc: SessionService = Depends(get_service)):
    """Send an operator-approved reply as the persona."""
    try:
        message = svc.send_reply(session_id, req.content, source=req.source)
    except SafetyLockError as exc:
        raise HTTPException(status_code=423, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return MessageResponse.from_message(message)


@router.post("/{session_id}/scripts/{key}", response_model=MessageResponse)
async def send_script(session_id: str, key: str, svc: SessionService = Depends(get_service)):
    """Send a canned operator script.  Works while the session is locked."""
    try:
        message = svc.send_script(session_id, key)
    except UnknownScriptError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return MessageResponse.from_message(message)


@router.post("/{session_id}/escalations", response_model=EscalationResponse)
async def submit_escalation(
    session_id: str,
    req: EscalationRequest,
    svc: SessionService = Depends(get_service),
):
    """File an escalation to the team log."""
    record = svc.submit_escalation(session_id, req.category, req.summary)
    return EscalationResponse.from_record(record)


@router.get("/{session_id}/escalations", response_model=list[EscalationResponse])
async def list_escalations(session_id: str, svc: SessionService = Depends(get_service)):
    """Escalations filed for this session, newest first."""
    return [EscalationResponse.from_record(r) for r in svc.escalations.get_escalations(session_id=session_id)]


@router.post("/{session_id}/reset", status_code=204)
async def reset_session(session_id: str, svc: SessionService = Depends(get_service)):
    """Clear the conversation and triage state."""
    svc.reset(session_id)
