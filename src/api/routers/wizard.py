"""Wizard session routes: one StoryWizard per session, driven over HTTP.

Each session keeps its wizard in memory. Every operation returns the new
state snapshot and pushes it to the session's websocket viewers, which also
receive progress ticks while an operation is outstanding.
"""

import inspect
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from api.dependencies import create_wizard
from api.schemas import WizardEditRequest, WizardIdeaRequest, WizardStepRequest
from api.websocket_manager import WebSocketManager
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from story_wizard import InvalidTransitionError, OperationInProgressError, StoryWizard
from utils.config import load_config
from utils.logging import get_logger, wizard_log_context
from utils.progress import ProgressEstimator

logger = get_logger(__name__)

router = APIRouter(tags=["Wizard"])

# Wizard session storage (in-memory, single process). Sessions idle longer
# than SESSION_IDLE_SECONDS are dropped whenever a new session is created.
sessions: dict[str, dict[str, Any]] = {}

# WebSocket manager for progress and state updates
ws_manager = WebSocketManager()


def _get_wizard(session_id: str) -> StoryWizard:
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Wizard session not found")
    sessions[session_id]["last_active"] = time.monotonic()
    return sessions[session_id]["wizard"]


def _session_payload(session_id: str) -> dict:
    session = sessions[session_id]
    return {
        "id": session_id,
        "created_at": session["created_at"],
        "state": session["wizard"].snapshot(),
    }


def expire_idle_sessions(idle_seconds: float) -> list[str]:
    """Drop sessions nobody has touched for ``idle_seconds``.

    Sessions with an operation in flight or a connected viewer are kept.

    Returns:
        IDs of the dropped sessions
    """
    cutoff = time.monotonic() - idle_seconds
    expired = [
        session_id
        for session_id, session in sessions.items()
        if session["last_active"] < cutoff
        and not session["wizard"].context.in_flight
        and not ws_manager.connections.get(session_id)
    ]
    for session_id in expired:
        del sessions[session_id]
        ws_manager.cleanup(session_id)

    if expired:
        logger.info("wizard_sessions_expired", count=len(expired), remaining=len(sessions))
    return expired


async def _apply(session_id: str, operation: str, action: Callable[[StoryWizard], Any]) -> dict:
    """Run one wizard operation and publish the resulting state.

    Raises:
        HTTPException: 404 unknown session, 409 guard violation, 429 operation in flight
    """
    wizard = _get_wizard(session_id)
    with wizard_log_context(session_id, operation):
        try:
            result = action(wizard)
            if inspect.isawaitable(result):
                await result
        except OperationInProgressError as e:
            logger.info("wizard_operation_rejected", reason="in_flight", blocking=e.operation)
            raise HTTPException(status_code=429, detail=str(e))
        except InvalidTransitionError as e:
            logger.info("wizard_operation_rejected", reason="guard", error=str(e))
            raise HTTPException(status_code=409, detail=str(e))

        if session_id not in sessions:
            logger.info("wizard_session_gone", reason="deleted during operation")
            raise HTTPException(status_code=404, detail="Wizard session not found")

        logger.debug("wizard_operation_applied", stage=wizard.context.stage.value)

    payload = _session_payload(session_id)
    await ws_manager.send_state(session_id, payload["state"])
    return payload


# =============================================================================
# Session lifecycle
# =============================================================================


@router.post("/api/wizard", summary="Create wizard session", description="Start a new story at the input stage.")
async def create_session() -> dict:
    """Create a wizard session, dropping idle ones first."""
    expire_idle_sessions(load_config()["session_idle_seconds"])

    session_id = str(uuid.uuid4())

    async def publish_progress(value: int) -> None:
        await ws_manager.send_progress(session_id, value)

    sessions[session_id] = {
        "wizard": create_wizard(progress=ProgressEstimator(update_callback=publish_progress)),
        "created_at": datetime.now(timezone.utc).isoformat(),
        "last_active": time.monotonic(),
    }
    logger.info("wizard_session_created", session_id=session_id)
    return _session_payload(session_id)


@router.get("/api/wizard/{session_id}", summary="Get wizard session")
async def get_session(session_id: str) -> dict:
    """Current state of a wizard session."""
    _get_wizard(session_id)
    return _session_payload(session_id)


@router.delete("/api/wizard/{session_id}", summary="Delete wizard session")
async def delete_session(session_id: str) -> dict:
    """Discard a wizard session and disconnect its viewers."""
    _get_wizard(session_id)
    del sessions[session_id]
    ws_manager.cleanup(session_id)
    logger.info("wizard_session_deleted", session_id=session_id)
    return {"message": "Wizard session deleted"}


# =============================================================================
# Input and outline
# =============================================================================


@router.post("/api/wizard/{session_id}/set-idea", summary="Set idea")
async def set_idea(session_id: str, request: WizardIdeaRequest) -> dict:
    return await _apply(session_id, "set_idea", lambda w: w.set_idea(request.idea))


@router.post("/api/wizard/{session_id}/generate-outline", summary="Generate outline")
async def generate_outline(session_id: str) -> dict:
    return await _apply(session_id, "generate_outline", lambda w: w.generate_outline())


@router.post("/api/wizard/{session_id}/regenerate-step", summary="Regenerate one step")
async def regenerate_step(session_id: str, request: WizardStepRequest) -> dict:
    return await _apply(session_id, "regenerate_step", lambda w: w.regenerate_step(request.index))


@router.post("/api/wizard/{session_id}/select-step", summary="Select step for editing")
async def select_step(session_id: str, request: WizardStepRequest) -> dict:
    return await _apply(session_id, "select_step", lambda w: w.select_step(request.index))


@router.post("/api/wizard/{session_id}/update-edit-buffer", summary="Update editing buffer")
async def update_edit_buffer(session_id: str, request: WizardEditRequest) -> dict:
    return await _apply(session_id, "update_edit_buffer", lambda w: w.update_edit_buffer(request.text))


@router.post("/api/wizard/{session_id}/edit-step", summary="Edit selected step")
async def edit_step(session_id: str, request: WizardEditRequest) -> dict:
    """Overwrite a step description; without an index the selected step is used."""

    def action(wizard: StoryWizard):
        if request.index is None:
            if wizard.context.selected_step_index is None:
                raise InvalidTransitionError("No step is selected")
            return wizard.edit_step(wizard.context.selected_step_index, request.text)
        return wizard.edit_step(request.index, request.text)

    return await _apply(session_id, "edit_step", action)


@router.post("/api/wizard/{session_id}/commit-edit", summary="Commit editing buffer")
async def commit_edit(session_id: str) -> dict:
    return await _apply(session_id, "commit_edit", lambda w: w.commit_edit())


# =============================================================================
# Storyboard and composer
# =============================================================================


@router.post("/api/wizard/{session_id}/generate-storyboard", summary="Generate storyboard")
async def generate_storyboard(session_id: str) -> dict:
    return await _apply(session_id, "generate_storyboard", lambda w: w.generate_storyboard())


@router.post("/api/wizard/{session_id}/regenerate-storyboard", summary="Regenerate storyboard")
async def regenerate_storyboard(session_id: str) -> dict:
    return await _apply(session_id, "regenerate_storyboard", lambda w: w.regenerate_storyboard())


@router.post("/api/wizard/{session_id}/generate-narration", summary="Generate narration")
async def generate_narration(session_id: str) -> dict:
    return await _apply(session_id, "generate_narration", lambda w: w.generate_narration())


@router.post("/api/wizard/{session_id}/toggle-cinematic-mode", summary="Toggle cinematic mode")
async def toggle_cinematic_mode(session_id: str) -> dict:
    return await _apply(session_id, "toggle_cinematic_mode", lambda w: w.toggle_cinematic_mode())


@router.post("/api/wizard/{session_id}/compose-video", summary="Compose video")
async def compose_video(session_id: str) -> dict:
    return await _apply(session_id, "compose_video", lambda w: w.compose_video())


# =============================================================================
# Navigation and completion
# =============================================================================


@router.post("/api/wizard/{session_id}/save", summary="Save story")
async def save(session_id: str) -> dict:
    return await _apply(session_id, "save", lambda w: w.save())


@router.post("/api/wizard/{session_id}/reset", summary="Reset wizard")
async def reset(session_id: str) -> dict:
    return await _apply(session_id, "reset", lambda w: w.reset())


@router.post("/api/wizard/{session_id}/back", summary="Go back one stage")
async def go_back(session_id: str) -> dict:
    return await _apply(session_id, "go_back", lambda w: w.go_back())


@router.post("/api/wizard/{session_id}/forward", summary="Go forward one stage")
async def go_forward(session_id: str) -> dict:
    return await _apply(session_id, "go_forward", lambda w: w.go_forward())


@router.websocket("/ws/wizard/{session_id}")
async def websocket_wizard(websocket: WebSocket, session_id: str) -> None:
    """Stream progress ticks and state snapshots of a wizard session.

    Args:
        websocket: WebSocket connection
        session_id: Session to watch
    """
    if session_id not in sessions:
        await websocket.accept()
        await websocket.send_json({"error": "Wizard session not found"})
        await websocket.close()
        return

    await ws_manager.connect(session_id, websocket)

    try:
        # Send current state immediately
        await websocket.send_json({"type": "state", "state": sessions[session_id]["wizard"].snapshot()})

        while True:
            try:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text("pong")
            except WebSocketDisconnect:
                break

    except Exception as e:
        logger.error("wizard_websocket_error", session_id=session_id, error=str(e))
    finally:
        ws_manager.disconnect(session_id, websocket)
