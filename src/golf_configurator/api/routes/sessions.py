"""Configurator session API endpoints."""

from fastapi import APIRouter, HTTPException

from golf_configurator.api.dependencies import SessionServiceDep
from golf_configurator.api.schemas import SessionActionRequest
from golf_configurator.models.pydantic_models import SessionSnapshot
from golf_configurator.services.session_service import (
    SessionNotFoundError,
    UnknownActionError,
)

router = APIRouter()


@router.post("", response_model=SessionSnapshot, status_code=201)
async def create_session(service: SessionServiceDep) -> SessionSnapshot:
    """Start a configurator session with the default selection."""
    return service.create_session()


@router.get("/{session_key}", response_model=SessionSnapshot)
async def get_session(session_key: str, service: SessionServiceDep) -> SessionSnapshot:
    """Get the selection and derived values of a session.

    Raises:
        HTTPException: 404 if session not found.
    """
    try:
        return service.get_session(session_key)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_key} not found") from None


@router.post("/{session_key}/actions", response_model=SessionSnapshot)
async def apply_action(
    session_key: str,
    request: SessionActionRequest,
    service: SessionServiceDep,
) -> SessionSnapshot:
    """Apply one action to a session.

    A rejected action returns 200 with ``applied`` false and the reason in
    ``state.error``; the stored selection is unchanged.

    Raises:
        HTTPException: 404 if session not found, 400 for an unknown action.
    """
    try:
        return service.apply_action(session_key, request.action, request.params)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_key} not found") from None
    except UnknownActionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.delete("/{session_key}", status_code=204)
async def delete_session(session_key: str, service: SessionServiceDep) -> None:
    """Delete a session.

    Raises:
        HTTPException: 404 if session not found.
    """
    try:
        service.delete_session(session_key)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session {session_key} not found") from None
