"""Session API endpoints."""

import logging

from fastapi import APIRouter, Depends

from baton_server.dependencies import get_coordinator
from baton_server.errors import BatonError
from baton_server.models.sessions import (
    CancelSessionResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionSummaryResponse,
)
from baton_server.routers.errors import http_error
from baton_server.services import Coordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    coordinator: Coordinator = Depends(get_coordinator),
) -> SessionListResponse:
    """List live sessions, most recently active first."""
    return SessionListResponse(
        sessions=[
            SessionSummaryResponse.from_session(session)
            for session in coordinator.list_sessions()
        ]
    )


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: str,
    coordinator: Coordinator = Depends(get_coordinator),
) -> SessionDetailResponse:
    """Get a session with its message history.

    Raises:
        HTTPException: 404 if the session does not exist or expired
    """
    try:
        session = coordinator.get_session(session_id)
    except BatonError as e:
        raise http_error(e)
    return SessionDetailResponse.from_session(session)


@router.delete("/{session_id}", response_model=CancelSessionResponse)
async def cancel_session(
    session_id: str,
    coordinator: Coordinator = Depends(get_coordinator),
) -> CancelSessionResponse:
    """Cancel a session: drop it and cancel the workflows it started.

    Raises:
        HTTPException: 404 if the session does not exist
    """
    try:
        cancelled = await coordinator.cancel_session(session_id)
    except BatonError as e:
        raise http_error(e)
    return CancelSessionResponse(session_id=session_id, cancelled_workflows=cancelled)
