"""Chat API endpoint.

The chat endpoint is the conversational front door: the user's message is
added to the session history and answered by the reasoning backend, which
is told which agents are reachable and which workflows exist.
"""

import logging
import uuid

from fastapi import APIRouter, Depends

from baton_server.dependencies import get_coordinator
from baton_server.errors import BatonError
from baton_server.models.chat import ChatRequest, ChatResponse
from baton_server.routers.errors import http_error
from baton_server.services import Coordinator
from baton_server.workflows.types import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> ChatResponse:
    """Send a message and receive the orchestrator's reply.

    Args:
        request: Chat request with the message and optional session id
        coordinator: Injected coordinator

    Returns:
        ChatResponse with the reply and the session id to continue with

    Raises:
        HTTPException: 502 if the reasoning backend fails
    """
    session_id = request.session_id or uuid.uuid4().hex[:10]
    logger.info(f"Chat message for session {session_id}")

    try:
        reply = await coordinator.handle(session_id, request.message)
    except BatonError as e:
        raise http_error(e)

    return ChatResponse(session_id=session_id, response=reply, timestamp=utcnow())
