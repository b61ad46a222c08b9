"""Tool endpoints.

These are the text-in/text-out operations a reasoning front door invokes
as tools: a direct message to one agent, a health check of one agent, and
the execution of a named workflow.
"""

import logging

from fastapi import APIRouter, Depends

from baton_server.dependencies import get_coordinator
from baton_server.errors import BatonError
from baton_server.models.tools import (
    CheckAgentHealthRequest,
    ExecuteWorkflowRequest,
    SendMessageToAgentRequest,
    ToolResponse,
)
from baton_server.routers.errors import http_error
from baton_server.services import Coordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.post("/send-message-to-agent", response_model=ToolResponse)
async def send_message_to_agent(
    request: SendMessageToAgentRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> ToolResponse:
    """Send one message to one agent, bypassing the workflow engine.

    Raises:
        HTTPException: 404 if the agent is unknown, 502 if it is unreachable
            or the call fails (the transport reason is included)
    """
    try:
        result = await coordinator.call_agent(request.agent_id, request.message)
    except BatonError as e:
        raise http_error(e)
    return ToolResponse(result=result)


@router.post("/check-agent-health", response_model=ToolResponse)
async def check_agent_health(
    request: CheckAgentHealthRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> ToolResponse:
    """Probe one agent now and describe the outcome.

    Raises:
        HTTPException: 404 if the agent is unknown
    """
    try:
        result = await coordinator.check_agent_health(request.agent_id)
    except BatonError as e:
        raise http_error(e)
    return ToolResponse(result=result)


@router.post("/execute-workflow", response_model=ToolResponse)
async def execute_workflow(
    request: ExecuteWorkflowRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> ToolResponse:
    """Run a named workflow and return its formatted outcome.

    Raises:
        HTTPException: 404 if the workflow is unknown, 400 if the context
            does not satisfy it
    """
    try:
        result = await coordinator.run_named_workflow(
            request.workflow_name, request.context, owner=request.session_id
        )
    except BatonError as e:
        raise http_error(e)
    return ToolResponse(result=result)
