"""Agent directory API endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from baton_server.agents import AgentDirectory
from baton_server.dependencies import get_agent_directory
from baton_server.errors import AgentNotFoundError
from baton_server.models.agents import (
    AgentListResponse,
    AgentStatusResponse,
    ProbeResponse,
    ReachabilityUpdateRequest,
    RegisterAgentRequest,
)
from baton_server.routers.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/agents", tags=["agents"])


@router.get("", response_model=AgentListResponse)
async def list_agents(
    reachable_only: bool = False,
    capability: str | None = None,
    directory: AgentDirectory = Depends(get_agent_directory),
) -> AgentListResponse:
    """List registered agents in registration order.

    Args:
        reachable_only: Only include agents whose last probe succeeded
        capability: Only include reachable agents with this capability tag
        directory: Injected agent directory
    """
    if capability is not None:
        agents = directory.find_by_capability(capability)
    elif reachable_only:
        agents = directory.list_reachable()
    else:
        agents = directory.list_all()

    return AgentListResponse(
        agents=[AgentStatusResponse.from_descriptor(agent) for agent in agents],
        total=len(agents),
    )


@router.post(
    "",
    response_model=AgentStatusResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_agent(
    request: RegisterAgentRequest,
    directory: AgentDirectory = Depends(get_agent_directory),
) -> AgentStatusResponse:
    """Register an agent, replacing any agent with the same id.

    The endpoint is not contacted; reachability stays unknown until the
    next probe.
    """
    agent = await directory.register(request.to_descriptor())
    return AgentStatusResponse.from_descriptor(agent)


@router.post("/probe", response_model=ProbeResponse)
async def probe_agents(
    directory: AgentDirectory = Depends(get_agent_directory),
) -> ProbeResponse:
    """Probe every registered agent now and return the outcomes."""
    results = await directory.probe_all()
    return ProbeResponse(results=results)


@router.get("/{agent_id}", response_model=AgentStatusResponse)
async def get_agent(
    agent_id: str,
    directory: AgentDirectory = Depends(get_agent_directory),
) -> AgentStatusResponse:
    """Get one agent and its reachability.

    Raises:
        HTTPException: 404 if the agent is not registered
    """
    agent = directory.get(agent_id)
    if agent is None:
        raise http_error(AgentNotFoundError(agent_id))
    return AgentStatusResponse.from_descriptor(agent)


@router.put("/{agent_id}/reachability", response_model=AgentStatusResponse)
async def set_agent_reachability(
    agent_id: str,
    request: ReachabilityUpdateRequest,
    directory: AgentDirectory = Depends(get_agent_directory),
) -> AgentStatusResponse:
    """Operator override of an agent's reachability.

    The next probe round overwrites the value again.

    Raises:
        HTTPException: 404 if the agent is not registered
    """
    agent = await directory.set_reachability(agent_id, request.reachability)
    if agent is None:
        raise http_error(AgentNotFoundError(agent_id))
    logger.info(f"Operator set agent {agent_id} to {request.reachability.value}")
    return AgentStatusResponse.from_descriptor(agent)
