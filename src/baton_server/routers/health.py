"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from baton_server import __version__
from baton_server.agents import AgentDirectory
from baton_server.models.health import HealthResponse
from baton_server.ollama import OllamaClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the service status and version, Ollama connectivity, and the
    agent counts by reachability. The status is "degraded" when no agent is
    currently reachable.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    ollama_connected = None
    ollama_host = None
    agents: dict[str, int] = {}

    if hasattr(request.app.state, "ollama_client"):
        ollama_client: OllamaClient = request.app.state.ollama_client
        ollama_host = ollama_client.host

        try:
            ollama_connected = await ollama_client.check_connection()
            logger.debug(f"Ollama connectivity check: {ollama_connected}")
        except Exception as e:
            logger.warning(f"Ollama connectivity check failed: {e}")
            ollama_connected = False

    if hasattr(request.app.state, "agent_directory"):
        directory: AgentDirectory = request.app.state.agent_directory
        agents = directory.stats()

    status = "ok"
    if agents.get("total") and not agents.get("reachable"):
        status = "degraded"

    return HealthResponse(
        status=status,
        version=__version__,
        ollama_connected=ollama_connected,
        ollama_host=ollama_host,
        agents=agents,
    )
