"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject the settings and the long-lived services created
in the application lifespan.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from baton_server.agents import AgentDirectory
from baton_server.config import BatonServerSettings
from baton_server.services import Coordinator
from baton_server.workflows import WorkflowEngine


@lru_cache
def get_settings() -> BatonServerSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the BATON_ prefix.

    Returns:
        BatonServerSettings: The application configuration settings.
    """
    return BatonServerSettings()


def _from_state(request: Request, name: str, label: str):
    if not hasattr(request.app.state, name):
        raise HTTPException(
            status_code=503,
            detail=f"{label} not initialized",
        )
    return getattr(request.app.state, name)


def get_agent_directory(request: Request) -> AgentDirectory:
    """Get the agent directory from app state.

    Raises:
        HTTPException: If the directory is not initialized (503 Service Unavailable).
    """
    return _from_state(request, "agent_directory", "Agent directory")


def get_workflow_engine(request: Request) -> WorkflowEngine:
    """Get the workflow engine from app state.

    Raises:
        HTTPException: If the engine is not initialized (503 Service Unavailable).
    """
    return _from_state(request, "workflow_engine", "Workflow engine")


def get_coordinator(request: Request) -> Coordinator:
    """Get the coordinator from app state.

    Raises:
        HTTPException: If the coordinator is not initialized (503 Service Unavailable).
    """
    return _from_state(request, "coordinator", "Coordinator")
