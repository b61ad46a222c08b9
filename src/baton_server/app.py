"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from baton_server import __version__
from baton_server.agents import AgentClient, AgentDirectory, default_agents
from baton_server.config import BatonServerSettings
from baton_server.ollama import OllamaClient
from baton_server.routers import agents, chat, health, sessions, stats, tools, workflows
from baton_server.services import Coordinator
from baton_server.sessions import SessionStore
from baton_server.workflows import WorkflowEngine

logger = logging.getLogger(__name__)


async def _housekeeping(app: FastAPI, interval: float) -> None:
    """Periodically drop expired sessions and finished workflow instances."""
    while True:
        await asyncio.sleep(interval)
        try:
            await app.state.coordinator.sweep_expired()
            await app.state.workflow_engine.evict_expired()
        except Exception as e:
            logger.error(f"Housekeeping sweep failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The agent client, directory, workflow engine, session store and
    coordinator are created once at startup and stored in app.state for
    reuse across all requests. Background tasks (the probe loop and the
    housekeeping sweep) are tied to the application's lifetime.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: BatonServerSettings = app.state.settings

    app.state.ollama_client = OllamaClient(
        host=settings.ollama_host, model=settings.ollama_model
    )
    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    app.state.agent_client = AgentClient(
        message_path=settings.agent_message_path,
        probe_path=settings.probe_path,
        step_timeout=settings.step_timeout_seconds,
        probe_timeout=settings.probe_timeout_seconds,
    )
    app.state.agent_directory = AgentDirectory(
        app.state.agent_client,
        probe_interval=settings.probe_interval_seconds,
        probe_timeout=settings.probe_timeout_seconds,
    )
    if settings.seed_default_agents:
        for descriptor in default_agents(settings):
            await app.state.agent_directory.register(descriptor)

    app.state.workflow_engine = WorkflowEngine(
        app.state.agent_directory,
        app.state.agent_client,
        retention_seconds=settings.workflow_retention_seconds,
        max_instances=settings.max_workflow_instances,
    )
    app.state.session_store = SessionStore(
        timeout_seconds=settings.session_timeout_seconds,
        max_sessions=settings.max_sessions,
    )
    app.state.coordinator = Coordinator(
        app.state.agent_directory,
        app.state.workflow_engine,
        app.state.agent_client,
        app.state.ollama_client,
        app.state.session_store,
        reasoning_options={"temperature": settings.reasoning_temperature},
        preview_chars=settings.result_preview_chars,
    )
    app.state.background_tasks = set()

    if settings.probe_on_startup:
        await app.state.agent_directory.probe_all()
    app.state.agent_directory.start()

    housekeeping = asyncio.create_task(
        _housekeeping(app, settings.housekeeping_interval_seconds)
    )
    logger.info(
        f"baton-server ready with {len(app.state.agent_directory.list_all())} agents "
        f"and {len(app.state.workflow_engine.list_definitions())} workflow templates"
    )

    yield

    housekeeping.cancel()
    pending = [housekeeping, *app.state.background_tasks]
    for task in app.state.background_tasks:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    await app.state.agent_directory.stop()
    await app.state.agent_client.close()
    await app.state.ollama_client.close()
    logger.info("baton-server shut down")


def create_app(settings: BatonServerSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a FastAPI instance with all routers,
    middleware, and configuration applied. It can accept an optional
    settings object for testing or explicit configuration.

    Args:
        settings: Optional BatonServerSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from baton_server.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="baton-server",
        description="Orchestration service that drives multi-step workflows across remote agents",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(agents.router)
    app.include_router(workflows.router)
    app.include_router(chat.router)
    app.include_router(sessions.router)
    app.include_router(tools.router)
    app.include_router(stats.router)

    return app
