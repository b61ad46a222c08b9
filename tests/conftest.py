"""Pytest configuration and shared fixtures for baton-server tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup, and an in-process fake
agent network served through httpx.MockTransport.
"""

import asyncio
import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from baton_server import create_app
from baton_server.agents import AgentClient, AgentDescriptor, AgentDirectory
from baton_server.config import BatonServerSettings


class FakeAgentNetwork:
    """Routes agent HTTP traffic by port to canned behaviour.

    Attributes:
        replies: Port to JSON reply (dict) or full httpx.Response
        down: Ports whose agents refuse connections
        delays: Port to seconds to wait before answering a call
        calls: Recorded (port, body) of every agent call, in order
        probes: Recorded (port, path) of every liveness probe
    """

    def __init__(self) -> None:
        self.replies: dict[int, dict | httpx.Response] = {}
        self.down: set[int] = set()
        self.delays: dict[int, float] = {}
        self.calls: list[tuple[int, dict]] = []
        self.probes: list[tuple[int, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        port = request.url.port
        if port in self.down:
            raise httpx.ConnectError("Connection refused", request=request)

        if request.method == "GET":
            self.probes.append((port, request.url.path))
            if request.url.path.endswith("agent-card.json"):
                return httpx.Response(200, json={"name": "Payment Agent", "version": "1.0"})
            return httpx.Response(200, json={"status": "ok"})

        body = json.loads(request.content)
        self.calls.append((port, body))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if port in self.delays:
                await asyncio.sleep(self.delays[port])
            reply = self.replies.get(port, {"response": f"ok from {port}"})
        finally:
            self.in_flight -= 1

        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def called_ports(self) -> list[int]:
        return [port for port, _ in self.calls]


@pytest.fixture
def fake_agents():
    """A fresh fake agent network."""
    return FakeAgentNetwork()


@pytest_asyncio.fixture
async def agent_client(fake_agents):
    """AgentClient wired to the fake agent network."""
    client = AgentClient(step_timeout=2.0, probe_timeout=1.0, transport=fake_agents.transport)
    yield client
    await client.close()


def make_agent(agent_id: str, port: int, **kwargs) -> AgentDescriptor:
    """Build a descriptor whose endpoint points at a fake agent port."""
    return AgentDescriptor(
        id=agent_id,
        display_name=agent_id.replace("-", " ").title(),
        endpoint=f"http://agents.test:{port}",
        **kwargs,
    )


@pytest.fixture
def agent_factory():
    """The make_agent helper, exposed to test modules."""
    return make_agent


@pytest_asyncio.fixture
async def directory(agent_client):
    """Directory with agents a (:9001), b (:9002), c (:9003), all reachable."""
    directory = AgentDirectory(agent_client, probe_interval=60.0, probe_timeout=1.0)
    for agent_id, port in (("a", 9001), ("b", 9002), ("c", 9003)):
        await directory.register(make_agent(agent_id, port))
    await directory.probe_all()
    yield directory
    await directory.stop()


@pytest.fixture
def test_settings():
    """Create test settings with no seeded agents and no startup probes.

    Returns:
        BatonServerSettings: Settings instance configured for testing.
    """
    return BatonServerSettings(
        host="127.0.0.1",
        port=9000,
        ollama_host="http://localhost:11434",
        seed_default_agents=False,
        probe_on_startup=False,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
