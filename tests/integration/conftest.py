"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests: the reasoning
backend is mocked, and agent traffic is served by the fake agent network.
"""

from unittest.mock import AsyncMock, patch

import pytest

from baton_server.agents import AgentClient
from baton_server.config import BatonServerSettings

WALLET_PORT = 41252
NEGOTIATION_PORT = 41251
PAYMENT_PORT = 41245


@pytest.fixture
def test_settings():
    """Settings with the default agents seeded against the fake network."""
    return BatonServerSettings(
        host="127.0.0.1",
        port=9000,
        ollama_host="http://localhost:11434",
        seed_default_agents=True,
        wallet_balance_agent_url=f"http://agents.test:{WALLET_PORT}",
        negotiation_agent_url=f"http://agents.test:{NEGOTIATION_PORT}",
        payment_agent_url=f"http://agents.test:{PAYMENT_PORT}",
        probe_on_startup=True,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    """
    with patch("baton_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_instance.generate.return_value = (
            "I'll start by checking your wallet balance."
        )

        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture(autouse=True)
def fake_agent_transport(fake_agents):
    """Route the app's agent traffic through the fake agent network."""
    with patch(
        "baton_server.app.AgentClient",
        side_effect=lambda **kwargs: AgentClient(transport=fake_agents.transport, **kwargs),
    ):
        yield fake_agents
