"""Remote agent registry and transport.

This package provides the agent directory with liveness probing, the HTTP
client used to call agents, and the seed list of default agents.
"""

from baton_server.agents.client import AgentClient
from baton_server.agents.directory import AgentDirectory
from baton_server.agents.seed import default_agents
from baton_server.agents.types import (
    AgentDescriptor,
    AgentFailure,
    AgentReply,
    AgentResponse,
    Reachability,
)

__all__ = [
    "AgentClient",
    "AgentDirectory",
    "default_agents",
    # Types
    "AgentDescriptor",
    "AgentFailure",
    "AgentReply",
    "AgentResponse",
    "Reachability",
]
