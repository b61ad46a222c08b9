"""Pydantic models for agent directory requests and responses."""

from pydantic import BaseModel, ConfigDict, Field

from baton_server.agents.types import AgentDescriptor, Reachability


class AgentStatusResponse(BaseModel):
    """A registered agent and its last known reachability."""

    id: str = Field(description="Unique agent id")
    display_name: str = Field(description="Human-readable agent name")
    endpoint: str = Field(description="Base URL of the agent service")
    capabilities: list[str] = Field(
        default_factory=list, description="Capability tags, sorted"
    )
    reachability: Reachability = Field(description="Outcome of the last probe")
    probe_path: str | None = Field(
        default=None, description="Liveness path override, if any"
    )
    last_probe_error: str | None = Field(
        default=None, description="Reason of the last failed probe"
    )

    @classmethod
    def from_descriptor(cls, agent: AgentDescriptor) -> "AgentStatusResponse":
        return cls(
            id=agent.id,
            display_name=agent.display_name,
            endpoint=agent.endpoint,
            capabilities=sorted(agent.capabilities),
            reachability=agent.reachability,
            probe_path=agent.probe_path,
            last_probe_error=agent.last_probe_error,
        )


class AgentListResponse(BaseModel):
    """Response body for GET /api/v1/agents."""

    agents: list[AgentStatusResponse] = Field(
        description="Agents in registration order"
    )
    total: int = Field(description="Number of agents returned")


class RegisterAgentRequest(BaseModel):
    """Request body for POST /api/v1/agents."""

    id: str = Field(..., min_length=1, description="Unique agent id")
    display_name: str = Field(..., min_length=1, description="Human-readable name")
    endpoint: str = Field(..., min_length=1, description="Base URL of the agent")
    capabilities: list[str] = Field(
        default_factory=list, description="Capability tags"
    )
    probe_path: str | None = Field(
        default=None,
        description="Liveness path override (e.g. /.well-known/agent-card.json)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "asset-broker-agent",
                "display_name": "Asset Broker Agent",
                "endpoint": "http://localhost:41250",
                "capabilities": ["asset_negotiation"],
            }
        }
    )

    def to_descriptor(self) -> AgentDescriptor:
        return AgentDescriptor(
            id=self.id,
            display_name=self.display_name,
            endpoint=self.endpoint,
            capabilities=frozenset(self.capabilities),
            probe_path=self.probe_path,
        )


class ReachabilityUpdateRequest(BaseModel):
    """Request body for the operator reachability override."""

    reachability: Reachability = Field(..., description="New reachability state")


class ProbeResponse(BaseModel):
    """Outcome of a probe round, keyed by agent id."""

    results: dict[str, Reachability] = Field(description="Reachability per agent")
