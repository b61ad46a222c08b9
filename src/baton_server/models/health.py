"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "degraded").
        version: The version of baton-server.
        ollama_connected: Whether the reasoning backend answered.
        ollama_host: The Ollama host URL.
        agents: Counts of registered agents by reachability.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of baton-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    agents: dict[str, int] = Field(
        default_factory=dict,
        description="Registered agents by reachability (total, reachable, unreachable, unknown)",
    )
