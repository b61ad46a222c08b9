"""Statistics response model."""

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    """Response body for GET /api/v1/stats."""

    sessions: int = Field(description="Number of live sessions")
    agents: dict[str, int] = Field(description="Agents by reachability")
    workflows: dict[str, int] = Field(description="Retained workflow instances by status")
