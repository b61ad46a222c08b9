"""Pydantic models for the tool endpoints used by the reasoning front door.

Every tool answers with plain text in a ToolResponse.
"""

from typing import Any

from pydantic import BaseModel, Field


class SendMessageToAgentRequest(BaseModel):
    """Request body for POST /api/v1/tools/send-message-to-agent."""

    agent_id: str = Field(..., description="Target agent id")
    message: str = Field(..., min_length=1, description="Request text for the agent")


class CheckAgentHealthRequest(BaseModel):
    """Request body for POST /api/v1/tools/check-agent-health."""

    agent_id: str = Field(..., description="Agent to probe")


class ExecuteWorkflowRequest(BaseModel):
    """Request body for POST /api/v1/tools/execute-workflow."""

    workflow_name: str = Field(..., description="Name of the workflow template")
    context: dict[str, Any] = Field(
        default_factory=dict, description="Initial context values"
    )
    session_id: str | None = Field(default=None, description="Owning session")


class ToolResponse(BaseModel):
    """Text result of a tool call."""

    result: str = Field(description="Human-readable result")
