"""Pydantic models for the chat endpoint."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat."""

    message: str = Field(..., min_length=1, description="The user message")
    session_id: str | None = Field(
        default=None,
        description="Session key; a new session is started when omitted",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Buy 100 carbon credits for my wallet",
                "session_id": "a1b2c3d4e5",
            }
        }
    )


class ChatResponse(BaseModel):
    """Response body for POST /api/v1/chat."""

    session_id: str = Field(description="Session identifier")
    response: str = Field(description="The orchestrator's reply")
    timestamp: datetime = Field(description="Time the reply was produced (UTC)")
