"""Pydantic models for session API responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from baton_server.sessions.types import Session


class MessageResponse(BaseModel):
    """One message in a session history."""

    role: str = Field(description="Message role (user or agent)")
    content: str = Field(description="Message content")
    timestamp: datetime = Field(description="Time the message was added")


class SessionSummaryResponse(BaseModel):
    """Session list entry."""

    session_id: str
    message_count: int
    created_at: datetime
    last_activity_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummaryResponse":
        return cls(
            session_id=session.session_id,
            message_count=session.message_count,
            created_at=session.created_at,
            last_activity_at=session.last_activity_at,
        )


class SessionListResponse(BaseModel):
    """Response body for GET /api/v1/sessions."""

    sessions: list[SessionSummaryResponse]


class SessionDetailResponse(SessionSummaryResponse):
    """Response body for GET /api/v1/sessions/{session_id}."""

    messages: list[MessageResponse] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_session(cls, session: Session) -> "SessionDetailResponse":
        return cls(
            session_id=session.session_id,
            message_count=session.message_count,
            created_at=session.created_at,
            last_activity_at=session.last_activity_at,
            messages=[
                MessageResponse(
                    role=msg.role, content=msg.content, timestamp=msg.timestamp
                )
                for msg in session.messages
            ],
            context=session.context,
        )


class CancelSessionResponse(BaseModel):
    """Response body for DELETE /api/v1/sessions/{session_id}."""

    session_id: str
    cancelled_workflows: int = Field(
        description="Number of unfinished workflows that were cancelled"
    )
