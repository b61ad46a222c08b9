"""Data types for conversation sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from baton_server.workflows.types import utcnow


@dataclass
class UserMessage:
    """A message from the user."""

    role: str = "user"
    content: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.role = "user"


@dataclass
class AgentMessage:
    """A reply produced by the orchestrator."""

    role: str = "agent"
    content: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.role = "agent"


Message = UserMessage | AgentMessage


@dataclass
class Session:
    """Conversation-level state for one session key.

    Attributes:
        session_id: Caller-chosen session key
        messages: Ordered message history
        context: Free-form key-value bag
        created_at: Creation time (UTC)
        last_activity_at: Time of the last appended message (UTC)
        cancelled: Set once the session has been cancelled
    """

    session_id: str
    messages: list[Message] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    last_activity_at: datetime = field(default_factory=utcnow)
    cancelled: bool = False

    def add_message(self, message: Message) -> None:
        self.messages.append(message)
        self.last_activity_at = utcnow()

    @property
    def message_count(self) -> int:
        return len(self.messages)
