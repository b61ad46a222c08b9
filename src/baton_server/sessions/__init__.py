"""Conversation session management for baton-server.

Sessions live in memory only and are subject to idle expiry and a bounded
count.
"""

from baton_server.sessions.store import SessionStore
from baton_server.sessions.types import AgentMessage, Message, Session, UserMessage

__all__ = [
    "SessionStore",
    "Session",
    # Message types
    "Message",
    "UserMessage",
    "AgentMessage",
]
