"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for a specific domain (health, agents,
workflows, chat, etc.).
"""

from baton_server.routers import agents, chat, health, sessions, stats, tools, workflows

__all__ = [
    "agents",
    "chat",
    "health",
    "sessions",
    "stats",
    "tools",
    "workflows",
]
