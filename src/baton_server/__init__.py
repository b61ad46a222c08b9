"""baton-server: orchestration service for remote capability agents.

This package provides an agent directory with liveness probing, a workflow
engine that drives dependency-ordered step graphs against those agents one
call at a time, and a REST/SSE interface over both.
"""

__version__ = "0.1.0"

from baton_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
