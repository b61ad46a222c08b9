"""Services for baton-server."""

from baton_server.services.coordinator import Coordinator
from baton_server.services.prompts import build_prompt, build_system_prompt

__all__ = ["Coordinator", "build_prompt", "build_system_prompt"]
