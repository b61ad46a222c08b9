"""Type definitions for remote agents.

This module contains the descriptor used by the agent directory and the
tagged response variant every transport shape is converted into before it
reaches the workflow engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Reachability(str, Enum):
    """Outcome of the most recent liveness probe for an agent."""

    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"
    UNKNOWN = "unknown"


@dataclass
class AgentDescriptor:
    """Identity of a remote capability.

    Attributes:
        id: Unique, stable key (e.g., "wallet-balance-agent")
        display_name: Human-readable name
        endpoint: Base URL of the agent service
        capabilities: Capability tags (e.g., {"balance_check"})
        reachability: Last known probe outcome; written only by probes or
            explicit operator action
        probe_path: Optional per-agent override of the liveness path
        last_probe_error: Reason of the last failed probe, if any
    """

    id: str
    display_name: str
    endpoint: str
    capabilities: frozenset[str] = field(default_factory=frozenset)
    reachability: Reachability = Reachability.UNKNOWN
    probe_path: str | None = None
    last_probe_error: str | None = None

    def __post_init__(self) -> None:
        self.capabilities = frozenset(self.capabilities)
        self.endpoint = self.endpoint.rstrip("/")

    @property
    def is_reachable(self) -> bool:
        return self.reachability is Reachability.REACHABLE


@dataclass(frozen=True)
class AgentReply:
    """A successful agent call.

    Attributes:
        text: Human-readable summary extracted from the response
        data: Structured payload, if the agent returned any
    """

    text: str
    data: Any = None


@dataclass(frozen=True)
class AgentFailure:
    """A failed agent call (transport error, timeout, or failure reported by the agent)."""

    reason: str


# Tagged variant produced by every response adapter
AgentResponse = AgentReply | AgentFailure
