"""Data types for workflow definitions and instances.

A WorkflowDefinition is a reusable template of steps bound to agent actions.
A WorkflowInstance is one execution of a definition, owned by the
WorkflowEngine for its whole lifetime.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from baton_server.agents.types import AgentReply


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class StepTemplate:
    """One step of a workflow definition.

    Attributes:
        id: Step identifier, unique within the definition
        agent_id: Agent that executes the step
        action: Opaque instruction string passed to the agent
        input_template: Extra request fields; string values may reference
            context keys as "{key}"
        depends_on: Ids of steps that must complete first
        reads: Context keys the input template references
    """

    id: str
    agent_id: str
    action: str
    input_template: dict[str, Any] = field(default_factory=dict)
    depends_on: frozenset[str] = field(default_factory=frozenset)
    reads: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "depends_on", frozenset(self.depends_on))
        object.__setattr__(self, "reads", frozenset(self.reads))


@dataclass(frozen=True)
class WorkflowDefinition:
    """A named, reusable directed graph of steps."""

    name: str
    description: str
    steps: tuple[StepTemplate, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]


@dataclass
class StepInstance:
    """Execution state of one step inside a workflow instance."""

    id: str
    agent_id: str
    action: str
    input: dict[str, Any]
    depends_on: frozenset[str]
    status: StepStatus = StepStatus.PENDING
    result: AgentReply | None = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass
class WorkflowInstance:
    """One execution of a workflow definition.

    The overall status only moves forward: pending -> running ->
    completed or failed. Once terminal, no step is mutated again.
    """

    id: str
    definition: WorkflowDefinition
    steps: list[StepInstance]
    context: dict[str, Any] = field(default_factory=dict)
    status: WorkflowStatus = WorkflowStatus.PENDING
    error: str | None = None
    owner: str | None = None
    cancel_requested: bool = False
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def is_terminal(self) -> bool:
        return self.status in (WorkflowStatus.COMPLETED, WorkflowStatus.FAILED)

    @property
    def completed_steps(self) -> int:
        return sum(1 for step in self.steps if step.status is StepStatus.COMPLETED)

    def step(self, step_id: str) -> StepInstance:
        """Return the step with the given id.

        Raises:
            KeyError: If the instance has no such step
        """
        for step in self.steps:
            if step.id == step_id:
                return step
        raise KeyError(step_id)


@dataclass(frozen=True)
class WorkflowEvent:
    """Progress notification emitted while a workflow runs.

    Event types: workflow_started, step_started, step_completed, step_failed,
    workflow_completed, workflow_failed.
    """

    type: str
    workflow_id: str
    step_id: str | None = None
    message: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
