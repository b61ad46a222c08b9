"""Exception hierarchy for baton-server.

Every error raised by the orchestration core derives from BatonError so the
HTTP layer can translate them into structured error responses. Probe failures
are deliberately absent: the agent directory records them as state instead
of raising.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from baton_server.agents.types import Reachability
    from baton_server.workflows.types import WorkflowInstance


class BatonError(Exception):
    """Base class for all baton-server errors."""

    code = "baton_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Structured details included in HTTP error payloads."""
        return {}


class NotFoundError(BatonError):
    """A caller referenced an id or name that does not exist."""

    code = "not_found"


class AgentNotFoundError(NotFoundError):
    code = "agent_not_found"

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent {agent_id} not found")
        self.agent_id = agent_id

    def details(self) -> dict[str, Any]:
        return {"agent_id": self.agent_id}


class WorkflowNotFoundError(NotFoundError):
    code = "workflow_not_found"

    def __init__(self, instance_id: str) -> None:
        super().__init__(f"Workflow {instance_id} not found")
        self.instance_id = instance_id

    def details(self) -> dict[str, Any]:
        return {"workflow_id": self.instance_id}


class WorkflowTemplateNotFoundError(NotFoundError):
    code = "workflow_template_not_found"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown workflow template: {name}")
        self.name = name

    def details(self) -> dict[str, Any]:
        return {"name": self.name}


class SessionNotFoundError(NotFoundError):
    code = "session_not_found"

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id

    def details(self) -> dict[str, Any]:
        return {"session_id": self.session_id}


class AgentCallError(BatonError):
    """A call to a remote agent failed (transport error, timeout, bad reply)."""

    code = "agent_call_failed"

    def __init__(self, agent_id: str, reason: str) -> None:
        super().__init__(f"Error calling {agent_id}: {reason}")
        self.agent_id = agent_id
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"agent_id": self.agent_id, "reason": self.reason}


class AgentUnavailableError(AgentCallError):
    """The agent is registered but its last probe did not find it reachable."""

    code = "agent_unavailable"

    def __init__(self, agent_id: str, reachability: "Reachability") -> None:
        super().__init__(
            agent_id, f"agent is not reachable (last probe: {reachability.value})"
        )
        self.reachability = reachability

    def details(self) -> dict[str, Any]:
        return {"agent_id": self.agent_id, "reachability": self.reachability.value}


class WorkflowDefinitionError(BatonError):
    """A workflow definition or its initial context is invalid."""

    code = "invalid_workflow"


class WorkflowCycleError(WorkflowDefinitionError):
    code = "workflow_cycle"

    def __init__(self, workflow_name: str, cycle: list[str]) -> None:
        super().__init__(
            f"Workflow '{workflow_name}' has a dependency cycle: {' -> '.join(cycle)}"
        )
        self.cycle = cycle

    def details(self) -> dict[str, Any]:
        return {"cycle": self.cycle}


class MissingContextError(WorkflowDefinitionError):
    code = "missing_context"

    def __init__(self, step_id: str, keys: list[str]) -> None:
        super().__init__(
            f"Step '{step_id}' reads missing context keys: {', '.join(keys)}"
        )
        self.step_id = step_id
        self.keys = keys

    def details(self) -> dict[str, Any]:
        return {"step_id": self.step_id, "keys": self.keys}


class WorkflowStateError(BatonError):
    """An operation is not allowed in the instance's current status."""

    code = "invalid_workflow_state"


class WorkflowExecutionError(BatonError):
    """A workflow run stopped before all of its steps completed.

    The instance is attached so callers can still report per-step outcomes.
    """

    code = "workflow_failed"

    def __init__(self, instance: "WorkflowInstance", reason: str) -> None:
        super().__init__(reason)
        self.instance = instance
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"workflow_id": self.instance.id}


class StepFailedError(WorkflowExecutionError):
    code = "step_failed"

    def __init__(
        self, instance: "WorkflowInstance", step_id: str, reason: str
    ) -> None:
        super().__init__(instance, f"Workflow failed at step {step_id}: {reason}")
        self.step_id = step_id

    def details(self) -> dict[str, Any]:
        return {"workflow_id": self.instance.id, "step_id": self.step_id}


class WorkflowDeadlockError(WorkflowExecutionError):
    code = "workflow_deadlock"

    def __init__(self, instance: "WorkflowInstance", pending: list[str]) -> None:
        super().__init__(
            instance,
            "Workflow deadlock: no steps can be executed "
            f"(pending: {', '.join(pending)})",
        )
        self.pending = pending

    def details(self) -> dict[str, Any]:
        return {"workflow_id": self.instance.id, "pending_steps": self.pending}


class WorkflowCancelledError(WorkflowExecutionError):
    code = "workflow_cancelled"

    def __init__(self, instance: "WorkflowInstance") -> None:
        super().__init__(instance, "Workflow cancelled")


class ReasoningError(BatonError):
    """The language model call behind the chat façade failed."""

    code = "reasoning_failed"
