"""WorkflowEngine: executes workflow step graphs against remote agents.

The engine turns a WorkflowDefinition plus a context bag into a
WorkflowInstance and drives it to completion. Steps run strictly one at a
time: at each round the engine computes the ready set (pending steps whose
dependencies have all completed) and executes it in definition order,
awaiting each agent call before starting the next. Reasoning-driven step
selection upstream cannot cope with concurrent tool results, so this
ordering must not be parallelized.
"""

import asyncio
import logging
import uuid
from datetime import timedelta
from typing import Any, Awaitable, Callable

from baton_server.agents.client import AgentClient
from baton_server.agents.directory import AgentDirectory
from baton_server.agents.types import AgentReply
from baton_server.errors import (
    StepFailedError,
    WorkflowCancelledError,
    WorkflowDeadlockError,
    WorkflowExecutionError,
    WorkflowNotFoundError,
    WorkflowStateError,
    WorkflowTemplateNotFoundError,
)
from baton_server.workflows.definitions import (
    BUILTIN_WORKFLOWS,
    check_context,
    render_input,
    validate_definition,
)
from baton_server.workflows.types import (
    StepInstance,
    StepStatus,
    WorkflowDefinition,
    WorkflowEvent,
    WorkflowInstance,
    WorkflowStatus,
    utcnow,
)

logger = logging.getLogger(__name__)

EventCallback = Callable[[WorkflowEvent], Awaitable[None]]


class WorkflowEngine:
    """Owns workflow definitions and instances and runs instances to completion.

    Attributes:
        retention_seconds: Terminal instances older than this are evicted
        max_instances: Upper bound on retained instances (running ones are
            never evicted)
    """

    def __init__(
        self,
        directory: AgentDirectory,
        client: AgentClient,
        retention_seconds: float = 3600.0,
        max_instances: int = 500,
        definitions: dict[str, WorkflowDefinition] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            directory: Directory used to resolve step agents
            client: Transport used to call agents
            retention_seconds: Retention window for finished instances
            max_instances: Maximum number of retained instances
            definitions: Template catalog (defaults to the built-in workflows)
        """
        self._directory = directory
        self._client = client
        self.retention_seconds = retention_seconds
        self.max_instances = max_instances
        self._definitions: dict[str, WorkflowDefinition] = dict(
            BUILTIN_WORKFLOWS if definitions is None else definitions
        )
        self._instances: dict[str, WorkflowInstance] = {}
        self._lock = asyncio.Lock()

    # --- Template catalog ---

    def list_definitions(self) -> list[WorkflowDefinition]:
        return list(self._definitions.values())

    def get_definition(self, name: str) -> WorkflowDefinition:
        """Resolve a template by name.

        Raises:
            WorkflowTemplateNotFoundError: If no template has that name
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise WorkflowTemplateNotFoundError(name)
        return definition

    def register_definition(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Validate a definition and add it to the catalog, replacing any same-named one.

        Raises:
            WorkflowDefinitionError: If the definition is invalid
        """
        validate_definition(definition)
        self._definitions[definition.name] = definition
        logger.info(
            f"Registered workflow template '{definition.name}' "
            f"with {len(definition.steps)} steps"
        )
        return definition

    # --- Instances ---

    async def instantiate(
        self,
        definition: WorkflowDefinition,
        initial_context: dict[str, Any] | None = None,
        owner: str | None = None,
    ) -> WorkflowInstance:
        """Create a pending instance of a definition.

        Args:
            definition: The definition to instantiate
            initial_context: Caller-supplied values merged into the context
            owner: Optional owner key (e.g., a session id) used for cancellation

        Returns:
            The new WorkflowInstance with every step pending

        Raises:
            WorkflowDefinitionError: If the definition is invalid
            WorkflowCycleError: If the dependency graph has a cycle
            MissingContextError: If the context lacks a key a step reads
        """
        validate_definition(definition)
        context = dict(initial_context or {})
        check_context(definition, context)

        steps = [
            StepInstance(
                id=template.id,
                agent_id=template.agent_id,
                action=template.action,
                input=render_input(template.input_template, context),
                depends_on=template.depends_on,
            )
            for template in definition.steps
        ]
        instance = WorkflowInstance(
            id=str(uuid.uuid4()),
            definition=definition,
            steps=steps,
            context=context,
            owner=owner,
        )

        async with self._lock:
            self._evict_locked()
            self._instances[instance.id] = instance

        logger.info(f"Created workflow {instance.id} ({definition.name})")
        return instance

    def get(self, instance_id: str) -> WorkflowInstance:
        """Look up an instance by id.

        Raises:
            WorkflowNotFoundError: If the instance does not exist
        """
        instance = self._instances.get(instance_id)
        if instance is None:
            raise WorkflowNotFoundError(instance_id)
        return instance

    def list(self) -> list[WorkflowInstance]:
        """All retained instances, oldest first."""
        return sorted(self._instances.values(), key=lambda i: i.created_at)

    async def run(
        self, instance_id: str, on_event: EventCallback | None = None
    ) -> WorkflowInstance:
        """Drive a pending instance to completion.

        Steps whose dependencies are satisfied run one at a time in
        definition order. Any step failure aborts the whole run; steps not
        yet started stay pending.

        Args:
            instance_id: The instance to run
            on_event: Optional async callback receiving progress events

        Returns:
            The completed WorkflowInstance

        Raises:
            WorkflowNotFoundError: If the instance does not exist
            WorkflowStateError: If the instance is not pending
            StepFailedError: If a step fails
            WorkflowDeadlockError: If no pending step can become ready
            WorkflowCancelledError: If the run was cancelled between steps
        """
        instance = self.get(instance_id)
        async with self._lock:
            if instance.status is not WorkflowStatus.PENDING:
                raise WorkflowStateError(
                    f"Workflow {instance_id} is {instance.status.value}, not pending"
                )
            instance.status = WorkflowStatus.RUNNING
            instance.started_at = utcnow()

        logger.info(f"Running workflow {instance.id} ({instance.name})")
        await _emit(on_event, WorkflowEvent("workflow_started", instance.id))

        try:
            await self._drive(instance, on_event)
        except WorkflowExecutionError as e:
            self._finish(instance, WorkflowStatus.FAILED, e.reason)
            logger.warning(f"Workflow {instance.id} failed: {e.reason}")
            await _emit(
                on_event, WorkflowEvent("workflow_failed", instance.id, message=e.reason)
            )
            raise
        except asyncio.CancelledError:
            for step in instance.steps:
                if step.status is StepStatus.RUNNING:
                    self._fail_step(step, "Workflow cancelled")
            self._finish(instance, WorkflowStatus.FAILED, "Workflow cancelled")
            logger.warning(f"Workflow {instance.id} was cancelled mid-run")
            raise
        except Exception as e:
            self._finish(instance, WorkflowStatus.FAILED, str(e))
            logger.error(f"Workflow {instance.id} crashed: {e}")
            raise

        self._finish(instance, WorkflowStatus.COMPLETED)
        logger.info(
            f"Workflow {instance.id} completed "
            f"({instance.completed_steps}/{len(instance.steps)} steps)"
        )
        await _emit(on_event, WorkflowEvent("workflow_completed", instance.id))
        return instance

    async def _drive(
        self, instance: WorkflowInstance, on_event: EventCallback | None
    ) -> None:
        completed: set[str] = set()

        while len(completed) < len(instance.steps):
            ready = [
                step
                for step in instance.steps
                if step.status is StepStatus.PENDING and step.depends_on <= completed
            ]
            if not ready:
                pending = [
                    step.id for step in instance.steps if step.status is StepStatus.PENDING
                ]
                raise WorkflowDeadlockError(instance, pending)

            for step in ready:
                if instance.cancel_requested:
                    raise WorkflowCancelledError(instance)
                await self._execute_step(instance, step, on_event)
                if step.status is StepStatus.FAILED:
                    raise StepFailedError(instance, step.id, step.error or "unknown error")
                completed.add(step.id)

    async def _execute_step(
        self,
        instance: WorkflowInstance,
        step: StepInstance,
        on_event: EventCallback | None,
    ) -> None:
        step.started_at = utcnow()
        agent = self._directory.get(step.agent_id)

        if agent is None:
            self._fail_step(step, f"Agent {step.agent_id} not found")
        elif not agent.is_reachable:
            reason = f"Agent {agent.id} is not reachable (last probe: {agent.reachability.value}"
            if agent.last_probe_error:
                reason += f", {agent.last_probe_error}"
            self._fail_step(step, reason + ")")
        else:
            step.status = StepStatus.RUNNING
            logger.debug(f"Workflow {instance.id}: step {step.id} -> {agent.id}")
            await _emit(on_event, WorkflowEvent("step_started", instance.id, step.id))

            context = {
                **instance.context,
                "workflow_id": instance.id,
                "step_id": step.id,
                "previous_results": {
                    dep: instance.step(dep).result.text
                    for dep in sorted(step.depends_on)
                    if instance.step(dep).result is not None
                },
            }
            response = await self._client.send(
                agent, step.action, payload=step.input, context=context
            )

            if isinstance(response, AgentReply):
                step.result = response
                step.status = StepStatus.COMPLETED
                step.completed_at = utcnow()
                await _emit(
                    on_event,
                    WorkflowEvent(
                        "step_completed", instance.id, step.id, message=response.text
                    ),
                )
                return
            self._fail_step(step, response.reason)

        logger.warning(f"Workflow {instance.id}: step {step.id} failed: {step.error}")
        await _emit(
            on_event,
            WorkflowEvent("step_failed", instance.id, step.id, message=step.error),
        )

    @staticmethod
    def _fail_step(step: StepInstance, reason: str) -> None:
        step.status = StepStatus.FAILED
        step.error = reason
        step.completed_at = utcnow()

    @staticmethod
    def _finish(
        instance: WorkflowInstance, status: WorkflowStatus, error: str | None = None
    ) -> None:
        if instance.is_terminal:
            return
        instance.status = status
        instance.error = error
        instance.completed_at = utcnow()

    # --- Cancellation ---

    async def cancel(self, instance_id: str) -> WorkflowInstance:
        """Request cancellation of an instance.

        A pending instance fails immediately. A running instance finishes its
        in-flight step and then stops before starting another one.

        Raises:
            WorkflowNotFoundError: If the instance does not exist
            WorkflowStateError: If the instance already finished
        """
        instance = self.get(instance_id)
        async with self._lock:
            if instance.is_terminal:
                raise WorkflowStateError(
                    f"Workflow {instance_id} already {instance.status.value}"
                )
            instance.cancel_requested = True
            if instance.status is WorkflowStatus.PENDING:
                self._finish(instance, WorkflowStatus.FAILED, "Workflow cancelled")

        logger.info(f"Cancellation requested for workflow {instance_id}")
        return instance

    async def cancel_owned(self, owner: str) -> int:
        """Cancel every unfinished instance belonging to an owner.

        Returns:
            int: Number of instances cancelled
        """
        targets = [
            instance
            for instance in list(self._instances.values())
            if instance.owner == owner and not instance.is_terminal
        ]
        for instance in targets:
            await self.cancel(instance.id)
        return len(targets)

    # --- Retention ---

    async def evict_expired(self) -> int:
        """Drop finished instances past the retention window or over the cap.

        Returns:
            int: Number of instances evicted
        """
        async with self._lock:
            return self._evict_locked()

    def _evict_locked(self) -> int:
        cutoff = utcnow() - timedelta(seconds=self.retention_seconds)
        expired = [
            instance_id
            for instance_id, instance in self._instances.items()
            if instance.is_terminal
            and instance.completed_at is not None
            and instance.completed_at < cutoff
        ]
        for instance_id in expired:
            del self._instances[instance_id]

        evicted = len(expired)
        # Make room for one more instance when the cap is reached
        overflow = len(self._instances) - self.max_instances + 1
        if overflow > 0:
            finished = sorted(
                (i for i in self._instances.values() if i.is_terminal),
                key=lambda i: i.completed_at or i.created_at,
            )
            for instance in finished[:overflow]:
                del self._instances[instance.id]
                evicted += 1

        if evicted:
            logger.debug(f"Evicted {evicted} finished workflow instances")
        return evicted

    def stats(self) -> dict[str, int]:
        """Counts of retained instances by status."""
        instances = list(self._instances.values())
        counts = {"total": len(instances)}
        for status in WorkflowStatus:
            counts[status.value] = sum(1 for i in instances if i.status is status)
        return counts


async def _emit(on_event: EventCallback | None, event: WorkflowEvent) -> None:
    if on_event is not None:
        await on_event(event)
