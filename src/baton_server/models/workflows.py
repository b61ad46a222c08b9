"""Pydantic models for workflow API requests and responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from baton_server.workflows.types import (
    StepInstance,
    StepStatus,
    StepTemplate,
    WorkflowDefinition,
    WorkflowEvent,
    WorkflowInstance,
    WorkflowStatus,
)


class StepTemplateModel(BaseModel):
    """One step of a workflow template."""

    id: str = Field(..., min_length=1, description="Step id, unique in the template")
    agent_id: str = Field(..., description="Agent that executes the step")
    action: str = Field(..., description="Instruction passed to the agent")
    input_template: dict[str, Any] = Field(
        default_factory=dict,
        description='Extra request fields; strings may reference context keys as "{key}"',
    )
    depends_on: list[str] = Field(
        default_factory=list, description="Ids of steps that must complete first"
    )
    reads: list[str] = Field(
        default_factory=list, description="Context keys the input template references"
    )

    @classmethod
    def from_template(cls, step: StepTemplate) -> "StepTemplateModel":
        return cls(
            id=step.id,
            agent_id=step.agent_id,
            action=step.action,
            input_template=step.input_template,
            depends_on=sorted(step.depends_on),
            reads=sorted(step.reads),
        )

    def to_template(self) -> StepTemplate:
        return StepTemplate(
            id=self.id,
            agent_id=self.agent_id,
            action=self.action,
            input_template=self.input_template,
            depends_on=frozenset(self.depends_on),
            reads=frozenset(self.reads),
        )


class WorkflowTemplateModel(BaseModel):
    """A named workflow template.

    Used both as the body of POST /api/v1/workflows/templates and in
    template listings.
    """

    name: str = Field(..., min_length=1, description="Template name")
    description: str = Field(default="", description="What the workflow does")
    steps: list[StepTemplateModel] = Field(..., description="Steps in list order")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "balance-then-pay",
                "description": "Verify balance, then pay",
                "steps": [
                    {
                        "id": "balance",
                        "agent_id": "wallet-balance-agent",
                        "action": "Check wallet balance",
                        "input_template": {"walletAddress": "{wallet}"},
                        "reads": ["wallet"],
                    },
                    {
                        "id": "pay",
                        "agent_id": "payment-agent",
                        "action": "Process payment",
                        "depends_on": ["balance"],
                    },
                ],
            }
        }
    )

    @classmethod
    def from_definition(cls, definition: WorkflowDefinition) -> "WorkflowTemplateModel":
        return cls(
            name=definition.name,
            description=definition.description,
            steps=[StepTemplateModel.from_template(step) for step in definition.steps],
        )

    def to_definition(self) -> WorkflowDefinition:
        return WorkflowDefinition(
            name=self.name,
            description=self.description,
            steps=tuple(step.to_template() for step in self.steps),
        )


class WorkflowTemplateListResponse(BaseModel):
    """Response body for GET /api/v1/workflows/templates."""

    templates: list[WorkflowTemplateModel] = Field(description="Available templates")


class RunWorkflowRequest(BaseModel):
    """Request body for running a named workflow."""

    name: str = Field(..., description="Name of the workflow template to run")
    context: dict[str, Any] = Field(
        default_factory=dict, description="Initial context values"
    )
    session_id: str | None = Field(
        default=None,
        description="Owning session; cancelling the session cancels the run",
    )


class StepResponse(BaseModel):
    """Execution state of one step."""

    id: str
    agent_id: str
    action: str
    status: StepStatus
    depends_on: list[str] = Field(default_factory=list)
    result: str | None = Field(default=None, description="Text of the agent reply")
    data: Any = Field(default=None, description="Structured data of the agent reply")
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_step(cls, step: StepInstance) -> "StepResponse":
        return cls(
            id=step.id,
            agent_id=step.agent_id,
            action=step.action,
            status=step.status,
            depends_on=sorted(step.depends_on),
            result=step.result.text if step.result is not None else None,
            data=step.result.data if step.result is not None else None,
            error=step.error,
            started_at=step.started_at,
            completed_at=step.completed_at,
        )


class WorkflowResponse(BaseModel):
    """A workflow instance with per-step outcomes."""

    id: str = Field(description="Instance id")
    name: str = Field(description="Template name")
    status: WorkflowStatus = Field(description="Overall status")
    error: str | None = Field(default=None, description="Failure reason, verbatim")
    steps: list[StepResponse] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)
    owner: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    summary: str | None = Field(
        default=None, description="Human-readable rendering of the outcome"
    )

    @classmethod
    def from_instance(
        cls, instance: WorkflowInstance, summary: str | None = None
    ) -> "WorkflowResponse":
        return cls(
            id=instance.id,
            name=instance.name,
            status=instance.status,
            error=instance.error,
            steps=[StepResponse.from_step(step) for step in instance.steps],
            context=instance.context,
            owner=instance.owner,
            created_at=instance.created_at,
            started_at=instance.started_at,
            completed_at=instance.completed_at,
            summary=summary,
        )


class WorkflowListResponse(BaseModel):
    """Response body for GET /api/v1/workflows."""

    workflows: list[WorkflowResponse]
    total: int


class WorkflowEventData(BaseModel):
    """Data payload of a workflow progress SSE event."""

    type: str
    workflow_id: str
    step_id: str | None = None
    message: str | None = None
    timestamp: datetime

    @classmethod
    def from_event(cls, event: WorkflowEvent) -> "WorkflowEventData":
        return cls(
            type=event.type,
            workflow_id=event.workflow_id,
            step_id=event.step_id,
            message=event.message,
            timestamp=event.timestamp,
        )
