"""Workflow definitions, execution engine and result formatting."""

from baton_server.workflows.definitions import (
    BUILTIN_WORKFLOWS,
    check_context,
    validate_definition,
)
from baton_server.workflows.engine import WorkflowEngine
from baton_server.workflows.formatting import format_workflow_result
from baton_server.workflows.types import (
    StepInstance,
    StepStatus,
    StepTemplate,
    WorkflowDefinition,
    WorkflowEvent,
    WorkflowInstance,
    WorkflowStatus,
)

__all__ = [
    "BUILTIN_WORKFLOWS",
    "WorkflowEngine",
    "check_context",
    "format_workflow_result",
    "validate_definition",
    # Types
    "StepInstance",
    "StepStatus",
    "StepTemplate",
    "WorkflowDefinition",
    "WorkflowEvent",
    "WorkflowInstance",
    "WorkflowStatus",
]
