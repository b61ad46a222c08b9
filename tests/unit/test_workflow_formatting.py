"""Unit tests for workflow result formatting."""

from baton_server.agents import AgentReply
from baton_server.workflows import (
    StepInstance,
    StepStatus,
    StepTemplate,
    WorkflowDefinition,
    WorkflowInstance,
    WorkflowStatus,
    format_workflow_result,
)


def make_instance(status: WorkflowStatus, *steps: StepInstance, error=None) -> WorkflowInstance:
    definition = WorkflowDefinition(
        name="resource-purchase",
        description="",
        steps=tuple(StepTemplate(id=s.id, agent_id=s.agent_id, action=s.action) for s in steps),
    )
    return WorkflowInstance(
        id="wf-1", definition=definition, steps=list(steps), status=status, error=error
    )


def make_step(step_id: str, action: str, status: StepStatus, **kwargs) -> StepInstance:
    return StepInstance(
        id=step_id,
        agent_id="agent",
        action=action,
        input={},
        depends_on=frozenset(),
        status=status,
        **kwargs,
    )


def test_completed_workflow_summary():
    """Test heading, counts and per-step results of a completed run."""
    instance = make_instance(
        WorkflowStatus.COMPLETED,
        make_step("a", "Check wallet balance", StepStatus.COMPLETED, result=AgentReply("42 HBAR")),
        make_step("b", "Find offers", StepStatus.COMPLETED, result=AgentReply("3 offers")),
    )

    text = format_workflow_result(instance)

    assert text.startswith("**Workflow Complete: resource-purchase**")
    assert "**Status:** completed" in text
    assert "**Steps Completed:** 2/2" in text
    assert "1. **Check wallet balance** (completed)" in text
    assert "   Result: 42 HBAR" in text
    assert "2. **Find offers** (completed)" in text
    assert "**Error:**" not in text


def test_failed_workflow_lists_error_and_pending_steps():
    """Test that failures show the verbatim reason and untouched steps stay pending."""
    instance = make_instance(
        WorkflowStatus.FAILED,
        make_step("a", "Check wallet balance", StepStatus.COMPLETED, result=AgentReply("ok")),
        make_step("b", "Find offers", StepStatus.FAILED, error="HTTP 500: boom"),
        make_step("c", "Pay", StepStatus.PENDING),
        error="Workflow failed at step b: HTTP 500: boom",
    )

    text = format_workflow_result(instance)

    assert text.startswith("**Workflow Failed: resource-purchase**")
    assert "**Steps Completed:** 1/3" in text
    assert "**Error:** Workflow failed at step b: HTTP 500: boom" in text
    assert "2. **Find offers** (failed)" in text
    assert "   Error: HTTP 500: boom" in text
    assert "3. **Pay** (pending)" in text


def test_long_results_are_truncated():
    """Test the result preview length and ellipsis."""
    instance = make_instance(
        WorkflowStatus.COMPLETED,
        make_step("a", "Analyze", StepStatus.COMPLETED, result=AgentReply("x" * 50)),
    )

    text = format_workflow_result(instance, preview_chars=10)

    assert "   Result: xxxxxxxxxx...\n" in text


def test_short_results_have_no_ellipsis():
    instance = make_instance(
        WorkflowStatus.COMPLETED,
        make_step("a", "Analyze", StepStatus.COMPLETED, result=AgentReply("short")),
    )

    assert "   Result: short\n" in format_workflow_result(instance, preview_chars=10)


def test_data_only_result_is_serialized():
    """Test that a structured result without text is shown as JSON."""
    instance = make_instance(
        WorkflowStatus.COMPLETED,
        make_step(
            "a", "Analyze", StepStatus.COMPLETED, result=AgentReply("", data={"usd": 12.5})
        ),
    )

    assert '   Result: {"usd": 12.5}' in format_workflow_result(instance)
