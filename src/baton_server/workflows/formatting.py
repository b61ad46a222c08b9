"""Human-readable rendering of workflow instances."""

import json

from baton_server.workflows.types import WorkflowInstance, WorkflowStatus


def _preview(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_workflow_result(instance: WorkflowInstance, preview_chars: int = 200) -> str:
    """Render a workflow instance as markdown text for an end user.

    Each step is listed in definition order with its status, a truncated
    preview of its result and, for failed steps, the verbatim error.

    Args:
        instance: The instance to render
        preview_chars: Maximum characters of each step result to include

    Returns:
        str: Markdown summary of the instance
    """
    if instance.status is WorkflowStatus.COMPLETED:
        heading = f"**Workflow Complete: {instance.name}**"
    elif instance.status is WorkflowStatus.FAILED:
        heading = f"**Workflow Failed: {instance.name}**"
    else:
        heading = f"**Workflow: {instance.name}**"

    lines = [
        heading,
        "",
        f"**Status:** {instance.status.value}",
        f"**Steps Completed:** {instance.completed_steps}/{len(instance.steps)}",
    ]
    if instance.error:
        lines.append(f"**Error:** {instance.error}")

    lines += ["", "**Step Results:**"]
    for index, step in enumerate(instance.steps, start=1):
        lines.append(f"{index}. **{step.action}** ({step.status.value})")
        if step.result is not None:
            text = step.result.text
            if not text and step.result.data is not None:
                text = json.dumps(step.result.data, default=str)
            lines.append(f"   Result: {_preview(text, preview_chars)}")
        if step.error:
            lines.append(f"   Error: {step.error}")

    return "\n".join(lines) + "\n"
