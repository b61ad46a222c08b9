"""Workflow definition validation and the built-in template catalog.

Definitions are checked before they are ever run: step ids must be unique,
dependencies must name steps of the same definition, the dependency graph
must be acyclic, and every "{key}" placeholder in a step's input template
must be declared in the step's reads.
"""

import logging
from graphlib import CycleError, TopologicalSorter
from string import Formatter
from typing import Any, Iterator

from baton_server.agents.seed import (
    NEGOTIATION_AGENT_ID,
    PAYMENT_AGENT_ID,
    WALLET_BALANCE_AGENT_ID,
)
from baton_server.errors import (
    MissingContextError,
    WorkflowCycleError,
    WorkflowDefinitionError,
)
from baton_server.workflows.types import StepTemplate, WorkflowDefinition

logger = logging.getLogger(__name__)


def _placeholders(value: Any) -> Iterator[str]:
    """Yield the context keys referenced by a template value.

    Raises:
        ValueError: If a string is not a valid format template or uses
            positional fields, which cannot be filled from the context
    """
    if isinstance(value, str):
        for _, field_name, format_spec, _ in Formatter().parse(value):
            if field_name is None:
                continue
            key = field_name.split(".")[0].split("[")[0]
            if not key or key.isdigit():
                raise ValueError(f"positional field '{{{field_name}}}' is not allowed")
            yield key
            if format_spec:
                yield from _placeholders(format_spec)
    elif isinstance(value, dict):
        for item in value.values():
            yield from _placeholders(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _placeholders(item)


def validate_definition(definition: WorkflowDefinition) -> list[str]:
    """Validate a workflow definition.

    Args:
        definition: The definition to check

    Returns:
        list[str]: Step ids in a valid execution order

    Raises:
        WorkflowDefinitionError: If the definition is empty, has duplicate
            step ids, unknown dependencies or undeclared placeholders
        WorkflowCycleError: If the dependency graph contains a cycle
    """
    if not definition.steps:
        raise WorkflowDefinitionError(f"Workflow '{definition.name}' has no steps")

    seen: set[str] = set()
    for step in definition.steps:
        if step.id in seen:
            raise WorkflowDefinitionError(
                f"Workflow '{definition.name}' has duplicate step id '{step.id}'"
            )
        seen.add(step.id)

    for step in definition.steps:
        unknown = sorted(step.depends_on - seen)
        if unknown:
            raise WorkflowDefinitionError(
                f"Step '{step.id}' depends on unknown steps: {', '.join(unknown)}"
            )
        if step.id in step.depends_on:
            raise WorkflowCycleError(definition.name, [step.id, step.id])

        try:
            referenced = set(_placeholders(step.input_template))
        except ValueError as e:
            raise WorkflowDefinitionError(
                f"Step '{step.id}' has a malformed input template: {e}"
            ) from e
        undeclared = sorted(referenced - step.reads)
        if undeclared:
            raise WorkflowDefinitionError(
                f"Step '{step.id}' references undeclared context keys: "
                f"{', '.join(undeclared)}"
            )

    sorter = TopologicalSorter({step.id: step.depends_on for step in definition.steps})
    try:
        order = list(sorter.static_order())
    except CycleError as e:
        raise WorkflowCycleError(definition.name, list(e.args[1])) from e

    logger.debug(f"Validated workflow '{definition.name}': {' -> '.join(order)}")
    return order


def check_context(definition: WorkflowDefinition, context: dict[str, Any]) -> None:
    """Ensure the context provides every key the steps declare they read.

    Raises:
        MissingContextError: For the first step with missing keys
    """
    for step in definition.steps:
        missing = sorted(key for key in step.reads if key not in context)
        if missing:
            raise MissingContextError(step.id, missing)


def render_input(template: Any, context: dict[str, Any]) -> Any:
    """Substitute "{key}" placeholders in a step input template."""
    if isinstance(template, str):
        return template.format_map(context)
    if isinstance(template, dict):
        return {key: render_input(value, context) for key, value in template.items()}
    if isinstance(template, list):
        return [render_input(item, context) for item in template]
    return template


BUILTIN_WORKFLOWS: dict[str, WorkflowDefinition] = {
    definition.name: definition
    for definition in (
        WorkflowDefinition(
            name="resource-purchase",
            description="Check balance, discover offers, then pay for the best offer",
            steps=(
                StepTemplate(
                    id="balance-check",
                    agent_id=WALLET_BALANCE_AGENT_ID,
                    action="Check wallet balance for carbon credit purchase",
                    input_template={"purpose": "carbon_credit_purchase"},
                ),
                StepTemplate(
                    id="offer-discovery",
                    agent_id=NEGOTIATION_AGENT_ID,
                    action="Find best carbon credit deals",
                    input_template={"purpose": "purchase_negotiation"},
                ),
                StepTemplate(
                    id="payment",
                    agent_id=PAYMENT_AGENT_ID,
                    action="Process carbon credit payment",
                    input_template={"purpose": "carbon_credit_settlement"},
                    depends_on=frozenset({"balance-check", "offer-discovery"}),
                ),
            ),
        ),
        WorkflowDefinition(
            name="portfolio-analysis",
            description="Comprehensive portfolio analysis and recommendations",
            steps=(
                StepTemplate(
                    id="portfolio-balance",
                    agent_id=WALLET_BALANCE_AGENT_ID,
                    action="Get comprehensive portfolio balance",
                    input_template={"purpose": "portfolio_analysis"},
                ),
                StepTemplate(
                    id="opportunities",
                    agent_id=NEGOTIATION_AGENT_ID,
                    action="Analyze carbon credit opportunities",
                    input_template={"purpose": "investment_opportunities"},
                ),
            ),
        ),
        WorkflowDefinition(
            name="payment-processing",
            description="Process payment with balance verification",
            steps=(
                StepTemplate(
                    id="balance-verify",
                    agent_id=WALLET_BALANCE_AGENT_ID,
                    action="Verify sufficient balance for payment",
                    input_template={"purpose": "payment_verification"},
                ),
                StepTemplate(
                    id="payment",
                    agent_id=PAYMENT_AGENT_ID,
                    action="Process payment transaction",
                    input_template={"purpose": "transaction_processing"},
                    depends_on=frozenset({"balance-verify"}),
                ),
            ),
        ),
        WorkflowDefinition(
            name="general-inquiry",
            description="General single-agent balance inquiry",
            steps=(
                StepTemplate(
                    id="inquiry",
                    agent_id=WALLET_BALANCE_AGENT_ID,
                    action="General balance inquiry",
                    input_template={"purpose": "general_inquiry"},
                ),
            ),
        ),
    )
}
