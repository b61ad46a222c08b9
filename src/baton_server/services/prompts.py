"""Prompt construction for the orchestrator's reasoning call."""

from baton_server.agents.types import AgentDescriptor
from baton_server.sessions.types import Session
from baton_server.workflows.types import WorkflowDefinition

_INTRO = (
    "You are the orchestrator agent. Your role is to coordinate specialized "
    "agents to handle multi-step asset negotiation requests."
)

_CONSTRAINTS = """CRITICAL CONSTRAINTS:
- You MUST call agents ONE AT A TIME, never make multiple tool calls simultaneously
- After making a tool call, WAIT for the result before making another tool call
- Do NOT make parallel/concurrent tool calls - this is not supported"""

_RULES = """WORKFLOW EXECUTION RULES:
- Always start by understanding the user's request
- Determine the appropriate workflow based on the request
- Execute steps sequentially, one agent at a time
- Wait for each agent's response before proceeding
- Synthesize results into a comprehensive response

Once you have received a response from an agent, do NOT call that same agent
again for the same information. Use the information you already have."""


def _describe_workflow(definition: WorkflowDefinition) -> str:
    lines = [f"**{definition.name}**: {definition.description}"]
    for index, step in enumerate(definition.steps, start=1):
        line = f"   - Step {index}: {step.action} ({step.agent_id})"
        if step.depends_on:
            line += f", after {', '.join(sorted(step.depends_on))}"
        lines.append(line)
    return "\n".join(lines)


def build_system_prompt(
    agents: list[AgentDescriptor], workflows: list[WorkflowDefinition]
) -> str:
    """Build the system prompt listing reachable agents and known workflows.

    Args:
        agents: Agents currently reachable, in directory order
        workflows: Workflow templates the orchestrator may run

    Returns:
        str: The system prompt text
    """
    if agents:
        agent_list = "\n".join(
            f"- **{agent.display_name}** ({agent.id}): "
            f"{', '.join(sorted(agent.capabilities))}"
            for agent in agents
        )
    else:
        agent_list = "- (no agents are currently reachable)"

    workflow_list = "\n\n".join(
        f"{index}. {_describe_workflow(definition)}"
        for index, definition in enumerate(workflows, start=1)
    )

    return "\n\n".join(
        [
            _INTRO,
            f"AVAILABLE SPECIALIZED AGENTS:\n\n{agent_list}",
            _CONSTRAINTS,
            f"RECOMMENDED WORKFLOWS:\n\n{workflow_list}",
            _RULES,
        ]
    )


def build_prompt(system_prompt: str, session: Session) -> str:
    """Render the full prompt: system prompt, history, and the reply cue.

    The session history already ends with the newest user message.
    """
    history = "\n".join(f"{msg.role}: {msg.content}" for msg in session.messages)
    return f"{system_prompt}\n\nConversation History:\n{history}\nagent:"
