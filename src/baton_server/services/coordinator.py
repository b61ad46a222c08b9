"""Coordinator: the user-facing façade over the orchestration core.

The coordinator owns conversation sessions, exposes direct single-agent
calls for simple interactions, and runs named workflows through the
WorkflowEngine, rendering the outcome as text.
"""

import logging
from typing import Any

from baton_server.agents.client import AgentClient
from baton_server.agents.directory import AgentDirectory
from baton_server.agents.types import AgentDescriptor, AgentFailure, Reachability
from baton_server.errors import (
    AgentCallError,
    AgentNotFoundError,
    AgentUnavailableError,
    ReasoningError,
    WorkflowExecutionError,
)
from baton_server.ollama.client import OllamaClient
from baton_server.services.prompts import build_prompt, build_system_prompt
from baton_server.sessions.store import SessionStore
from baton_server.sessions.types import AgentMessage, Session, UserMessage
from baton_server.workflows.engine import EventCallback, WorkflowEngine
from baton_server.workflows.formatting import format_workflow_result
from baton_server.workflows.types import WorkflowInstance

logger = logging.getLogger(__name__)


class Coordinator:
    """Receives user requests and routes them to agents and workflows.

    Attributes:
        directory: The agent directory
        engine: The workflow engine
        sessions: The conversation session store
    """

    def __init__(
        self,
        directory: AgentDirectory,
        engine: WorkflowEngine,
        client: AgentClient,
        ollama_client: OllamaClient,
        sessions: SessionStore,
        reasoning_options: dict[str, Any] | None = None,
        preview_chars: int = 200,
    ) -> None:
        self.directory = directory
        self.engine = engine
        self.sessions = sessions
        self._client = client
        self._ollama = ollama_client
        self._reasoning_options = reasoning_options or {}
        self._preview_chars = preview_chars

    # --- Conversation ---

    async def handle(self, session_id: str, text: str) -> str:
        """Answer a user message within a session.

        The message is appended to the session history, a prompt is built
        from the reachable agents and the history, and the reply of the
        reasoning call is appended and returned.

        Args:
            session_id: Session key; the session is created if new
            text: The user's message

        Returns:
            str: The orchestrator's reply

        Raises:
            ReasoningError: If the reasoning call fails
        """
        session = await self.sessions.get_or_create(session_id)
        session.add_message(UserMessage(content=text))

        system_prompt = build_system_prompt(
            self.directory.list_reachable(), self.engine.list_definitions()
        )
        prompt = build_prompt(system_prompt, session)

        try:
            reply = await self._ollama.generate(prompt, self._reasoning_options)
        except Exception as e:
            logger.error(f"Reasoning call failed for session {session_id}: {e}")
            raise ReasoningError(f"Failed to generate a reply: {e}") from e

        session.add_message(AgentMessage(content=reply))
        return reply

    def get_session(self, session_id: str) -> Session:
        return self.sessions.get(session_id)

    def list_sessions(self) -> list[Session]:
        return self.sessions.list()

    async def cancel_session(self, session_id: str) -> int:
        """Remove a session and cancel the workflows it started.

        Returns:
            int: Number of workflow instances cancelled

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        await self.sessions.remove(session_id)
        cancelled = await self.engine.cancel_owned(session_id)
        logger.info(f"Cancelled session {session_id} ({cancelled} workflows)")
        return cancelled

    async def sweep_expired(self) -> int:
        return await self.sessions.sweep_expired()

    # --- Direct agent calls ---

    def _require_agent(self, agent_id: str) -> AgentDescriptor:
        agent = self.directory.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    async def call_agent(self, agent_id: str, message: str) -> str:
        """Send one message to one agent, bypassing the workflow engine.

        Args:
            agent_id: Target agent id
            message: Request text

        Returns:
            str: The agent's textual reply

        Raises:
            AgentNotFoundError: If the agent is not registered (no call is made)
            AgentUnavailableError: If the agent's last probe was not successful
            AgentCallError: If the call fails; carries the transport reason
        """
        agent = self._require_agent(agent_id)
        if not agent.is_reachable:
            raise AgentUnavailableError(agent.id, agent.reachability)

        response = await self._client.send(agent, message)
        if isinstance(response, AgentFailure):
            logger.error(f"Error calling {agent.id}: {response.reason}")
            raise AgentCallError(agent.id, response.reason)
        return response.text

    async def check_agent_health(self, agent_id: str) -> str:
        """Probe one agent now and describe the outcome.

        Raises:
            AgentNotFoundError: If the agent is not registered
        """
        agent = self._require_agent(agent_id)
        state = await self.directory.probe(agent.id)
        if state is Reachability.REACHABLE:
            return f"Agent {agent.id} is healthy"

        refreshed = self.directory.get(agent.id) or agent
        reason = refreshed.last_probe_error or "no response"
        return f"Agent {agent.id} health check failed: {reason}"

    def describe_agents(self) -> list[AgentDescriptor]:
        return self.directory.list_all()

    # --- Workflows ---

    async def start_workflow(
        self,
        name: str,
        context: dict[str, Any] | None = None,
        owner: str | None = None,
    ) -> WorkflowInstance:
        """Resolve a template by name and instantiate it without running it.

        Raises:
            WorkflowTemplateNotFoundError: If the name is unknown
            WorkflowDefinitionError: If the context does not satisfy the template
        """
        definition = self.engine.get_definition(name)
        return await self.engine.instantiate(definition, context, owner=owner)

    async def run_workflow(
        self,
        name: str,
        context: dict[str, Any] | None = None,
        owner: str | None = None,
        on_event: EventCallback | None = None,
    ) -> WorkflowInstance:
        """Instantiate and run a named workflow.

        Execution failures do not raise: the failed instance is returned
        with its error set, because a failed run is a valid result.

        Raises:
            WorkflowTemplateNotFoundError: If the name is unknown
            WorkflowDefinitionError: If the context does not satisfy the template
        """
        instance = await self.start_workflow(name, context, owner)
        try:
            return await self.engine.run(instance.id, on_event=on_event)
        except WorkflowExecutionError as e:
            return e.instance

    async def run_named_workflow(
        self,
        name: str,
        context: dict[str, Any] | None = None,
        owner: str | None = None,
    ) -> str:
        """Run a named workflow and render the outcome as text.

        Returns:
            str: Formatted summary including the failure reason, if any
        """
        instance = await self.run_workflow(name, context, owner)
        return self.format(instance)

    def format(self, instance: WorkflowInstance) -> str:
        return format_workflow_result(instance, self._preview_chars)

    # --- Stats ---

    def stats(self) -> dict[str, Any]:
        return {
            "sessions": len(self.sessions),
            "agents": self.directory.stats(),
            "workflows": self.engine.stats(),
        }
