"""Unit tests for the Coordinator façade and prompt construction."""

from datetime import timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from baton_server.agents import Reachability
from baton_server.errors import (
    AgentCallError,
    AgentNotFoundError,
    AgentUnavailableError,
    ReasoningError,
    SessionNotFoundError,
    WorkflowTemplateNotFoundError,
)
from baton_server.services import Coordinator, build_prompt, build_system_prompt
from baton_server.sessions import Session, SessionStore, UserMessage
from baton_server.workflows import (
    StepTemplate,
    WorkflowDefinition,
    WorkflowEngine,
    WorkflowStatus,
)
from baton_server.workflows.types import utcnow

TWO_STEP = WorkflowDefinition(
    name="two-step",
    description="A then B",
    steps=(
        StepTemplate(id="first", agent_id="a", action="Check wallet balance"),
        StepTemplate(
            id="second", agent_id="b", action="Find offers", depends_on=frozenset({"first"})
        ),
    ),
)


@pytest.fixture
def mock_ollama():
    client = AsyncMock()
    client.generate.return_value = "I will check your balance first."
    return client


@pytest.fixture
def coordinator(directory, agent_client, mock_ollama):
    engine = WorkflowEngine(directory, agent_client, definitions={TWO_STEP.name: TWO_STEP})
    return Coordinator(
        directory,
        engine,
        agent_client,
        mock_ollama,
        SessionStore(),
        reasoning_options={"temperature": 0.2},
    )


@pytest.mark.asyncio
async def test_call_agent_returns_reply_text(coordinator, fake_agents):
    """Test a direct call to a reachable agent."""
    assert await coordinator.call_agent("b", "find offers") == "ok from 9002"
    assert fake_agents.calls == [(9002, {"request": "find offers", "context": {}})]


@pytest.mark.asyncio
async def test_call_unknown_agent_makes_no_network_call(coordinator, fake_agents):
    """Test that an unknown agent id fails before any traffic."""
    with pytest.raises(AgentNotFoundError, match="Agent nope not found"):
        await coordinator.call_agent("nope", "hello")

    assert fake_agents.calls == []
    assert fake_agents.probes == [(9001, "/health"), (9002, "/health"), (9003, "/health")]


@pytest.mark.asyncio
async def test_call_unreachable_agent(coordinator, directory, fake_agents):
    """Test that an agent whose last probe failed is not called."""
    await directory.set_reachability("c", Reachability.UNREACHABLE)

    with pytest.raises(AgentUnavailableError) as exc_info:
        await coordinator.call_agent("c", "pay")

    assert exc_info.value.reachability is Reachability.UNREACHABLE
    assert fake_agents.calls == []


@pytest.mark.asyncio
async def test_call_agent_failure_surfaces_reason(coordinator, fake_agents):
    """Test that the transport reason reaches the caller."""
    fake_agents.replies[9001] = httpx.Response(503, text="maintenance")

    with pytest.raises(AgentCallError) as exc_info:
        await coordinator.call_agent("a", "balance?")

    assert exc_info.value.reason == "HTTP 503: maintenance"
    assert str(exc_info.value) == "Error calling a: HTTP 503: maintenance"


@pytest.mark.asyncio
async def test_check_agent_health(coordinator, fake_agents):
    """Test the on-demand health check wording."""
    assert await coordinator.check_agent_health("a") == "Agent a is healthy"

    fake_agents.down.add(9002)
    message = await coordinator.check_agent_health("b")

    assert message.startswith("Agent b health check failed: ")
    assert "Connection refused" in message
    with pytest.raises(AgentNotFoundError):
        await coordinator.check_agent_health("nope")


@pytest.mark.asyncio
async def test_handle_appends_history_and_calls_model(coordinator, mock_ollama):
    """Test one conversational turn."""
    reply = await coordinator.handle("s1", "Buy 100 carbon credits")

    assert reply == "I will check your balance first."
    session = coordinator.get_session("s1")
    assert [(m.role, m.content) for m in session.messages] == [
        ("user", "Buy 100 carbon credits"),
        ("agent", "I will check your balance first."),
    ]

    prompt, options = mock_ollama.generate.call_args.args
    assert options == {"temperature": 0.2}
    assert "ONE AT A TIME" in prompt
    assert "**A** (a)" in prompt and "**C** (c)" in prompt
    assert "**two-step**: A then B" in prompt
    assert prompt.endswith("user: Buy 100 carbon credits\nagent:")


@pytest.mark.asyncio
async def test_handle_prompt_omits_unreachable_agents(coordinator, directory, mock_ollama):
    await directory.set_reachability("b", Reachability.UNREACHABLE)

    await coordinator.handle("s1", "hi")

    prompt = mock_ollama.generate.call_args.args[0]
    assert "**A** (a)" in prompt
    assert "**B** (b)" not in prompt


@pytest.mark.asyncio
async def test_handle_reasoning_failure(coordinator, mock_ollama):
    """Test that model errors become ReasoningError."""
    mock_ollama.generate.side_effect = ConnectionError("ollama down")

    with pytest.raises(ReasoningError, match="ollama down"):
        await coordinator.handle("s1", "hi")

    assert coordinator.get_session("s1").message_count == 1


@pytest.mark.asyncio
async def test_run_named_workflow_success_text(coordinator):
    """Test the formatted result of a successful run."""
    text = await coordinator.run_named_workflow("two-step")

    assert text.startswith("**Workflow Complete: two-step**")
    assert "**Steps Completed:** 2/2" in text
    assert "Result: ok from 9002" in text


@pytest.mark.asyncio
async def test_run_workflow_failure_returns_instance(coordinator, fake_agents):
    """Test that a failed run is a result, not an exception."""
    fake_agents.replies[9002] = {"success": False, "message": "no offers"}

    instance = await coordinator.run_workflow("two-step")

    assert instance.status is WorkflowStatus.FAILED
    assert instance.error == "Workflow failed at step second: no offers"
    text = coordinator.format(instance)
    assert "**Workflow Failed: two-step**" in text
    assert "Error: no offers" in text


@pytest.mark.asyncio
async def test_run_unknown_workflow(coordinator):
    with pytest.raises(WorkflowTemplateNotFoundError):
        await coordinator.run_named_workflow("nope")


@pytest.mark.asyncio
async def test_cancel_session_cancels_owned_workflows(coordinator):
    """Test that removing a session cancels its unfinished workflows."""
    await coordinator.handle("s1", "hello")
    pending = await coordinator.start_workflow("two-step", owner="s1")

    assert await coordinator.cancel_session("s1") == 1
    assert pending.status is WorkflowStatus.FAILED
    with pytest.raises(SessionNotFoundError):
        coordinator.get_session("s1")


@pytest.mark.asyncio
async def test_stats(coordinator):
    await coordinator.handle("s1", "hello")
    await coordinator.run_workflow("two-step")

    stats = coordinator.stats()

    assert stats["sessions"] == 1
    assert stats["agents"]["reachable"] == 3
    assert stats["workflows"]["completed"] == 1


def test_build_system_prompt_without_agents():
    prompt = build_system_prompt([], [TWO_STEP])

    assert "(no agents are currently reachable)" in prompt
    assert "Step 2: Find offers (b), after first" in prompt


def test_build_prompt_renders_history():
    session = Session(session_id="s1")
    session.add_message(UserMessage(content="hi"))

    assert build_prompt("SYSTEM", session) == "SYSTEM\n\nConversation History:\nuser: hi\nagent:"


@pytest.mark.asyncio
async def test_describe_agents_and_sweep(coordinator):
    """Test the directory listing and the session sweep pass-through."""
    await coordinator.handle("s1", "hello")
    coordinator.get_session("s1").last_activity_at = utcnow() - timedelta(hours=2)

    assert [agent.id for agent in coordinator.describe_agents()] == ["a", "b", "c"]
    assert await coordinator.sweep_expired() == 1
    assert coordinator.list_sessions() == []
