"""Unit tests for the in-memory SessionStore."""

from datetime import timedelta

import pytest

from baton_server.errors import SessionNotFoundError
from baton_server.sessions import AgentMessage, SessionStore, UserMessage
from baton_server.workflows.types import utcnow


@pytest.fixture
def store():
    return SessionStore(timeout_seconds=60, max_sessions=3)


@pytest.mark.asyncio
async def test_get_or_create_returns_same_session(store):
    """Test that a session key maps to one session."""
    first = await store.get_or_create("s1")
    second = await store.get_or_create("s1")

    assert first is second
    assert len(store) == 1


@pytest.mark.asyncio
async def test_messages_keep_roles_and_update_activity(store):
    """Test message appends and the activity timestamp."""
    session = await store.get_or_create("s1")
    before = session.last_activity_at

    session.add_message(UserMessage(content="What is my balance?"))
    session.add_message(AgentMessage(content="Checking."))

    assert [m.role for m in session.messages] == ["user", "agent"]
    assert session.message_count == 2
    assert session.last_activity_at >= before


@pytest.mark.asyncio
async def test_get_unknown_raises(store):
    with pytest.raises(SessionNotFoundError):
        store.get("missing")


@pytest.mark.asyncio
async def test_remove_marks_cancelled(store):
    """Test that removal cancels the session and forgets it."""
    session = await store.get_or_create("s1")

    removed = await store.remove("s1")

    assert removed is session
    assert session.cancelled is True
    with pytest.raises(SessionNotFoundError):
        store.get("s1")
    with pytest.raises(SessionNotFoundError):
        await store.remove("s1")


@pytest.mark.asyncio
async def test_cancelled_session_is_replaced(store):
    """Test that a cancelled session still in the map is not reused."""
    session = await store.get_or_create("s1")
    session.cancelled = True

    fresh = await store.get_or_create("s1")

    assert fresh is not session
    assert fresh.cancelled is False


@pytest.mark.asyncio
async def test_cap_evicts_least_recently_active(store):
    """Test the bounded session count."""
    for session_id in ("s1", "s2", "s3"):
        await store.get_or_create(session_id)
    store.get("s1").add_message(UserMessage(content="still here"))

    await store.get_or_create("s4")

    ids = {session.session_id for session in store.list()}
    assert ids == {"s1", "s3", "s4"}


@pytest.mark.asyncio
async def test_sweep_expired(store):
    """Test idle expiry."""
    idle = await store.get_or_create("idle")
    idle.last_activity_at = utcnow() - timedelta(minutes=5)
    await store.get_or_create("active")

    assert await store.sweep_expired() == 1
    assert [session.session_id for session in store.list()] == ["active"]


@pytest.mark.asyncio
async def test_list_most_recent_first(store):
    first = await store.get_or_create("s1")
    await store.get_or_create("s2")
    first.add_message(UserMessage(content="bump"))

    assert [session.session_id for session in store.list()] == ["s1", "s2"]
