"""Async HTTP transport for remote agents.

This module wraps an httpx.AsyncClient and provides the two calls the
orchestration core makes against an agent: sending a task-shaped request
and probing liveness. Agents may answer with a single JSON object or with a
stream of events (SSE or newline-delimited JSON); the adapters at the bottom
of the module convert either shape into an AgentReply or AgentFailure.
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator

import httpx

from baton_server.agents.types import (
    AgentDescriptor,
    AgentFailure,
    AgentReply,
    AgentResponse,
)

logger = logging.getLogger(__name__)

AGENT_CARD_SUFFIX = "agent-card.json"

EVENT_KINDS = {"status-update", "artifact-update", "message", "task"}
FAILED_STATES = {"failed", "rejected", "canceled"}
TEXT_KEYS = ("response", "message", "text", "result")


class AgentClient:
    """Async client for calling remote agents over HTTP.

    The client is created once at startup and shared by the agent directory
    (for probes) and the workflow engine and coordinator (for calls). It
    never raises for transport problems: every failure is returned as an
    AgentFailure so callers can record it as step or probe state.

    Attributes:
        message_path: Path appended to an agent endpoint for task requests
        probe_path: Default liveness path for agents without an override
        step_timeout: Seconds allowed for a full agent call
        probe_timeout: Seconds allowed for a liveness probe
    """

    def __init__(
        self,
        message_path: str = "/a2a/messages",
        probe_path: str = "/health",
        step_timeout: float = 30.0,
        probe_timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the agent client.

        Args:
            message_path: Path for task requests
            probe_path: Default liveness path
            step_timeout: Timeout for agent calls in seconds
            probe_timeout: Timeout for probes in seconds
            transport: Optional httpx transport (used by tests to mock agents)
        """
        self.message_path = message_path
        self.probe_path = probe_path
        self.step_timeout = step_timeout
        self.probe_timeout = probe_timeout
        self._client = httpx.AsyncClient(
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        logger.info(
            f"AgentClient initialized (message path {message_path}, "
            f"step timeout {step_timeout}s, probe timeout {probe_timeout}s)"
        )

    async def send(
        self,
        agent: AgentDescriptor,
        request: str,
        payload: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> AgentResponse:
        """Send a task-shaped request to an agent and await its outcome.

        Args:
            agent: The agent to call
            request: Opaque instruction string for the agent
            payload: Extra top-level fields merged into the request body
            context: Context object sent alongside the request

        Returns:
            AgentReply on success, AgentFailure on any transport error,
            timeout, non-success status, or failure reported by the agent
        """
        url = f"{agent.endpoint}{self.message_path}"
        body = {"request": request, **(payload or {}), "context": context or {}}

        logger.debug(f"Calling agent {agent.id} at {url}")
        try:
            response = await asyncio.wait_for(
                self._post(url, body), timeout=self.step_timeout
            )
        except asyncio.TimeoutError:
            response = AgentFailure(f"Timed out after {self.step_timeout:g}s")
        except httpx.HTTPError as e:
            response = AgentFailure(str(e) or e.__class__.__name__)
        except ValueError as e:
            response = AgentFailure(f"Malformed response: {e}")

        if isinstance(response, AgentFailure):
            logger.warning(f"Call to agent {agent.id} failed: {response.reason}")
        else:
            logger.debug(f"Agent {agent.id} replied ({len(response.text)} chars)")
        return response

    async def probe(self, agent: AgentDescriptor) -> tuple[bool, str | None]:
        """Check whether an agent answers on its liveness path.

        Agents probed through an agent card must return a JSON card with a
        name to count as reachable.

        Args:
            agent: The agent to probe

        Returns:
            tuple: (reachable, failure reason or None)
        """
        path = agent.probe_path or self.probe_path
        url = f"{agent.endpoint}{path}"
        try:
            response = await self._client.get(url, timeout=self.probe_timeout)
            if not response.is_success:
                return False, f"HTTP {response.status_code}"
            if path.endswith(AGENT_CARD_SUFFIX):
                card = response.json()
                if not isinstance(card, dict) or not card.get("name"):
                    return False, "Agent card has no name"
            return True, None
        except httpx.TimeoutException:
            return False, f"Timed out after {self.probe_timeout:g}s"
        except httpx.HTTPError as e:
            return False, str(e) or e.__class__.__name__
        except ValueError as e:
            return False, f"Malformed agent card: {e}"

    async def _post(self, url: str, body: dict[str, Any]) -> AgentResponse:
        async with self._client.stream(
            "POST", url, json=body, timeout=self.step_timeout
        ) as response:
            if not response.is_success:
                await response.aread()
                detail = response.text[:200].strip()
                if detail:
                    return AgentFailure(f"HTTP {response.status_code}: {detail}")
                return AgentFailure(f"HTTP {response.status_code}")

            content_type = response.headers.get("content-type", "")
            if "text/event-stream" in content_type:
                return summarize_events([e async for e in _iter_sse(response)])
            if "ndjson" in content_type or "jsonl" in content_type:
                return summarize_events([e async for e in _iter_ndjson(response)])

            await response.aread()
            text = response.text.strip()
            if not text:
                return AgentFailure("Empty response body")
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                return AgentReply(text=text)
            return parse_json_reply(decoded)

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
        logger.debug("AgentClient closed")


async def _iter_sse(response: httpx.Response) -> AsyncIterator[Any]:
    """Yield decoded JSON payloads from a server-sent events body."""
    data_lines: list[str] = []
    async for line in response.aiter_lines():
        if line.startswith("data:"):
            data_lines.append(line[5:].strip())
        elif not line.strip() and data_lines:
            data = "\n".join(data_lines)
            data_lines = []
            if data and data != "[DONE]":
                yield json.loads(data)
    if data_lines:
        data = "\n".join(data_lines)
        if data and data != "[DONE]":
            yield json.loads(data)


async def _iter_ndjson(response: httpx.Response) -> AsyncIterator[Any]:
    """Yield decoded JSON payloads from a newline-delimited JSON body."""
    async for line in response.aiter_lines():
        if line.strip():
            yield json.loads(line)


def _unwrap(event: Any) -> Any:
    """Strip a JSON-RPC envelope from an event, if present."""
    if isinstance(event, dict) and "jsonrpc" in event and "result" in event:
        return event["result"]
    return event


def _collect_parts(parts: Any, texts: list[str], data: list[Any]) -> None:
    if not isinstance(parts, list):
        return
    for part in parts:
        if not isinstance(part, dict):
            continue
        if part.get("text"):
            texts.append(str(part["text"]))
        elif part.get("data") is not None:
            data.append(part["data"])


def _collect_message(message: Any, texts: list[str], data: list[Any]) -> None:
    """Collect a message given either as an object with parts or as plain text."""
    if isinstance(message, str):
        if message:
            texts.append(message)
    elif isinstance(message, dict):
        _collect_parts(message.get("parts"), texts, data)


def summarize_events(events: list[Any]) -> AgentResponse:
    """Fold a sequence of agent events into a single response.

    Event kinds:
        - status-update: progress text; a failed/rejected/canceled state is a failure
        - artifact-update: named output with text and/or data parts
        - message: terminal message with parts
        - task: final task snapshot carrying a status and artifacts

    Args:
        events: Decoded event payloads in arrival order

    Returns:
        AgentReply with concatenated text and collected data, or AgentFailure
    """
    texts: list[str] = []
    data: list[Any] = []

    for raw in events:
        event = _unwrap(raw)
        if not isinstance(event, dict):
            continue
        if "error" in event and event["error"]:
            error = event["error"]
            reason = error.get("message") if isinstance(error, dict) else error
            return AgentFailure(str(reason))

        kind = event.get("kind")
        if kind in ("status-update", "task"):
            status = event.get("status")
            status_texts: list[str] = []
            if isinstance(status, dict):
                _collect_message(status.get("message"), status_texts, data)
                state = status.get("state")
            else:
                # Some agents send the bare state string
                state = status
            texts.extend(status_texts)
            if state in FAILED_STATES:
                reason = " ".join(status_texts) or f"Agent reported state '{state}'"
                return AgentFailure(reason)
            if kind == "task":
                artifacts = event.get("artifacts")
                for artifact in artifacts if isinstance(artifacts, list) else []:
                    if isinstance(artifact, dict):
                        _collect_parts(artifact.get("parts"), texts, data)
        elif kind == "artifact-update":
            artifact = event.get("artifact")
            if isinstance(artifact, dict):
                if artifact.get("name"):
                    texts.append(str(artifact["name"]))
                if artifact.get("content"):
                    texts.append(str(artifact["content"]))
                _collect_parts(artifact.get("parts"), texts, data)
        elif kind == "message":
            _collect_message(event.get("message", event), texts, data)
        else:
            logger.debug(f"Ignoring agent event of kind {kind!r}")

    if not texts and not data:
        return AgentFailure("No response received from agent")

    collected: Any = None
    if len(data) == 1:
        collected = data[0]
    elif data:
        collected = data
    return AgentReply(text="\n".join(texts), data=collected)


def parse_json_reply(payload: Any) -> AgentResponse:
    """Convert a single JSON response object into a response variant.

    Args:
        payload: Decoded JSON body

    Returns:
        AgentReply or AgentFailure
    """
    payload = _unwrap(payload)
    if not isinstance(payload, dict):
        return AgentReply(text=json.dumps(payload, default=str), data=payload)

    if payload.get("kind") in EVENT_KINDS or "error" in payload and "jsonrpc" in payload:
        return summarize_events([payload])

    if payload.get("success") is False or payload.get("error"):
        reason = payload.get("error") or payload.get("message") or "Agent reported failure"
        if isinstance(reason, dict):
            reason = reason.get("message") or json.dumps(reason, default=str)
        return AgentFailure(str(reason))

    for key in TEXT_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return AgentReply(text=value, data=payload)

    return AgentReply(text=json.dumps(payload, default=str), data=payload)
