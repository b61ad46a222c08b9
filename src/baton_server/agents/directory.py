"""AgentDirectory: the single source of truth for which agents exist and answer.

The directory holds registered AgentDescriptors in insertion order and keeps
their reachability current through liveness probes. Probe failures never
propagate to callers; they only update state.
"""

import asyncio
import logging

from baton_server.agents.client import AgentClient
from baton_server.agents.types import AgentDescriptor, Reachability

logger = logging.getLogger(__name__)


class AgentDirectory:
    """Registry of remote agents with periodic liveness probing.

    Writes to the descriptor map and to a descriptor's reachability are
    serialized through a single lock. Reads return snapshots and do not
    take the lock.
    """

    def __init__(
        self,
        client: AgentClient,
        probe_interval: float = 30.0,
        probe_timeout: float = 5.0,
    ) -> None:
        """Initialize the directory.

        Args:
            client: Transport used for liveness probes
            probe_interval: Seconds between recurring probe rounds
            probe_timeout: Upper bound for a single probe in seconds
        """
        self._client = client
        self.probe_interval = probe_interval
        self.probe_timeout = probe_timeout
        self._agents: dict[str, AgentDescriptor] = {}
        self._lock = asyncio.Lock()
        self._inflight: dict[str, asyncio.Task[None]] = {}
        self._loop_task: asyncio.Task[None] | None = None

    async def register(self, descriptor: AgentDescriptor) -> AgentDescriptor:
        """Insert or replace an agent by id.

        The endpoint is not contacted here; reachability starts as unknown
        and is settled by the next probe.

        Args:
            descriptor: The agent to register

        Returns:
            The registered descriptor
        """
        descriptor.reachability = Reachability.UNKNOWN
        descriptor.last_probe_error = None
        async with self._lock:
            replaced = descriptor.id in self._agents
            self._agents[descriptor.id] = descriptor

        action = "replaced" if replaced else "registered"
        logger.info(
            f"Agent {action}: {descriptor.display_name} ({descriptor.id}) "
            f"at {descriptor.endpoint}"
        )
        return descriptor

    def get(self, agent_id: str) -> AgentDescriptor | None:
        """Look up an agent by id, or None if it is not registered."""
        return self._agents.get(agent_id)

    def list_all(self) -> list[AgentDescriptor]:
        """All registered agents in registration order."""
        return list(self._agents.values())

    def list_reachable(self) -> list[AgentDescriptor]:
        """Agents whose last probe succeeded, in registration order."""
        return [agent for agent in self._agents.values() if agent.is_reachable]

    def find_by_capability(self, capability: str) -> list[AgentDescriptor]:
        """Reachable agents advertising the given capability tag."""
        return [
            agent
            for agent in self._agents.values()
            if capability in agent.capabilities and agent.is_reachable
        ]

    async def set_reachability(
        self, agent_id: str, reachability: Reachability
    ) -> AgentDescriptor | None:
        """Operator override of an agent's reachability.

        Args:
            agent_id: The agent to update
            reachability: New state

        Returns:
            The updated descriptor, or None if the agent is not registered
        """
        async with self._lock:
            agent = self._agents.get(agent_id)
            if agent is None:
                return None
            agent.reachability = reachability
            agent.last_probe_error = None

        logger.info(f"Reachability of {agent_id} set to {reachability.value} by operator")
        return agent

    async def probe(self, agent_id: str) -> Reachability | None:
        """Probe a single agent now.

        Returns:
            The resulting reachability, or None if the agent is not registered
        """
        agent = self.get(agent_id)
        if agent is None:
            return None
        await self._probe_once(agent)
        return agent.reachability

    async def probe_all(self) -> dict[str, Reachability]:
        """Probe every registered agent concurrently.

        Each agent has at most one probe in flight; an agent whose previous
        probe is still running is not probed again, the running probe is
        awaited instead.

        Returns:
            dict: Agent id to resulting reachability
        """
        agents = self.list_all()
        await asyncio.gather(*(self._probe_once(agent) for agent in agents))

        results = {agent.id: agent.reachability for agent in agents}
        reachable = sum(1 for state in results.values() if state is Reachability.REACHABLE)
        logger.debug(f"Probe round finished: {reachable}/{len(results)} agents reachable")
        return results

    async def _probe_once(self, agent: AgentDescriptor) -> None:
        running = self._inflight.get(agent.id)
        if running is not None and not running.done():
            logger.debug(f"Probe for {agent.id} still in flight, waiting for it")
            await asyncio.shield(running)
            return

        task = asyncio.create_task(self._probe_and_record(agent))
        self._inflight[agent.id] = task
        try:
            await asyncio.shield(task)
        finally:
            if task.done() and self._inflight.get(agent.id) is task:
                del self._inflight[agent.id]

    async def _probe_and_record(self, agent: AgentDescriptor) -> None:
        try:
            reachable, reason = await asyncio.wait_for(
                self._client.probe(agent), timeout=self.probe_timeout
            )
        except asyncio.TimeoutError:
            reachable, reason = False, f"Timed out after {self.probe_timeout:g}s"
        except Exception as e:
            reachable, reason = False, str(e) or e.__class__.__name__

        state = Reachability.REACHABLE if reachable else Reachability.UNREACHABLE
        async with self._lock:
            # A replaced descriptor no longer belongs to the directory
            if self._agents.get(agent.id) is not agent:
                return
            previous = agent.reachability
            agent.reachability = state
            agent.last_probe_error = reason

        if state is Reachability.UNREACHABLE and previous is not state:
            logger.warning(f"Health check failed for agent {agent.id}: {reason}")
        elif state is Reachability.REACHABLE and previous is not state:
            logger.info(f"Agent {agent.id} is reachable")

    async def _probe_loop(self) -> None:
        while True:
            await asyncio.sleep(self.probe_interval)
            await self.probe_all()

    def start(self) -> None:
        """Start the recurring probe loop (idempotent)."""
        if self._loop_task is not None and not self._loop_task.done():
            return
        self._loop_task = asyncio.create_task(self._probe_loop())
        logger.info(f"Started agent probe loop every {self.probe_interval:g}s")

    async def stop(self) -> None:
        """Stop the probe loop and cancel probes still in flight."""
        tasks = list(self._inflight.values())
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()
        logger.info("Stopped agent probe loop")

    def stats(self) -> dict[str, int]:
        """Counts of registered agents by reachability."""
        agents = self.list_all()
        return {
            "total": len(agents),
            "reachable": sum(1 for a in agents if a.reachability is Reachability.REACHABLE),
            "unreachable": sum(
                1 for a in agents if a.reachability is Reachability.UNREACHABLE
            ),
            "unknown": sum(1 for a in agents if a.reachability is Reachability.UNKNOWN),
        }
