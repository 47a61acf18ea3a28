"""Protocol interfaces for benchmark components."""

from __future__ import annotations

from typing import Protocol

from agent_bench.domain.models import Check


class AgentClient(Protocol):
    """Interface for a remote agent answering item key queries."""

    def query(self, key: str, timeout: float) -> str:
        """Return the agent's value for ``key``.

        Raises ``AgentError`` on timeouts, connection failures and
        agent-reported errors.
        """
        ...


class BenchCallback(Protocol):
    """Callback interface for reporting benchmark progress."""

    def on_worker_started(self, worker_id: int) -> None:
        """Called right after a worker thread is launched."""
        ...

    def on_query_failed(self, check: Check, error: Exception) -> None:
        """Called from a worker thread when a query fails."""
        ...

    def on_query_value(self, check: Check, value: str) -> None:
        """Called from a worker thread for each value in verbose mode."""
        ...
