"""agent_bench.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for benchmark terminal output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from agent_bench.domain.models import BenchStats


class ConsoleProtocol(Protocol):
    """Benchmark terminal output protocol.

    **Errors** -- usable from any module::

        console.error("No agent item keys specified for testing")

    **Run lifecycle** -- used by the scheduler callback and the CLI::

        console.kv({"Host": "localhost:10050", "Threads": "3"}, title="Run")
        console.thread_started(1)
        console.query_failed("item", "agent.ping", "timeout after 3.000s")
        console.query_value("proto", "vfs.fs.size[/,free]", "1048576")
        console.summary(stats)

    Query failures and errors go to stderr, everything else to stdout.
    Methods may be called concurrently from worker threads.
    """

    # -- Errors -------------------------------------------------------------

    def error(self, message: str) -> None:
        """Error message, written to stderr."""
        ...

    # -- Structured panels --------------------------------------------------

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Key-value display."""
        ...

    # -- Run lifecycle ------------------------------------------------------

    def thread_started(self, worker_id: int) -> None:
        """A worker thread was launched."""
        ...

    def query_failed(self, label: str, key: str, error: str) -> None:
        """A single query failed; written to stderr."""
        ...

    def query_value(self, label: str, key: str, value: str) -> None:
        """A single query succeeded (verbose mode)."""
        ...

    def summary(self, stats: BenchStats) -> None:
        """Final throughput line."""
        ...
