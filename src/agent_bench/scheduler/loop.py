"""Benchmark scheduler: staggered worker threads hammering the agent."""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass

from agent_bench.domain.models import BenchStats, Check, WorkerReport
from agent_bench.domain.protocols import AgentClient, BenchCallback
from agent_bench.errors import AgentError, CatalogError
from agent_bench.scheduler.state import RunState
from agent_bench.scheduler.stats import collect_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchOptions:
    """Load shape and stopping bounds of a run. Zero limits are unbounded."""

    threads: int = 3
    stagger: float = 0.3
    timeout: float = 3.0
    time_limit: float = 0.0
    iteration_limit: int = 0
    verbose: bool = False


class Scheduler:
    """Runs the catalog against the agent from several worker threads."""

    def __init__(
        self,
        checks: Sequence[Check],
        client: AgentClient,
        options: BenchOptions,
        callback: BenchCallback,
    ) -> None:
        if not checks:
            raise CatalogError("no agent item keys to benchmark")
        self._checks = tuple(checks)
        self._client = client
        self._options = options
        self._callback = callback

    def run(self, run: RunState | None = None) -> BenchStats:
        """Launch the workers, wait for all of them and return the totals."""
        run = run or RunState()
        self.launch(run)
        return collect_stats(run)

    def launch(self, run: RunState) -> None:
        """Start workers one stagger apart until all are up or a stop is requested."""
        for worker_id in range(1, self._options.threads + 1):
            if run.stop.wait(self._options.stagger):
                logger.info("Stop requested, %d workers launched", run.launched)
                break
            thread = threading.Thread(
                target=self._worker,
                args=(worker_id, run),
                name=f"bench-worker-{worker_id}",
                daemon=True,
            )
            thread.start()
            run.launched += 1
            self._callback.on_worker_started(worker_id)

    def _worker(self, worker_id: int, run: RunState) -> None:
        opts = self._options
        values = 0
        errors = 0
        iterations = 0
        try:
            while not run.stop.is_set():
                for check in self._checks:
                    if run.stop.is_set():
                        return
                    try:
                        value = self._client.query(check.key, opts.timeout)
                    except AgentError as exc:
                        errors += 1
                        logger.debug("[%s] %s: %s", check.label, check.key, exc)
                        self._callback.on_query_failed(check, exc)
                    else:
                        if opts.verbose:
                            self._callback.on_query_value(check, value)
                    values += 1

                    if opts.time_limit > 0 and run.elapsed() > opts.time_limit:
                        if run.stop.stop():
                            logger.info("Time limit of %.1fs reached", opts.time_limit)
                        return

                iterations += 1
                # The iteration limit ends this worker only; the shared flag is left
                # alone so every worker completes its own passes. Only the time
                # limit and interrupts stop the whole run.
                if opts.iteration_limit > 0 and iterations >= opts.iteration_limit:
                    logger.debug("Worker %d reached %d iterations", worker_id, iterations)
                    return
        finally:
            run.results.put(
                WorkerReport(
                    worker_id=worker_id,
                    values=values,
                    errors=errors,
                    iterations=iterations,
                )
            )
