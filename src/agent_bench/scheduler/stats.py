"""Aggregation of worker reports into run statistics."""

import logging

from agent_bench.domain.models import BenchStats, WorkerReport
from agent_bench.scheduler.state import RunState

logger = logging.getLogger(__name__)


def collect_stats(run: RunState) -> BenchStats:
    """Wait for a report from every launched worker and sum them up."""
    reports: list[WorkerReport] = []
    while len(reports) < run.launched:
        report = run.results.get()
        logger.debug(
            "Worker %d finished: %d values, %d errors, %d iterations",
            report.worker_id,
            report.values,
            report.errors,
            report.iterations,
        )
        reports.append(report)

    duration = run.elapsed()
    reports.sort(key=lambda r: r.worker_id)
    return BenchStats(
        values=sum(r.values for r in reports),
        errors=sum(r.errors for r in reports),
        threads=run.launched,
        duration=duration,
        reports=tuple(reports),
    )
