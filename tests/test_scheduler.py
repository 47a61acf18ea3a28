"""Tests for the benchmark scheduler with a fake agent."""

import threading
import time

import pytest

from agent_bench.domain.models import Check, CheckRole, StopState
from agent_bench.errors import CatalogError
from agent_bench.scheduler.loop import BenchOptions, Scheduler
from agent_bench.scheduler.state import RunState

CATALOG = (
    Check(key="agent.ping"),
    Check(key="system.uptime"),
    Check(key="vfs.fs.size[/,free]", role=CheckRole.PROTOTYPE),
)


def _options(**overrides: object) -> BenchOptions:
    values: dict[str, object] = {"threads": 3, "stagger": 0.0, "timeout": 1.0}
    values.update(overrides)
    return BenchOptions(**values)  # type: ignore[arg-type]


class TestIterationLimit:
    def test_each_worker_does_one_full_pass(self, fake_client, recording_callback) -> None:
        scheduler = Scheduler(CATALOG, fake_client, _options(iteration_limit=1), recording_callback)

        run = RunState()
        stats = scheduler.run(run)

        assert not run.stop.is_set()
        assert stats.threads == 3
        assert stats.values == 3 * len(CATALOG)
        assert [r.values for r in stats.reports] == [len(CATALOG)] * 3
        assert [r.iterations for r in stats.reports] == [1, 1, 1]
        assert len(fake_client.calls) == 3 * len(CATALOG)

    def test_keys_are_queried_in_order(self, fake_client, recording_callback) -> None:
        scheduler = Scheduler(
            CATALOG, fake_client, _options(threads=1, iteration_limit=2), recording_callback
        )

        scheduler.run()

        assert fake_client.queried_keys == [c.key for c in CATALOG] * 2

    def test_timeout_is_passed_to_client(self, fake_client, recording_callback) -> None:
        opts = _options(threads=1, iteration_limit=1, timeout=0.25)
        Scheduler(CATALOG, fake_client, opts, recording_callback).run()
        assert {timeout for _, timeout in fake_client.calls} == {0.25}


class TestTimeLimit:
    def test_all_workers_stop_after_time_limit(self, make_client, recording_callback) -> None:
        client = make_client(delay=0.001)
        run = RunState()
        scheduler = Scheduler(CATALOG, client, _options(time_limit=0.2), recording_callback)

        stats = scheduler.run(run)

        assert stats.threads == 3
        assert stats.values > 0
        assert stats.duration >= 0.2
        assert stats.duration < 5.0
        assert run.stop.state == StopState.STOPPING

    def test_time_limit_stops_launching(self, make_client, recording_callback) -> None:
        client = make_client(delay=0.001)
        opts = _options(threads=10, stagger=0.1, time_limit=0.15)

        stats = Scheduler(CATALOG, client, opts, recording_callback).run()

        assert stats.threads < 10
        assert recording_callback.started == list(range(1, stats.threads + 1))


class TestFailures:
    def test_failures_are_reported_and_counted(self, make_client, recording_callback) -> None:
        client = make_client(failures={"system.uptime": "timeout after 1.000s"})
        opts = _options(threads=2, iteration_limit=1)

        stats = Scheduler(CATALOG, client, opts, recording_callback).run()

        assert stats.values == 2 * len(CATALOG)
        assert stats.errors == 2
        assert recording_callback.failed == [("system.uptime", "timeout after 1.000s")] * 2

    def test_values_reported_only_when_verbose(self, make_client, recording_callback) -> None:
        client = make_client({"agent.ping": "1"}, default="42")
        Scheduler(CATALOG, client, _options(threads=1, iteration_limit=1), recording_callback).run()
        assert recording_callback.values == []

        verbose = _options(threads=1, iteration_limit=1, verbose=True)
        Scheduler(CATALOG, client, verbose, recording_callback).run()
        assert recording_callback.values == [
            ("agent.ping", "1"),
            ("system.uptime", "42"),
            ("vfs.fs.size[/,free]", "42"),
        ]


class TestStopFlag:
    def test_no_workers_launched_when_already_stopped(
        self, fake_client, recording_callback
    ) -> None:
        run = RunState()
        run.stop.stop()

        stats = Scheduler(CATALOG, fake_client, _options(), recording_callback).run(run)

        assert stats.threads == 0
        assert stats.values == 0
        assert fake_client.calls == []
        assert recording_callback.started == []

    def test_external_stop_drains_workers(self, make_client, recording_callback) -> None:
        client = make_client(delay=0.005)
        run = RunState()
        scheduler = Scheduler(CATALOG, client, _options(), recording_callback)
        result: list[object] = []

        runner = threading.Thread(target=lambda: result.append(scheduler.run(run)))
        runner.start()
        time.sleep(0.1)
        run.stop.stop()
        runner.join(timeout=5.0)

        assert not runner.is_alive()
        stats = result[0]
        assert stats.threads == 3  # type: ignore[attr-defined]
        calls_after_stop = len(client.calls)
        time.sleep(0.05)
        assert len(client.calls) == calls_after_stop

    def test_workers_started_in_order(self, fake_client, recording_callback) -> None:
        opts = _options(threads=4, stagger=0.01, iteration_limit=1)
        Scheduler(CATALOG, fake_client, opts, recording_callback).run()
        assert recording_callback.started == [1, 2, 3, 4]


def test_empty_catalog_is_rejected(fake_client, recording_callback) -> None:
    with pytest.raises(CatalogError):
        Scheduler((), fake_client, _options(), recording_callback)
