#!/usr/bin/env python3
"""
zabbix-agent-bench -- load generator for Zabbix agent passive checks.

Usage:
  zabbix-agent-bench --key agent.ping [--threads N] [--timelimit S]
  zabbix-agent-bench --keys keys.txt [--limit N] [--verbose]

Press Ctrl+C once to stop gracefully and print the summary, twice to
abort immediately.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from agent_bench.agent.client import ZabbixAgentClient
from agent_bench.catalog.discovery import DiscoveryExpander
from agent_bench.catalog.parser import build_catalog, read_key_file
from agent_bench.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_STAGGER_MS,
    DEFAULT_THREADS,
    DEFAULT_TIMEOUT_MS,
    LOG_FORMAT,
    BenchConfig,
)
from agent_bench.console import configure, console
from agent_bench.errors import CatalogError, DiscoveryError
from agent_bench.scheduler.loop import Scheduler
from agent_bench.scheduler.monitor import CancellationMonitor
from agent_bench.scheduler.state import RunState

if TYPE_CHECKING:
    from agent_bench.domain.models import Check, ParsedCatalog
    from agent_bench.domain.protocols import AgentClient

logger = logging.getLogger("agent_bench")

EXIT_OK = 0
EXIT_FAILURE = 1


class ConsoleCallback:
    """BenchCallback that writes progress to the console."""

    def on_worker_started(self, worker_id: int) -> None:
        console.thread_started(worker_id)

    def on_query_failed(self, check: Check, error: Exception) -> None:
        console.query_failed(check.label, check.key, str(error))

    def on_query_value(self, check: Check, value: str) -> None:
        console.query_value(check.label, check.key, value)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def load_catalog(config: BenchConfig, client: AgentClient) -> ParsedCatalog:
    """Build the expanded catalog, querying discovery rules as they close."""
    expander = DiscoveryExpander(client, config.timeout)
    if config.key_file is not None:
        return read_key_file(config.key_file, expander, key=config.key)
    return build_catalog(expander, key=config.key)


def run(config: BenchConfig, client: AgentClient | None = None) -> int:
    """Run a benchmark and return the process exit code."""
    if client is None:
        client = ZabbixAgentClient(config.host, config.port)

    try:
        catalog = load_catalog(config, client)
    except DiscoveryError as exc:
        logger.debug("Discovery failed", exc_info=True)
        console.error(str(exc))
        if exc.raw is not None:
            console.error(f"Value: {exc.raw!r}")
        return EXIT_FAILURE
    except CatalogError as exc:
        logger.debug("Catalog construction failed", exc_info=True)
        console.error(str(exc))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("Interrupted while building the key catalog")
        console.error("Interrupted while building the key catalog")
        return EXIT_FAILURE

    if not catalog.checks:
        console.error("No agent item keys specified for testing")
        return EXIT_FAILURE

    if config.verbose:
        console.kv(
            {
                "Agent": config.address,
                "Checks": str(len(catalog)),
                "Discovery rules": str(catalog.rules),
                "Threads": str(config.threads),
                "Timeout": f"{config.timeout:g}s",
                "Time limit": f"{config.time_limit:g}s" if config.time_limit else "none",
                "Iteration limit": str(config.iteration_limit or "none"),
            },
            title="Benchmark",
        )

    scheduler = Scheduler(catalog.checks, client, config.bench_options(), ConsoleCallback())
    state = RunState()
    with CancellationMonitor(state.stop):
        stats = scheduler.run(state)

    logger.info(
        "Finished: %d values, %d errors, %d threads, %.3fs, %.2f NVPS",
        stats.values,
        stats.errors,
        stats.threads,
        stats.duration,
        stats.nvps,
    )
    console.summary(stats)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zabbix-agent-bench",
        description="Benchmark a Zabbix agent with concurrent passive checks",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="remote Zabbix agent host")
    parser.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help="remote Zabbix agent TCP port"
    )
    parser.add_argument(
        "--timeout",
        type=_positive_int,
        default=DEFAULT_TIMEOUT_MS,
        help="timeout in milliseconds for each request (default: 3000)",
    )
    parser.add_argument(
        "--stagger",
        type=_non_negative_int,
        default=DEFAULT_STAGGER_MS,
        help="stagger the start of each thread by milliseconds (default: 300)",
    )
    parser.add_argument(
        "--threads", type=_positive_int, default=DEFAULT_THREADS, help="number of test threads"
    )
    parser.add_argument(
        "--timelimit",
        type=_non_negative_int,
        default=0,
        help="time limit in seconds (0=unlimited)",
    )
    parser.add_argument(
        "--limit",
        type=_non_negative_int,
        default=0,
        help="maximum test iterations of each key per thread (0=unlimited)",
    )
    parser.add_argument("--keys", default="", help="read keys from file path")
    parser.add_argument("--key", default="", help="benchmark a single agent item key")
    parser.add_argument("--verbose", action="store_true", help="print more output")
    parser.add_argument("--log-file", default="", help="write diagnostic log to this file")
    parser.add_argument("--plain", action="store_true", help="disable coloured output")
    return parser


def _setup_logging(config: BenchConfig) -> None:
    """Log to --log-file when given, otherwise only warnings to stderr."""
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(config.log_file, encoding="utf-8")
        level = logging.DEBUG if config.verbose else logging.INFO
    else:
        handler = logging.StreamHandler(sys.stderr)
        level = logging.WARNING
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the `zabbix-agent-bench` command."""
    args = build_parser().parse_args(argv)
    config = BenchConfig.from_args(args)

    configure(backend="plain" if config.plain else "auto")
    _setup_logging(config)

    sys.exit(run(config))


if __name__ == "__main__":
    main()
