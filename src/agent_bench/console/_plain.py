"""agent_bench.console._plain -- Plain-text backend.

Used when stdout is not a TTY, so redirected output stays free of
escape sequences.
"""

from __future__ import annotations

import sys
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agent_bench.domain.models import BenchStats


def format_summary(stats: BenchStats) -> str:
    return (
        f"Processed {stats.values} values across {stats.threads} threads "
        f"in {stats.duration:.3f}s ({stats.nvps:f} NVPS), "
        f"{stats.errors} errors ({stats.error_rate:.2%})"
    )


class PlainBackend:
    """ConsoleProtocol implementation using only built-in print()."""

    def __init__(self) -> None:
        # Worker threads print concurrently; keep lines whole
        self._lock = threading.RLock()

    def _out(self, text: str) -> None:
        with self._lock:
            print(text, flush=True)

    def _err(self, text: str) -> None:
        with self._lock:
            print(text, file=sys.stderr, flush=True)

    # -- Errors -------------------------------------------------------------

    def error(self, message: str) -> None:
        self._err(f"Error: {message}")

    # -- Structured panels --------------------------------------------------

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        if title:
            self._out(f"{title}:")
        if not data:
            return
        max_key = max(len(k) for k in data)
        for k, v in data.items():
            self._out(f"  {k.rjust(max_key)}: {v}")

    # -- Run lifecycle ------------------------------------------------------

    def thread_started(self, worker_id: int) -> None:
        self._out(f"Starting thread {worker_id}...")

    def query_failed(self, label: str, key: str, error: str) -> None:
        self._err(f"[{label}] {key}: {error}")

    def query_value(self, label: str, key: str, value: str) -> None:
        self._out(f"[{label}] {key}: {value}")

    def summary(self, stats: BenchStats) -> None:
        self._out(f"Finished! {format_summary(stats)}")
