"""Shared pytest fixtures for agent_bench tests.

Provides an in-memory AgentClient, a recording BenchCallback and a helper
for writing key files.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from agent_bench import console as console_module
from agent_bench.console._plain import PlainBackend
from agent_bench.domain.models import Check
from agent_bench.errors import AgentError

# ---------------------------------------------------------------------------
# Fake port implementations
# ---------------------------------------------------------------------------


class FakeAgentClient:
    """AgentClient answering from a dict.

    Keys listed in ``failures`` raise AgentError with the given message,
    unknown keys answer ``default``. Every call is recorded.
    """

    def __init__(
        self,
        values: dict[str, str] | None = None,
        *,
        failures: dict[str, str] | None = None,
        default: str = "1",
        delay: float = 0.0,
    ) -> None:
        self.values = dict(values or {})
        self.failures = dict(failures or {})
        self.default = default
        self.delay = delay
        self.calls: list[tuple[str, float]] = []
        self._lock = threading.Lock()

    def query(self, key: str, timeout: float) -> str:
        with self._lock:
            self.calls.append((key, timeout))
        if self.delay:
            time.sleep(self.delay)
        if key in self.failures:
            raise AgentError(self.failures[key])
        return self.values.get(key, self.default)

    @property
    def queried_keys(self) -> list[str]:
        with self._lock:
            return [key for key, _ in self.calls]


class RecordingCallback:
    """BenchCallback that records every event."""

    def __init__(self) -> None:
        self.started: list[int] = []
        self.failed: list[tuple[str, str]] = []
        self.values: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def on_worker_started(self, worker_id: int) -> None:
        with self._lock:
            self.started.append(worker_id)

    def on_query_failed(self, check: Check, error: Exception) -> None:
        with self._lock:
            self.failed.append((check.key, str(error)))

    def on_query_value(self, check: Check, value: str) -> None:
        with self._lock:
            self.values.append((check.key, value))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _plain_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every test starts on a fresh plain-text console."""
    monkeypatch.setattr(console_module, "_backend", PlainBackend())


@pytest.fixture
def fake_client() -> FakeAgentClient:
    return FakeAgentClient()


@pytest.fixture
def make_client() -> type[FakeAgentClient]:
    """Factory for FakeAgentClient with custom answers."""
    return FakeAgentClient


@pytest.fixture
def recording_callback() -> RecordingCallback:
    return RecordingCallback()


@pytest.fixture
def write_keys(tmp_path: Path) -> Callable[[str], Path]:
    """Write key file content to a temp file and return its path."""

    def _write(content: str, name: str = "keys.txt") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
