"""Shared run state: the stop flag and the worker result channel."""

import queue
import threading
import time
from dataclasses import dataclass, field

from agent_bench.domain.models import StopState, WorkerReport


class StopFlag:
    """Tri-state stop signal shared by every worker.

    Workers poll ``is_set``; the scheduler sleeps on ``wait``. Transitions
    only move forward: running, stopping, force exit.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._state = StopState.RUNNING

    @property
    def state(self) -> StopState:
        return self._state

    def is_set(self) -> bool:
        return self._event.is_set()

    def stop(self) -> bool:
        """Request a graceful stop. Returns True if this call made the transition."""
        with self._lock:
            if self._state is not StopState.RUNNING:
                return False
            self._state = StopState.STOPPING
            self._event.set()
            return True

    def escalate(self) -> StopState:
        """Interrupt handling: stop if running, otherwise move to force exit."""
        with self._lock:
            if self._state is StopState.RUNNING:
                self._state = StopState.STOPPING
            else:
                self._state = StopState.FORCE_EXIT
            self._event.set()
            return self._state

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds. Returns True if the flag is set."""
        return self._event.wait(timeout)


@dataclass
class RunState:
    """Process-wide state of one benchmark run."""

    stop: StopFlag = field(default_factory=StopFlag)
    started_at: float = field(default_factory=time.monotonic)
    results: "queue.Queue[WorkerReport]" = field(default_factory=queue.Queue)
    launched: int = 0

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at
