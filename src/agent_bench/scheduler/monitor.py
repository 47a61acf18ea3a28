"""SIGINT handling: first interrupt drains the run, second one aborts."""

from __future__ import annotations

import logging
import os
import signal
from collections.abc import Callable
from types import FrameType
from typing import Any

from agent_bench.domain.models import StopState
from agent_bench.scheduler.state import StopFlag

logger = logging.getLogger(__name__)

ABORT_EXIT_CODE = 1


def _notice(text: str) -> None:
    # Raw fd write: the handler may interrupt the main thread inside a print
    # that holds the console lock or the stdout buffer.
    try:
        os.write(1, f"{text}\n".encode())
    except OSError:
        logger.debug("Could not write interrupt notice", exc_info=True)


class CancellationMonitor:
    """Turns interrupts into stop flag transitions.

    Use as a context manager around the run; the previous handler is
    restored on exit. Must be entered from the main thread. The handler
    never goes through the console, so it cannot block on output held by
    the thread it interrupted.
    """

    def __init__(
        self,
        stop: StopFlag,
        exit_func: Callable[[int], Any] = os._exit,
        signum: int = signal.SIGINT,
    ) -> None:
        self._stop = stop
        self._exit = exit_func
        self._signum = signum
        self._previous: Any = None

    def __enter__(self) -> CancellationMonitor:
        self._previous = signal.signal(self._signum, self.handle)
        return self

    def __exit__(self, *exc: object) -> None:
        signal.signal(self._signum, self._previous)
        self._previous = None

    def handle(self, signum: int, frame: FrameType | None) -> None:
        state = self._stop.escalate()
        if state is StopState.FORCE_EXIT:
            _notice("Aborting...")
            self._exit(ABORT_EXIT_CODE)
            return
        _notice("Caught SIGINT. Cleaning up...")
