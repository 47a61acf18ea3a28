"""Core data models for the agent benchmark."""

from dataclasses import dataclass, field
from enum import Enum


class CheckRole(Enum):
    """Classification of a check, used for display labelling."""

    ITEM = "item"
    DISCOVERY_RULE = "disco"
    PROTOTYPE = "proto"


class StopState(Enum):
    """State of the shared stop flag."""

    RUNNING = "running"
    STOPPING = "stopping"
    FORCE_EXIT = "force_exit"


@dataclass(frozen=True)
class Check:
    """A single agent item key to benchmark."""

    key: str
    role: CheckRole = CheckRole.ITEM
    children: tuple["Check", ...] = ()

    @property
    def label(self) -> str:
        return self.role.value


@dataclass(frozen=True)
class DiscoveryPayload:
    """Decoded result of a discovery rule: one macro mapping per instance."""

    instances: tuple[dict[str, str], ...] = ()


@dataclass(frozen=True)
class ParsedCatalog:
    """Result of reading key file lines.

    ``checks`` is the flat, expanded list every worker iterates. Discovery
    rules never appear in it; only the prototypes they were expanded into.
    """

    checks: tuple[Check, ...] = ()
    discarded: int = 0
    rules: int = 0

    def __len__(self) -> int:
        return len(self.checks)


@dataclass(frozen=True)
class WorkerReport:
    """Counters posted by a worker when its loop ends."""

    worker_id: int
    values: int = 0
    errors: int = 0
    iterations: int = 0


@dataclass(frozen=True)
class BenchStats:
    """Aggregate result of a benchmark run."""

    values: int
    errors: int
    threads: int
    duration: float
    reports: tuple[WorkerReport, ...] = field(default=(), repr=False)

    @property
    def nvps(self) -> float:
        """Values processed per second of wall-clock time."""
        if self.duration <= 0:
            return 0.0
        return self.values / self.duration

    @property
    def error_rate(self) -> float:
        if not self.values:
            return 0.0
        return self.errors / self.values
