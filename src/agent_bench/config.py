"""Defaults and run configuration."""

import argparse
from dataclasses import dataclass
from pathlib import Path

from agent_bench.scheduler.loop import BenchOptions

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 10050
DEFAULT_TIMEOUT_MS = 3000
DEFAULT_STAGGER_MS = 300
DEFAULT_THREADS = 3

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


@dataclass(frozen=True)
class BenchConfig:
    """Everything the command line controls, in seconds where it matters."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT_MS / 1000
    stagger: float = DEFAULT_STAGGER_MS / 1000
    threads: int = DEFAULT_THREADS
    time_limit: float = 0.0
    iteration_limit: int = 0
    key_file: Path | None = None
    key: str | None = None
    verbose: bool = False
    log_file: Path | None = None
    plain: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "BenchConfig":
        return cls(
            host=args.host,
            port=args.port,
            timeout=args.timeout / 1000,
            stagger=args.stagger / 1000,
            threads=args.threads,
            time_limit=float(args.timelimit),
            iteration_limit=args.limit,
            key_file=Path(args.keys) if args.keys else None,
            key=args.key or None,
            verbose=args.verbose,
            log_file=Path(args.log_file) if args.log_file else None,
            plain=args.plain,
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def bench_options(self) -> BenchOptions:
        return BenchOptions(
            threads=self.threads,
            stagger=self.stagger,
            timeout=self.timeout,
            time_limit=self.time_limit,
            iteration_limit=self.iteration_limit,
            verbose=self.verbose,
        )
