"""agent_bench.console._rich -- Rich-based backend.

Provides coloured terminal output using the Rich library. Failures are
red on stderr, the final summary green.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from agent_bench.console._plain import format_summary

if TYPE_CHECKING:
    from agent_bench.domain.models import BenchStats

_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "label": "cyan",
        "failed": "red",
        "dim": "dim",
    }
)


class RichBackend:
    """ConsoleProtocol implementation backed by Rich."""

    def __init__(self) -> None:
        self._con = Console(theme=_THEME, highlight=False, soft_wrap=True)
        self._err = Console(theme=_THEME, highlight=False, soft_wrap=True, stderr=True)

    # -- Errors -------------------------------------------------------------

    def error(self, message: str) -> None:
        self._err.print(f"[error]Error:[/] {escape(message)}")

    # -- Structured panels --------------------------------------------------

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        t = Table(
            title=title or None,
            box=box.SIMPLE,
            show_header=False,
            show_edge=False,
            pad_edge=True,
        )
        t.add_column("Key", style="bold", justify="right")
        t.add_column("Value")
        for k, v in data.items():
            t.add_row(escape(k), escape(v))
        self._con.print(t)

    # -- Run lifecycle ------------------------------------------------------

    def thread_started(self, worker_id: int) -> None:
        self._con.print(f"[dim]Starting thread {worker_id}...[/]")

    def query_failed(self, label: str, key: str, error: str) -> None:
        self._err.print(f"[failed]\\[{label}][/] {escape(key)}: {escape(error)}")

    def query_value(self, label: str, key: str, value: str) -> None:
        self._con.print(f"[label]\\[{label}][/] {escape(key)}: {escape(value)}")

    def summary(self, stats: BenchStats) -> None:
        self._con.print(f"[success]Finished![/] {escape(format_summary(stats))}")
