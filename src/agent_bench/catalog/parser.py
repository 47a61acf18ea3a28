"""Key catalog construction from key file lines.

Key files hold one item key per line. Blank lines and ``#`` comments are
ignored. An indented line is a prototype of the closest preceding
non-indented key, which turns that key into a discovery rule::

    agent.ping
    vfs.fs.discovery
        vfs.fs.size[{#FSNAME},free]
        vfs.fs.inode[{#FSNAME},pfree]
    system.cpu.load[all,avg1]

Parsing is permissive: malformed lines never raise, they only end up
counted in ``ParsedCatalog.discarded``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from pathlib import Path

from agent_bench.domain.models import Check, CheckRole, ParsedCatalog
from agent_bench.errors import CatalogError

logger = logging.getLogger(__name__)

COMMENT_PATTERN = re.compile(r"^\s*(#.*)?$")
INDENT_PATTERN = re.compile(r"^\s+")

Expander = Callable[[Check], list[Check]]


class KeyCatalogBuilder:
    """Incrementally turns key lines into the flat benchmark catalog.

    Discovery groups are handed to ``expander`` the moment they close, that
    is when the next top-level line arrives or when ``finish`` is called.
    """

    def __init__(self, expander: Expander) -> None:
        self._expander = expander
        self._checks: list[Check] = []
        self._discarded = 0
        self._rules = 0
        # Most recent top-level key and the prototypes attached to it so far
        self._owner: str | None = None
        self._owner_index = -1
        self._prototypes: list[Check] = []

    def add_key(self, key: str) -> None:
        """Add a literal key, bypassing comment and indentation handling."""
        self._close_group()
        self._append_top_level(key)
        self._owner = None

    def feed(self, line: str) -> None:
        """Consume one line of a key file."""
        line = line.rstrip("\r\n")
        if COMMENT_PATTERN.match(line):
            self._discarded += 1
            return

        if INDENT_PATTERN.match(line):
            if self._owner is None:
                logger.warning("Ignoring prototype without a parent key: %s", line.strip())
                self._discarded += 1
                return
            key = INDENT_PATTERN.sub("", line)
            self._prototypes.append(Check(key=key, role=CheckRole.PROTOTYPE))
            return

        self._close_group()
        self._append_top_level(line)

    def feed_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.feed(line)

    def finish(self) -> ParsedCatalog:
        """Close any open discovery group and return the catalog."""
        self._close_group()
        self._owner = None
        return ParsedCatalog(
            checks=tuple(self._checks),
            discarded=self._discarded,
            rules=self._rules,
        )

    def _append_top_level(self, key: str) -> None:
        self._checks.append(Check(key=key))
        self._owner = key
        self._owner_index = len(self._checks) - 1
        self._prototypes = []

    def _close_group(self) -> None:
        if not self._prototypes or self._owner is None:
            return
        rule = Check(
            key=self._owner,
            role=CheckRole.DISCOVERY_RULE,
            children=tuple(self._prototypes),
        )
        # The rule was provisionally added as an item; it is never benchmarked
        del self._checks[self._owner_index]
        self._prototypes = []
        self._owner = None
        self._rules += 1
        self._checks.extend(self._expander(rule))


def build_catalog(
    expander: Expander,
    key: str | None = None,
    lines: Iterable[str] | None = None,
) -> ParsedCatalog:
    """Build the benchmark catalog from a literal key and/or key file lines."""
    builder = KeyCatalogBuilder(expander)
    if key:
        builder.add_key(key)
    if lines is not None:
        builder.feed_lines(lines)
    catalog = builder.finish()
    logger.info(
        "Catalog: %d checks, %d discovery rules, %d lines discarded",
        len(catalog.checks),
        catalog.rules,
        catalog.discarded,
    )
    return catalog


def read_key_file(path: Path, expander: Expander, key: str | None = None) -> ParsedCatalog:
    """Build the catalog from a key file on disk.

    Raises CatalogError if the file cannot be read.
    """
    try:
        with path.open(encoding="utf-8") as fh:
            return build_catalog(expander, key=key, lines=fh)
    except OSError as exc:
        raise CatalogError(f"cannot read key file {path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise CatalogError(f"key file {path} is not valid UTF-8") from exc
