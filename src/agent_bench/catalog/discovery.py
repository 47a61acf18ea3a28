"""Discovery rule expansion.

A discovery rule is queried once; its JSON value lists the discovered
instances, each a mapping of macro name to value::

    {"data": [{"{#FSNAME}": "/"}, {"{#FSNAME}": "/var"}]}

Every prototype of the rule is then rendered once per instance by replacing
each macro in the prototype key with the instance's value.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from agent_bench.domain.models import Check, CheckRole, DiscoveryPayload
from agent_bench.errors import AgentError, DiscoveryError

if TYPE_CHECKING:
    from agent_bench.domain.protocols import AgentClient

logger = logging.getLogger(__name__)

DATA_FIELD = "data"


def decode_payload(raw: str) -> DiscoveryPayload:
    """Decode a discovery rule value.

    The ``data`` field name is matched case-insensitively. A missing field
    yields an empty payload. Raises ValueError for anything that is not an
    object holding a list of flat string mappings.
    """
    doc: Any = json.loads(raw)
    if not isinstance(doc, dict):
        raise ValueError(f"expected a JSON object, got {type(doc).__name__}")

    data: Any = None
    for name, value in doc.items():
        if name.lower() == DATA_FIELD:
            data = value
            if name == DATA_FIELD:
                break
    if data is None:
        return DiscoveryPayload()
    if not isinstance(data, list):
        raise ValueError(f"'{DATA_FIELD}' must be a list, got {type(data).__name__}")

    instances: list[dict[str, str]] = []
    for index, instance in enumerate(data):
        if not isinstance(instance, dict):
            raise ValueError(f"instance {index} is not an object")
        for macro, value in instance.items():
            if not isinstance(value, str):
                raise ValueError(f"instance {index}: macro {macro} is not a string")
        instances.append(dict(instance))
    return DiscoveryPayload(instances=tuple(instances))


def expand_macros(key: str, instance: dict[str, str]) -> str:
    """Replace every macro of ``instance`` found in ``key``. Unknown macros stay as is."""
    for macro, value in instance.items():
        key = key.replace(macro, value)
    return key


def expand_prototypes(
    payload: DiscoveryPayload, prototypes: Sequence[Check]
) -> list[Check]:
    """Render prototypes per instance: instance order first, then declaration order."""
    return [
        Check(key=expand_macros(proto.key, instance), role=CheckRole.PROTOTYPE)
        for instance in payload.instances
        for proto in prototypes
    ]


class DiscoveryExpander:
    """Queries discovery rules and materialises their prototypes."""

    def __init__(self, client: AgentClient, timeout: float) -> None:
        self._client = client
        self._timeout = timeout

    def __call__(self, rule: Check) -> list[Check]:
        return self.expand(rule)

    def expand(self, rule: Check) -> list[Check]:
        """Expand one rule. Raises DiscoveryError on query or decode failure."""
        try:
            raw = self._client.query(rule.key, self._timeout)
        except AgentError as exc:
            raise DiscoveryError(rule.key, str(exc)) from exc

        try:
            payload = decode_payload(raw)
        except ValueError as exc:
            raise DiscoveryError(rule.key, str(exc), raw=raw) from exc

        checks = expand_prototypes(payload, rule.children)
        logger.info(
            "Discovery rule %s: %d instances, %d checks",
            rule.key,
            len(payload.instances),
            len(checks),
        )
        return checks
