"""Exception hierarchy for the agent benchmark."""


class BenchError(Exception):
    """Base class for benchmark errors."""


class AgentError(BenchError):
    """Raised when a single agent query fails."""


class CatalogError(BenchError):
    """Raised when no usable key catalog can be built."""


class DiscoveryError(BenchError):
    """Raised when a discovery rule cannot be queried or decoded."""

    def __init__(self, key: str, message: str, raw: str | None = None) -> None:
        super().__init__(f"discovery rule {key}: {message}")
        self.key = key
        self.raw = raw
