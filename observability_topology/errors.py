"""
Error types raised while building the service topology.

Every fatal error derives from TopologyError and is raised before any
CDK construct is created, so a failed build never provisions anything.
"""

from typing import Sequence


class TopologyError(Exception):
    """Base class for fatal topology build errors."""


class InvalidSpecError(TopologyError, ValueError):
    """A service declaration, route or manifest is malformed."""


class DanglingEdgeError(TopologyError):
    """An access declaration references a service that was never declared."""

    def __init__(self, source: str, target: str, port: int, missing: str) -> None:
        self.source = source
        self.target = target
        self.port = port
        self.missing = missing
        super().__init__(
            f"Access rule {source} -> {target}:{port} references "
            f"undeclared service '{missing}'"
        )


class CyclicDependencyError(TopologyError):
    """Services depend on each other's addresses at construction time."""

    def __init__(self, members: Sequence[str]) -> None:
        self.members = tuple(members)
        path = " -> ".join(self.members + self.members[:1])
        super().__init__(f"Construction-order cycle between services: {path}")


class SuspiciousEdgeWarning(UserWarning):
    """A service is allowed to reach itself. Kept, but likely a mistake."""

    def __init__(self, service: str, port: int, reason: str) -> None:
        self.service = service
        self.port = port
        self.reason = reason
        super().__init__(
            f"Service '{service}' is granted access to itself on port {port} ({reason})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SuspiciousEdgeWarning):
            return NotImplemented
        return (self.service, self.port, self.reason) == (other.service, other.port, other.reason)

    def __hash__(self) -> int:
        return hash((self.service, self.port, self.reason))
