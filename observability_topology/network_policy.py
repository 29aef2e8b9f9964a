"""
Derivation of service-to-service network access rules.

Callers declare which service may reach which other service; this module
turns those declarations into the minimal, ordered set of access edges.
"""

import logging
from dataclasses import dataclass
from typing import Collection, Dict, Iterable, List, Tuple

from .errors import DanglingEdgeError, InvalidSpecError, SuspiciousEdgeWarning
from .service_spec import MAX_PORT

logger = logging.getLogger(__name__)

EdgeKey = Tuple[str, str, int]


@dataclass(frozen=True)
class AccessDeclaration:
    """
    A caller's statement that ``source`` may reach ``target`` on ``port``.

    ``needs_address`` marks that constructing ``source`` requires the
    discovery address of ``target``, which forces ``target`` to be built first.
    """

    source: str
    target: str
    port: int
    reason: str = ""
    needs_address: bool = False

    def __post_init__(self) -> None:
        for field_name in ("source", "target", "reason"):
            value = getattr(self, field_name)
            if not isinstance(value, str):
                raise InvalidSpecError(f"Access rule {field_name} must be a string, got {value!r}")
        if not self.source or not self.target:
            raise InvalidSpecError("Access rule source and target must be non-empty")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port <= MAX_PORT:
            raise InvalidSpecError(
                f"Access rule {self.source} -> {self.target} has invalid port {self.port!r}"
            )
        if not isinstance(self.needs_address, bool):
            raise InvalidSpecError(
                f"Access rule {self.source} -> {self.target}: needs_address must be a boolean"
            )


@dataclass(frozen=True)
class AccessEdge:
    """A permitted, directed network path between two services."""

    source: str
    target: str
    port: int
    reason: str

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target, self.port)

    @property
    def is_self_edge(self) -> bool:
        return self.source == self.target

    def to_dict(self) -> Dict[str, object]:
        return {
            "from": self.source,
            "to": self.target,
            "port": self.port,
            "reason": self.reason,
        }


def derive_access_edges(
    declarations: Iterable[AccessDeclaration],
    service_names: Collection[str],
) -> Tuple[Tuple[AccessEdge, ...], Tuple[SuspiciousEdgeWarning, ...]]:
    """
    Derive deduplicated access edges from ordered declarations.

    Edges are keyed by (source, target, port). When a key repeats, the first
    declaration wins and later reasons are dropped. The result keeps the
    order in which each key was first seen.

    Args:
        declarations: Access declarations in caller order
        service_names: Names of every declared service

    Returns:
        The edges and one warning per distinct self-referencing edge

    Raises:
        DanglingEdgeError: If a declaration names an unknown service
    """
    known = set(service_names)
    edges: Dict[EdgeKey, AccessEdge] = {}

    for declaration in declarations:
        for endpoint in (declaration.source, declaration.target):
            if endpoint not in known:
                raise DanglingEdgeError(
                    declaration.source, declaration.target, declaration.port, endpoint
                )
        edge = AccessEdge(
            source=declaration.source,
            target=declaration.target,
            port=declaration.port,
            reason=declaration.reason,
        )
        if edge.key in edges:
            logger.debug(f"Dropping duplicate access rule {edge.source} -> {edge.target}:{edge.port}")
            continue
        edges[edge.key] = edge

    warnings: List[SuspiciousEdgeWarning] = []
    for edge in edges.values():
        if edge.is_self_edge:
            warning = SuspiciousEdgeWarning(edge.source, edge.port, edge.reason)
            logger.warning(str(warning))
            warnings.append(warning)

    return tuple(edges.values()), tuple(warnings)
