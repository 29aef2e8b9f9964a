"""
Topology builder for the observability stack.

Turns service declarations and access declarations into an immutable
Topology: the order in which resources are constructed plus the network
access edges between services. Construction happens in three tiers:

    foundation (network, cluster, roles) < services < load balancer attachments

Inside the service tier, declaration order is kept unless a service needs
another service's discovery address while being constructed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import (
    CyclicDependencyError,
    DanglingEdgeError,
    InvalidSpecError,
    SuspiciousEdgeWarning,
)
from .network_policy import AccessDeclaration, AccessEdge, derive_access_edges
from .outputs import EndpointRoute, validate_routes
from .service_spec import ServiceSpec

logger = logging.getLogger(__name__)

FOUNDATION_STEPS = ("vpc", "cluster", "roles")


class Tier(Enum):
    """Construction tiers, in the order they are provisioned."""

    FOUNDATION = 1
    SERVICE = 2
    ATTACHMENT = 3


@dataclass(frozen=True)
class ResourceStep:
    """One entry of the resource creation order."""

    tier: Tier
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"tier": self.tier.name.lower(), "name": self.name}


@dataclass(frozen=True)
class Topology:
    """
    The full ordered set of services plus their access edges.

    Attributes:
        services: Service specs in creation order
        edges: Access edges in first-declared order
        creation_order: Every resource step across the three tiers
        routes: Registered endpoint routes
        warnings: Non-fatal findings raised while building
    """

    services: Tuple[ServiceSpec, ...]
    edges: Tuple[AccessEdge, ...]
    creation_order: Tuple[ResourceStep, ...]
    routes: Tuple[EndpointRoute, ...] = ()
    warnings: Tuple[SuspiciousEdgeWarning, ...] = ()

    def service(self, name: str) -> ServiceSpec:
        for spec in self.services:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def steps(self, tier: Tier) -> Tuple[ResourceStep, ...]:
        return tuple(step for step in self.creation_order if step.tier is tier)

    @property
    def exposed_services(self) -> Tuple[ServiceSpec, ...]:
        return tuple(spec for spec in self.services if spec.exposed_externally)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "services": [spec.to_dict() for spec in self.services],
            "edges": [edge.to_dict() for edge in self.edges],
            "creation_order": [step.to_dict() for step in self.creation_order],
            "routes": [route.to_dict() for route in self.routes],
            "warnings": [str(warning) for warning in self.warnings],
        }


def _address_dependencies(
    services: Sequence[ServiceSpec],
    declarations: Sequence[AccessDeclaration],
) -> Dict[str, List[str]]:
    """Map each service to the services whose address it needs at construction time."""
    dependencies: Dict[str, List[str]] = {spec.name: [] for spec in services}
    for declaration in declarations:
        for endpoint in (declaration.source, declaration.target):
            if endpoint not in dependencies:
                raise DanglingEdgeError(
                    declaration.source, declaration.target, declaration.port, endpoint
                )
        # Self references are reported as suspicious edges, not as cycles
        if not declaration.needs_address or declaration.source == declaration.target:
            continue
        needed = dependencies[declaration.source]
        if declaration.target not in needed:
            needed.append(declaration.target)
    return dependencies


def _find_cycle(names: Sequence[str], dependencies: Dict[str, List[str]]) -> Optional[List[str]]:
    """Return the members of the first dependency cycle found, if any."""
    visiting, done = set(), set()
    path: List[str] = []

    def visit(name: str) -> Optional[List[str]]:
        visiting.add(name)
        path.append(name)
        for dependency in dependencies[name]:
            if dependency in visiting:
                return path[path.index(dependency):]
            if dependency not in done:
                cycle = visit(dependency)
                if cycle:
                    return cycle
        visiting.discard(name)
        done.add(name)
        path.pop()
        return None

    for name in names:
        if name not in done:
            cycle = visit(name)
            if cycle:
                return cycle
    return None


def order_services(
    services: Sequence[ServiceSpec],
    declarations: Sequence[AccessDeclaration] = (),
) -> Tuple[ServiceSpec, ...]:
    """
    Stable topological sort of services by construction-time address needs.

    Args:
        services: Service specs in declaration order
        declarations: Access declarations, only ``needs_address`` ones matter

    Returns:
        The services in creation order

    Raises:
        DanglingEdgeError: If a declaration names an unknown service
        CyclicDependencyError: If address dependencies form a cycle
    """
    dependencies = _address_dependencies(services, declarations)
    cycle = _find_cycle([spec.name for spec in services], dependencies)
    if cycle:
        raise CyclicDependencyError(cycle)

    ordered: List[ServiceSpec] = []
    placed = set()
    while len(ordered) < len(services):
        # Earliest-declared service whose dependencies are already placed
        for spec in services:
            if spec.name not in placed and all(dep in placed for dep in dependencies[spec.name]):
                ordered.append(spec)
                placed.add(spec.name)
                break
    return tuple(ordered)


def build_topology(
    services: Sequence[ServiceSpec],
    declarations: Sequence[AccessDeclaration] = (),
    routes: Sequence[EndpointRoute] = (),
) -> Topology:
    """
    Build an immutable topology from declared services and access rules.

    Validation happens in full before anything is returned, so callers can
    rely on a returned topology being safe to provision.

    Args:
        services: Service specs in declaration order
        declarations: Access declarations in caller order
        routes: Extra endpoint routes to project alongside each service URL

    Returns:
        The assembled topology

    Raises:
        InvalidSpecError: On duplicate service names or invalid routes
        DanglingEdgeError: If an access rule names an unknown service
        CyclicDependencyError: If address dependencies form a cycle
    """
    services = tuple(services)
    declarations = tuple(declarations)

    seen = set()
    labels = set()
    for spec in services:
        if spec.name in seen:
            raise InvalidSpecError(f"Duplicate service name '{spec.name}'")
        if spec.display_name in labels:
            raise InvalidSpecError(f"Duplicate display name '{spec.display_name}'")
        seen.add(spec.name)
        labels.add(spec.display_name)

    edges, warnings = derive_access_edges(declarations, seen)
    ordered = order_services(services, declarations)
    routes = validate_routes(routes, ordered)

    creation_order = (
        tuple(ResourceStep(Tier.FOUNDATION, name) for name in FOUNDATION_STEPS)
        + tuple(ResourceStep(Tier.SERVICE, spec.name) for spec in ordered)
        + tuple(
            ResourceStep(Tier.ATTACHMENT, spec.name)
            for spec in ordered
            if spec.exposed_externally
        )
    )

    logger.info(
        f"Built topology with {len(ordered)} services, {len(edges)} access edges "
        f"and {len(warnings)} warnings"
    )
    return Topology(
        services=ordered,
        edges=edges,
        creation_order=creation_order,
        routes=routes,
        warnings=warnings,
    )
