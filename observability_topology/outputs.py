"""
Projection of a topology onto named, user-facing endpoints.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import InvalidSpecError
from .service_spec import ServiceSpec

if TYPE_CHECKING:
    from .builder import Topology


@dataclass(frozen=True)
class EndpointRoute:
    """
    A well-known sub-path of a service registered as an extra endpoint.

    External routes hang off the service's load balancer. Internal routes
    point at the service's discovery address inside the VPC.
    """

    service: str
    suffix: str
    path: str = ""
    description: str = ""
    internal: bool = False

    def __post_init__(self) -> None:
        for field_name in ("service", "suffix", "path", "description"):
            value = getattr(self, field_name)
            if not isinstance(value, str):
                raise InvalidSpecError(f"Endpoint route {field_name} must be a string, got {value!r}")
        if not isinstance(self.internal, bool):
            raise InvalidSpecError(f"Endpoint route '{self.suffix}': internal must be a boolean")

    def to_dict(self) -> Dict[str, object]:
        return {
            "service": self.service,
            "suffix": self.suffix,
            "path": self.path,
            "description": self.description,
            "internal": self.internal,
        }


@dataclass(frozen=True)
class Endpoint:
    """A named address handed to the user."""

    label: str
    url: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "url": self.url, "description": self.description}


def validate_routes(
    routes: Sequence[EndpointRoute],
    services: Sequence[ServiceSpec],
) -> Tuple[EndpointRoute, ...]:
    """Check every route against the declared services."""
    by_name = {spec.name: spec for spec in services}
    for route in routes:
        spec = by_name.get(route.service)
        if spec is None:
            raise InvalidSpecError(f"Endpoint route '{route.suffix}' references unknown service '{route.service}'")
        if not route.suffix or not route.suffix.isalnum():
            raise InvalidSpecError(f"Endpoint route suffix {route.suffix!r} must be alphanumeric")
        if route.path and not route.path.startswith("/"):
            raise InvalidSpecError(f"Endpoint route path {route.path!r} must start with '/'")
        if route.internal and spec.discovery_name is None:
            raise InvalidSpecError(
                f"Internal route '{route.suffix}' needs service '{spec.name}' to be discoverable"
            )
        if not route.internal and not spec.exposed_externally:
            raise InvalidSpecError(
                f"External route '{route.suffix}' needs service '{spec.name}' to be exposed externally"
            )

    # CloudFormation logical ids drop non-alphanumeric characters
    labels: Dict[str, str] = {}
    for label in _planned_labels(routes, services):
        logical_id = re.sub(r"[^A-Za-z0-9]", "", label)
        if logical_id in labels:
            raise InvalidSpecError(
                f"Endpoint labels '{labels[logical_id]}' and '{label}' collide as output '{logical_id}'"
            )
        labels[logical_id] = label
    return tuple(routes)


def _planned_labels(routes: Sequence[EndpointRoute], services: Sequence[ServiceSpec]) -> List[str]:
    """Every label project_endpoints will emit for these routes and services."""
    labels = [_label(spec) for spec in services if spec.exposed_externally]
    by_name = {spec.name: spec for spec in services}
    labels.extend(_label(by_name[route.service], route.suffix) for route in routes)
    return labels


def _label(spec: ServiceSpec, suffix: str = "") -> str:
    return f"{spec.display_name}{suffix}URL"


def project_endpoints(
    topology: "Topology",
    hosts: Mapping[str, str],
    namespace: Optional[str] = None,
) -> Tuple[Endpoint, ...]:
    """
    Map exposed services and registered routes to endpoints.

    Each exposed service yields ``{display_name}URL`` at its external host,
    followed by one entry per external route of that service. Internal
    routes come last and use the service discovery address.

    Args:
        topology: A built topology
        hosts: External host name per exposed service, e.g. the load
            balancer DNS name
        namespace: Service discovery namespace, required for internal routes

    Returns:
        Endpoints in a stable order
    """
    endpoints: List[Endpoint] = []

    for spec in topology.exposed_services:
        if spec.name not in hosts:
            raise InvalidSpecError(f"No external host registered for service '{spec.name}'")
        base_url = f"http://{hosts[spec.name]}"
        endpoints.append(
            Endpoint(
                label=_label(spec),
                url=base_url,
                description=spec.description or f"{spec.display_name} URL",
            )
        )
        for route in topology.routes:
            if route.service == spec.name and not route.internal:
                endpoints.append(
                    Endpoint(
                        label=_label(spec, route.suffix),
                        url=f"{base_url}{route.path}",
                        description=route.description,
                    )
                )

    for spec in topology.services:
        for route in topology.routes:
            if route.service != spec.name or not route.internal:
                continue
            if not namespace:
                raise InvalidSpecError(
                    f"Internal route '{route.suffix}' needs a service discovery namespace"
                )
            endpoints.append(
                Endpoint(
                    label=_label(spec, route.suffix),
                    url=f"http://{spec.discovery_name}.{namespace}:{spec.container_port}{route.path}",
                    description=route.description,
                )
            )

    return tuple(endpoints)
