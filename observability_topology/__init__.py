"""
Topology model for the Spring Boot observability stack.

This package holds the pure, deterministic part of the CDK application:
service declarations, network access derivation, resource ordering and
endpoint projection. The CDK stack in ``stacks`` consumes its output.
"""

from .builder import FOUNDATION_STEPS, ResourceStep, Tier, Topology, build_topology, order_services
from .errors import (
    CyclicDependencyError,
    DanglingEdgeError,
    InvalidSpecError,
    SuspiciousEdgeWarning,
    TopologyError,
)
from .manifest import Manifest, default_manifest, load_manifest, parse_manifest
from .network_policy import AccessDeclaration, AccessEdge, derive_access_edges
from .outputs import Endpoint, EndpointRoute, project_endpoints, validate_routes
from .service_spec import ServiceSpec

__all__ = [
    "AccessDeclaration",
    "AccessEdge",
    "CyclicDependencyError",
    "DanglingEdgeError",
    "Endpoint",
    "EndpointRoute",
    "FOUNDATION_STEPS",
    "InvalidSpecError",
    "Manifest",
    "ResourceStep",
    "ServiceSpec",
    "SuspiciousEdgeWarning",
    "Tier",
    "Topology",
    "TopologyError",
    "build_topology",
    "default_manifest",
    "derive_access_edges",
    "load_manifest",
    "order_services",
    "parse_manifest",
    "project_endpoints",
    "validate_routes",
]
