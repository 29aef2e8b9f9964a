"""
Service manifests for the observability stack.

A manifest bundles the service declarations, access declarations and
endpoint routes that feed the topology builder. The built-in manifest
describes a Spring Boot application scraped by Prometheus and visualized
with Grafana; other layouts can be supplied as JSON files.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .builder import Topology, build_topology
from .errors import InvalidSpecError
from .network_policy import AccessDeclaration
from .outputs import EndpointRoute
from .service_spec import ServiceSpec

logger = logging.getLogger(__name__)

CONTAINERS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "containers")


@dataclass(frozen=True)
class Manifest:
    """Declarations that describe one stack."""

    services: Tuple[ServiceSpec, ...]
    access: Tuple[AccessDeclaration, ...] = ()
    routes: Tuple[EndpointRoute, ...] = ()

    def build(self) -> Topology:
        return build_topology(self.services, self.access, self.routes)


def default_manifest() -> Manifest:
    """Return the Spring Boot, Prometheus and Grafana stack."""
    services = (
        ServiceSpec(
            name="spring-boot-app",
            display_name="SpringBoot",
            container_port=8080,
            health_check_path="/actuator/health",
            cpu=256,
            memory_mib=512,
            desired_count=2,
            environment={
                "SPRING_PROFILES_ACTIVE": "prod",
                "SERVER_PORT": "8080",
            },
            exposed_externally=True,
            image_directory=os.path.join(CONTAINERS_DIR, "spring-boot-app"),
            discovery_name="springboot",
            uses_task_role=True,
            description="Spring Boot Application URL",
        ),
        ServiceSpec(
            name="prometheus",
            display_name="Prometheus",
            container_port=9090,
            health_check_path="/-/healthy",
            cpu=256,
            memory_mib=512,
            desired_count=1,
            image_directory=os.path.join(CONTAINERS_DIR, "prometheus"),
            discovery_name="prometheus",
        ),
        ServiceSpec(
            name="grafana",
            display_name="Grafana",
            container_port=3000,
            health_check_path="/api/health",
            cpu=512,
            memory_mib=1024,
            desired_count=1,
            environment={
                "GF_SECURITY_ADMIN_USER": "admin",
                "GF_SECURITY_ADMIN_PASSWORD": "admin123",
                "GF_USERS_ALLOW_SIGN_UP": "false",
                "GF_SERVER_ROOT_URL": "http://localhost:3000",
            },
            exposed_externally=True,
            image="grafana/grafana:latest",
            description="Grafana Dashboard (admin/admin123)",
        ),
    )
    access = (
        AccessDeclaration(
            source="prometheus",
            target="spring-boot-app",
            port=8080,
            reason="Prometheus scrapes Spring Boot metrics",
        ),
        AccessDeclaration(
            source="grafana",
            target="prometheus",
            port=9090,
            reason="Grafana queries Prometheus",
        ),
    )
    routes = (
        EndpointRoute(
            service="spring-boot-app",
            suffix="Metrics",
            path="/actuator/prometheus",
            description="Spring Boot Prometheus Metrics",
        ),
        EndpointRoute(
            service="prometheus",
            suffix="DataSource",
            description="Use this URL in Grafana for Prometheus datasource",
            internal=True,
        ),
    )
    return Manifest(services=services, access=access, routes=routes)


def _build_entries(kind: type, entries: Any, section: str) -> List[Any]:
    if not isinstance(entries, list):
        raise InvalidSpecError(f"Manifest section '{section}' must be a list")
    built = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise InvalidSpecError(f"Manifest entry {section}[{index}] must be an object")
        try:
            built.append(kind(**entry))
        except TypeError as e:
            raise InvalidSpecError(f"Manifest entry {section}[{index}] is malformed: {e}") from e
    return built


def _resolve_image_directory(entry: Any, base_dir: str) -> Any:
    if not isinstance(entry, dict) or not entry.get("image_directory"):
        return entry
    directory = entry["image_directory"]
    if not isinstance(directory, str):
        raise InvalidSpecError(
            f"Service {entry.get('name')!r}: image_directory must be a string, got {directory!r}"
        )
    return dict(entry, image_directory=os.path.join(base_dir, directory))


def parse_manifest(data: Dict[str, Any], base_dir: str = ".") -> Manifest:
    """
    Build a manifest from its dictionary form.

    Relative ``image_directory`` entries are resolved against ``base_dir``.
    """
    if not isinstance(data, dict) or "services" not in data:
        raise InvalidSpecError("Manifest must be an object with a 'services' list")

    service_entries = data["services"]
    if isinstance(service_entries, list):
        service_entries = [_resolve_image_directory(entry, base_dir) for entry in service_entries]

    return Manifest(
        services=tuple(_build_entries(ServiceSpec, service_entries, "services")),
        access=tuple(_build_entries(AccessDeclaration, data.get("access", []), "access")),
        routes=tuple(_build_entries(EndpointRoute, data.get("routes", []), "routes")),
    )


def load_manifest(path: str) -> Manifest:
    """Load a manifest from a JSON file."""
    logger.info(f"Loading service manifest from {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidSpecError(f"Manifest {path} is not valid JSON: {e}") from e
    return parse_manifest(data, base_dir=os.path.dirname(os.path.abspath(path)))
