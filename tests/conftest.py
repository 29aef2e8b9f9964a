"""Shared fixtures for the observability stack tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from observability_topology import AccessDeclaration, ServiceSpec  # noqa: E402


@pytest.fixture
def app_spec() -> ServiceSpec:
    return ServiceSpec(
        name="app",
        container_port=8080,
        health_check_path="/health",
        exposed_externally=True,
        image="example/app:latest",
    )


@pytest.fixture
def scraper_spec() -> ServiceSpec:
    return ServiceSpec(
        name="scraper",
        container_port=9090,
        health_check_path="/-/healthy",
        image="prom/prometheus:latest",
        discovery_name="scraper",
    )


@pytest.fixture
def dashboard_spec() -> ServiceSpec:
    return ServiceSpec(
        name="dashboard",
        container_port=3000,
        health_check_path="/api/health",
        cpu=512,
        memory_mib=1024,
        exposed_externally=True,
        image="grafana/grafana:latest",
    )


@pytest.fixture
def scrape_declaration() -> AccessDeclaration:
    return AccessDeclaration(source="scraper", target="app", port=8080, reason="scrape")
