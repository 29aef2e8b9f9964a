"""
Integration tests for a deployed observability stack.

These tests validate the outputs of a stack deployed to a real AWS account.
Set STACK_NAME to the deployed stack name to run them.
"""

import os

import boto3
import pytest
from botocore.exceptions import ClientError

from observability_topology.report import fetch_endpoints


class TestDeployedEndpoints:
    """Integration test suite for the deployed stack outputs."""

    def setup_method(self):
        """Set up test fixtures before each test method."""
        self.stack_name = os.environ.get("STACK_NAME")
        if not self.stack_name:
            pytest.skip("STACK_NAME environment variable not set")
        self.cloudformation = boto3.client("cloudformation")

    def test_endpoint_outputs_exist(self):
        """Test that every expected endpoint is exported."""
        try:
            endpoints = fetch_endpoints(self.stack_name, self.cloudformation)
        except ClientError as e:
            pytest.fail(f"Describing stack {self.stack_name} failed: {e}")

        labels = {endpoint.label for endpoint in endpoints}
        assert {"SpringBootURL", "SpringBootMetricsURL", "GrafanaURL", "PrometheusDataSourceURL"} <= labels

    def test_services_are_running(self):
        """Test that the ECS services reached their desired counts."""
        ecs = boto3.client("ecs")
        cluster = os.environ.get("CLUSTER_NAME", "observability-cluster")

        service_arns = ecs.list_services(cluster=cluster)["serviceArns"]
        assert len(service_arns) == 3

        services = ecs.describe_services(cluster=cluster, services=service_arns)["services"]
        for service in services:
            assert service["runningCount"] == service["desiredCount"]
