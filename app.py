#!/usr/bin/env python3
"""
CDK Python application for a monitored Spring Boot stack on ECS Fargate.

This application creates:
- VPC with public and private subnets
- ECS cluster with a Cloud Map private DNS namespace
- IAM task execution and task roles
- Spring Boot, Prometheus and Grafana Fargate services with log groups
- Security group rules derived from declared service access
- Application Load Balancers for externally exposed services
- CloudFormation outputs for every service endpoint
"""

import logging
import os

import aws_cdk as cdk

from observability_topology import TopologyError, default_manifest, load_manifest
from stacks import ObservabilityStack, StackConfig

logger = logging.getLogger(__name__)


def main() -> None:
    """Main function to create and synthesize the CDK app."""
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    app = cdk.App()
    config = StackConfig.from_context(app.node)

    try:
        manifest = load_manifest(config.manifest_path) if config.manifest_path else default_manifest()
        topology = manifest.build()
    except TopologyError as e:
        logger.error(f"Invalid service topology: {e}")
        raise

    for warning in topology.warnings:
        cdk.Annotations.of(app).add_warning(str(warning))

    ObservabilityStack(
        app,
        config.stack_name,
        topology=topology,
        config=config,
        env=cdk.Environment(
            account=config.account,
            region=config.region,
        ),
        description="Spring Boot application with Prometheus and Grafana on ECS Fargate",
    )

    app.synth()


if __name__ == "__main__":
    main()
