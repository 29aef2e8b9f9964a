"""
Stack configuration read from CDK context and the environment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from constructs import Node


def _context_int(node: Node, key: str, default: int) -> int:
    value = node.try_get_context(key)
    return int(value) if value is not None else default


@dataclass(frozen=True)
class StackConfig:
    """
    Tunable settings for the observability stack.

    Attributes:
        stack_name: CloudFormation stack name
        cluster_name: ECS cluster name
        namespace_name: Cloud Map private DNS namespace
        max_azs: Number of availability zones for the VPC
        nat_gateways: Number of NAT gateways
        log_retention_days: CloudWatch log retention for container logs
        manifest_path: JSON manifest to load instead of the built-in one
        account: Target AWS account
        region: Target AWS region
    """

    stack_name: str = "SpringBootObservabilityStack"
    cluster_name: str = "observability-cluster"
    namespace_name: str = "local"
    max_azs: int = 2
    nat_gateways: int = 1
    log_retention_days: int = 7
    manifest_path: Optional[str] = None
    account: Optional[str] = None
    region: str = "us-east-1"

    @classmethod
    def from_context(cls, node: Node) -> "StackConfig":
        """Read settings from CDK context, falling back to environment variables."""
        defaults = cls()
        return cls(
            stack_name=node.try_get_context("stack_name") or defaults.stack_name,
            cluster_name=node.try_get_context("cluster_name") or defaults.cluster_name,
            namespace_name=node.try_get_context("namespace_name") or defaults.namespace_name,
            max_azs=_context_int(node, "max_azs", defaults.max_azs),
            nat_gateways=_context_int(node, "nat_gateways", defaults.nat_gateways),
            log_retention_days=_context_int(node, "log_retention_days", defaults.log_retention_days),
            manifest_path=node.try_get_context("manifest") or os.environ.get("OBSERVABILITY_MANIFEST"),
            account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
            region=os.environ.get("CDK_DEFAULT_REGION") or defaults.region,
        )
