"""
Stack modules for the Spring Boot observability application

This package contains the CDK stack that provisions a service topology
on ECS Fargate, and the configuration it reads from CDK context.
"""

from .config import StackConfig
from .observability_stack import ObservabilityStack

__all__ = [
    "ObservabilityStack",
    "StackConfig",
]
