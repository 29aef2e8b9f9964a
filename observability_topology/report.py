"""
Report the endpoints of a deployed observability stack.

Reads the stack's CloudFormation outputs with boto3 and prints the ones
produced by the endpoint projection (every output whose key ends in URL).
"""

import argparse
import logging
import os
import sys
from typing import Any, List, Optional

import boto3
from botocore.exceptions import ClientError

from .outputs import Endpoint

logger = logging.getLogger(__name__)

DEFAULT_STACK_NAME = "SpringBootObservabilityStack"


def fetch_endpoints(stack_name: str, cloudformation_client: Optional[Any] = None) -> List[Endpoint]:
    """
    Fetch the endpoint outputs of a deployed stack.

    Args:
        stack_name: Name of the CloudFormation stack
        cloudformation_client: boto3 CloudFormation client (default: a new client)

    Returns:
        Endpoints in the order CloudFormation reports them
    """
    client = cloudformation_client or boto3.client("cloudformation")
    response = client.describe_stacks(StackName=stack_name)
    stacks = response.get("Stacks", [])
    if not stacks:
        return []

    endpoints = []
    for output in stacks[0].get("Outputs", []):
        key = output.get("OutputKey", "")
        if not key.endswith("URL"):
            continue
        endpoints.append(
            Endpoint(
                label=key,
                url=output.get("OutputValue", ""),
                description=output.get("Description", ""),
            )
        )
    return endpoints


def format_endpoints(endpoints: List[Endpoint]) -> str:
    if not endpoints:
        return "No endpoints found"
    width = max(len(endpoint.label) for endpoint in endpoints)
    lines = []
    for endpoint in endpoints:
        line = f"{endpoint.label.ljust(width)}  {endpoint.url}"
        if endpoint.description:
            line += f"  ({endpoint.description})"
        lines.append(line)
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Print the endpoints of a deployed stack."""
    parser = argparse.ArgumentParser(description="List the endpoints of a deployed observability stack")
    parser.add_argument(
        "--stack-name",
        default=os.environ.get("STACK_NAME", DEFAULT_STACK_NAME),
        help="CloudFormation stack name",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    try:
        endpoints = fetch_endpoints(args.stack_name)
    except ClientError as e:
        logger.error(f"Unable to describe stack {args.stack_name}: {e}")
        return 1

    print(format_endpoints(endpoints))
    return 0


if __name__ == "__main__":
    sys.exit(main())
