"""
Observability Stack for a Spring Boot application on ECS Fargate

This stack provisions the resources described by a Topology: a VPC, an ECS
cluster with a Cloud Map private DNS namespace, shared IAM roles, and for
each declared service a log group, task definition and Fargate service.
Access edges become security group rules, externally exposed services get
an internet-facing Application Load Balancer, and every projected endpoint
is published as a CloudFormation output.
"""

import logging
from typing import Dict, Optional, Tuple

import aws_cdk as cdk
from aws_cdk import (
    CfnOutput,
    Duration,
    RemovalPolicy,
    Stack,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
    aws_logs as logs,
    aws_servicediscovery as servicediscovery,
)
from aws_cdk.aws_ecr_assets import DockerImageAsset
from constructs import Construct

from observability_topology import Endpoint, ServiceSpec, Tier, Topology, project_endpoints

from .config import StackConfig

logger = logging.getLogger(__name__)

RETENTION_BY_DAYS = {
    1: logs.RetentionDays.ONE_DAY,
    3: logs.RetentionDays.THREE_DAYS,
    5: logs.RetentionDays.FIVE_DAYS,
    7: logs.RetentionDays.ONE_WEEK,
    14: logs.RetentionDays.TWO_WEEKS,
    30: logs.RetentionDays.ONE_MONTH,
    60: logs.RetentionDays.TWO_MONTHS,
    90: logs.RetentionDays.THREE_MONTHS,
    180: logs.RetentionDays.SIX_MONTHS,
    365: logs.RetentionDays.ONE_YEAR,
}


class ObservabilityStack(Stack):
    """
    CDK Stack that provisions a monitored application topology.

    Resources are created tier by tier following ``topology.creation_order``:
    foundation resources first, then services, then load balancer
    attachments. Network access rules are applied once every service exists.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        topology: Topology,
        config: Optional[StackConfig] = None,
        **kwargs
    ) -> None:
        """
        Initialize the Observability Stack.

        Args:
            scope: The scope in which to define this construct
            construct_id: The scoped construct ID
            topology: The validated service topology to provision
            config: Stack settings (default: StackConfig())
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.topology = topology
        self.config = config or StackConfig()

        if self.config.log_retention_days not in RETENTION_BY_DAYS:
            raise ValueError(
                f"Unsupported log retention of {self.config.log_retention_days} days, "
                f"choose one of {sorted(RETENTION_BY_DAYS)}"
            )

        self.vpc: Optional[ec2.Vpc] = None
        self.cluster: Optional[ecs.Cluster] = None
        self.task_execution_role: Optional[iam.Role] = None
        self.task_role: Optional[iam.Role] = None
        self.log_groups: Dict[str, logs.LogGroup] = {}
        self.services: Dict[str, ecs.FargateService] = {}
        self.load_balancers: Dict[str, elbv2.ApplicationLoadBalancer] = {}

        foundation = {
            "vpc": self._create_vpc,
            "cluster": self._create_ecs_cluster,
            "roles": self._create_iam_roles,
        }
        for step in topology.steps(Tier.FOUNDATION):
            foundation[step.name]()

        for step in topology.steps(Tier.SERVICE):
            self.services[step.name] = self._create_service(topology.service(step.name))

        self._apply_network_policy()

        for step in topology.steps(Tier.ATTACHMENT):
            self.load_balancers[step.name] = self._create_load_balancer(topology.service(step.name))

        self.endpoints = self._create_outputs()

        self._add_tags()

    def _create_vpc(self) -> None:
        """Create the VPC with public and private subnets."""
        self.vpc = ec2.Vpc(
            self,
            "ObservabilityVpc",
            max_azs=self.config.max_azs,
            nat_gateways=self.config.nat_gateways,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=24,
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=24,
                ),
            ],
        )

    def _create_ecs_cluster(self) -> None:
        """Create the ECS cluster with its Cloud Map namespace."""
        self.cluster = ecs.Cluster(
            self,
            "ObservabilityCluster",
            vpc=self.vpc,
            cluster_name=self.config.cluster_name,
            default_cloud_map_namespace=ecs.CloudMapNamespaceOptions(
                name=self.config.namespace_name,
                type=servicediscovery.NamespaceType.DNS_PRIVATE,
            ),
        )

    def _create_iam_roles(self) -> None:
        """Create the shared task execution role and application task role."""
        self.task_execution_role = iam.Role(
            self,
            "TaskExecutionRole",
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AmazonECSTaskExecutionRolePolicy"
                )
            ],
        )

        self.task_role = iam.Role(
            self,
            "TaskRole",
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com"),
        )

    def _container_image(self, spec: ServiceSpec) -> ecs.ContainerImage:
        if spec.image_directory:
            asset = DockerImageAsset(
                self,
                f"{spec.display_name}Image",
                directory=spec.image_directory,
            )
            return ecs.ContainerImage.from_docker_image_asset(asset)
        return ecs.ContainerImage.from_registry(spec.image)

    def _create_service(self, spec: ServiceSpec) -> ecs.FargateService:
        """
        Create the log group, task definition and Fargate service for one service.

        Args:
            spec: The service to provision

        Returns:
            ecs.FargateService: The created service
        """
        prefix = spec.display_name

        log_group = logs.LogGroup(
            self,
            f"{prefix}LogGroup",
            log_group_name=f"/ecs/{spec.name}",
            retention=RETENTION_BY_DAYS[self.config.log_retention_days],
            removal_policy=RemovalPolicy.DESTROY,
        )
        self.log_groups[spec.name] = log_group

        task_definition = ecs.FargateTaskDefinition(
            self,
            f"{prefix}TaskDef",
            memory_limit_mib=spec.memory_mib,
            cpu=spec.cpu,
            execution_role=self.task_execution_role,
            task_role=self.task_role if spec.uses_task_role else None,
        )

        task_definition.add_container(
            f"{prefix}Container",
            image=self._container_image(spec),
            logging=ecs.LogDrivers.aws_logs(
                stream_prefix=spec.name,
                log_group=log_group,
            ),
            environment=dict(spec.environment) or None,
            port_mappings=[
                ecs.PortMapping(
                    container_port=spec.container_port,
                    protocol=ecs.Protocol.TCP,
                )
            ],
        )

        cloud_map_options = None
        if spec.discovery_name:
            cloud_map_options = ecs.CloudMapOptions(
                name=spec.discovery_name,
                dns_record_type=servicediscovery.DnsRecordType.A,
            )

        service = ecs.FargateService(
            self,
            f"{prefix}Service",
            cluster=self.cluster,
            task_definition=task_definition,
            desired_count=spec.desired_count,
            assign_public_ip=False,
            vpc_subnets=ec2.SubnetSelection(
                subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
            ),
            cloud_map_options=cloud_map_options,
        )

        logger.debug(f"Defined Fargate service {spec.name} on port {spec.container_port}")
        return service

    def _apply_network_policy(self) -> None:
        """Turn every access edge into a security group rule."""
        for edge in self.topology.edges:
            source = self.services[edge.source]
            port = ec2.Port.tcp(edge.port)
            if edge.is_self_edge:
                source.connections.allow_internally(port, edge.reason or None)
            else:
                source.connections.allow_to(self.services[edge.target], port, edge.reason or None)

    def _create_load_balancer(self, spec: ServiceSpec) -> elbv2.ApplicationLoadBalancer:
        """
        Create an internet-facing ALB in front of an exposed service.

        Args:
            spec: The exposed service

        Returns:
            elbv2.ApplicationLoadBalancer: The created load balancer
        """
        prefix = spec.display_name

        alb = elbv2.ApplicationLoadBalancer(
            self,
            f"{prefix}ALB",
            vpc=self.vpc,
            internet_facing=True,
            load_balancer_name=f"{spec.name}-alb",
        )

        listener = alb.add_listener(
            f"{prefix}Listener",
            port=80,
            open=True,
        )

        listener.add_targets(
            f"{prefix}Target",
            port=spec.container_port,
            protocol=elbv2.ApplicationProtocol.HTTP,
            targets=[self.services[spec.name]],
            health_check=elbv2.HealthCheck(
                path=spec.health_check_path,
                interval=Duration.seconds(30),
                timeout=Duration.seconds(5),
                healthy_threshold_count=2,
                unhealthy_threshold_count=3,
            ),
        )

        return alb

    def _create_outputs(self) -> Tuple[Endpoint, ...]:
        """Create a CloudFormation output for every projected endpoint."""
        hosts = {
            name: alb.load_balancer_dns_name
            for name, alb in self.load_balancers.items()
        }
        endpoints = project_endpoints(self.topology, hosts, namespace=self.config.namespace_name)

        for endpoint in endpoints:
            CfnOutput(
                self,
                endpoint.label,
                value=endpoint.url,
                description=endpoint.description,
            )

        return endpoints

    def _add_tags(self) -> None:
        """Tag every resource in the stack."""
        cdk.Tags.of(self).add("Project", "spring-boot-observability")
        cdk.Tags.of(self).add("ManagedBy", "CDK")
