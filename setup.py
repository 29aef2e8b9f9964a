"""
Setup configuration for the Spring Boot observability CDK application.

This setup.py file configures the Python package for the Observability Stack,
including metadata, dependencies, and development tools.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="spring-boot-observability-stack",
    version="1.0.0",
    description="AWS CDK Python application for a Spring Boot service monitored by Prometheus and Grafana on ECS Fargate",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "integration_tests", "integration_tests.*"]),
    py_modules=["app"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Systems Administration",
        "Typing :: Typed",
    ],
    python_requires=">=3.8",
    install_requires=[
        "aws-cdk-lib>=2.100.0,<3.0.0",
        "constructs>=10.0.0,<11.0.0",
        "boto3>=1.26.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "spring-boot-observability-stack=app:main",
            "observability-endpoints=observability_topology.report:main",
        ],
    },
    keywords=[
        "aws",
        "cdk",
        "ecs",
        "fargate",
        "prometheus",
        "grafana",
        "spring-boot",
        "observability",
        "service-discovery",
        "load-balancer",
    ],
    include_package_data=True,
    zip_safe=False,
)
