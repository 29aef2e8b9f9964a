"""
Unit tests for ServiceSpec validation.
"""

import dataclasses

import pytest

from observability_topology import InvalidSpecError, ServiceSpec


def make_spec(**overrides) -> ServiceSpec:
    fields = {
        "name": "app",
        "container_port": 8080,
        "health_check_path": "/health",
        "image": "example/app:latest",
    }
    fields.update(overrides)
    return ServiceSpec(**fields)


class TestServiceSpec:
    """Test suite for ServiceSpec."""

    def test_defaults(self) -> None:
        spec = make_spec()

        assert spec.display_name == "app"
        assert spec.cpu == 256
        assert spec.memory_mib == 512
        assert spec.desired_count == 1
        assert spec.exposed_externally is False
        assert spec.discovery_name is None

    def test_is_immutable(self) -> None:
        spec = make_spec(environment={"PORT": "8080"})

        with pytest.raises(dataclasses.FrozenInstanceError):
            spec.container_port = 9090  # type: ignore[misc]
        with pytest.raises(TypeError):
            spec.environment["PORT"] = "9090"  # type: ignore[index]

    def test_is_hashable(self) -> None:
        first = make_spec(environment={"PORT": "8080"})
        second = make_spec(environment={"PORT": "8080"})

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_environment_is_copied(self) -> None:
        environment = {"PORT": "8080"}
        spec = make_spec(environment=environment)
        environment["PORT"] = "9090"

        assert spec.environment["PORT"] == "8080"

    @pytest.mark.parametrize("name", ["", "App", "1app", "app_name", "a" * 29])
    def test_rejects_invalid_names(self, name: str) -> None:
        with pytest.raises(InvalidSpecError):
            make_spec(name=name)

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("container_port", 0),
            ("container_port", 70000),
            ("cpu", -256),
            ("memory_mib", 0),
            ("desired_count", 0),
            ("cpu", "256"),
            ("desired_count", True),
        ],
    )
    def test_rejects_invalid_sizing(self, field_name: str, value: object) -> None:
        with pytest.raises(InvalidSpecError, match=field_name):
            make_spec(**{field_name: value})

    def test_rejects_relative_health_check_path(self) -> None:
        with pytest.raises(InvalidSpecError, match="health_check_path"):
            make_spec(health_check_path="health")

    def test_rejects_non_string_environment(self) -> None:
        with pytest.raises(InvalidSpecError, match="environment"):
            make_spec(environment={"PORT": 8080})

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("display_name", 5),
            ("description", ["text"]),
            ("image", 5),
            ("image_directory", 5),
            ("discovery_name", 5),
            ("exposed_externally", "yes"),
            ("uses_task_role", 1),
        ],
    )
    def test_rejects_wrong_field_types(self, field_name: str, value: object) -> None:
        with pytest.raises(InvalidSpecError, match=field_name):
            make_spec(**{field_name: value})

    def test_requires_exactly_one_image_source(self) -> None:
        with pytest.raises(InvalidSpecError, match="image"):
            make_spec(image=None)
        with pytest.raises(InvalidSpecError, match="image"):
            make_spec(image_directory="containers/app")

    def test_invalid_spec_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            make_spec(container_port=-1)

    def test_to_dict_sorts_environment(self) -> None:
        spec = make_spec(environment={"B": "2", "A": "1"})

        assert list(spec.to_dict()["environment"]) == ["A", "B"]
