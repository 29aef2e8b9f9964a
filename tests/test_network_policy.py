"""
Unit tests for access edge derivation.
"""

import pytest

from observability_topology import (
    AccessDeclaration,
    DanglingEdgeError,
    InvalidSpecError,
    SuspiciousEdgeWarning,
    derive_access_edges,
)

SERVICES = ("app", "scraper", "dashboard")


class TestDeriveAccessEdges:
    """Test suite for derive_access_edges."""

    def test_single_declaration(self, scrape_declaration: AccessDeclaration) -> None:
        edges, warnings = derive_access_edges([scrape_declaration], SERVICES)

        assert [edge.key for edge in edges] == [("scraper", "app", 8080)]
        assert edges[0].reason == "scrape"
        assert warnings == ()

    def test_duplicates_keep_first_reason(self) -> None:
        declarations = [
            AccessDeclaration("scraper", "app", 8080, "first"),
            AccessDeclaration("dashboard", "scraper", 9090, "query"),
            AccessDeclaration("scraper", "app", 8080, "second"),
        ]

        edges, _ = derive_access_edges(declarations, SERVICES)

        assert [edge.key for edge in edges] == [
            ("scraper", "app", 8080),
            ("dashboard", "scraper", 9090),
        ]
        assert edges[0].reason == "first"

    def test_same_pair_on_different_ports_is_kept(self) -> None:
        declarations = [
            AccessDeclaration("scraper", "app", 8080, "metrics"),
            AccessDeclaration("scraper", "app", 8081, "management"),
        ]

        edges, _ = derive_access_edges(declarations, SERVICES)

        assert len(edges) == 2

    def test_one_edge_per_distinct_triple(self) -> None:
        declarations = [
            AccessDeclaration(source, target, port)
            for source, target, port in [
                ("scraper", "app", 8080),
                ("dashboard", "scraper", 9090),
                ("scraper", "app", 8080),
                ("dashboard", "scraper", 9090),
                ("dashboard", "app", 8080),
            ]
        ]

        edges, _ = derive_access_edges(declarations, SERVICES)

        keys = [edge.key for edge in edges]
        assert len(keys) == len(set(keys)) == 3

    @pytest.mark.parametrize(
        "declaration, missing",
        [
            (AccessDeclaration("scraper", "database", 5432), "database"),
            (AccessDeclaration("worker", "app", 8080), "worker"),
        ],
    )
    def test_dangling_edge(self, declaration: AccessDeclaration, missing: str) -> None:
        with pytest.raises(DanglingEdgeError) as excinfo:
            derive_access_edges([declaration], SERVICES)

        assert excinfo.value.missing == missing

    def test_self_edge_is_kept_and_flagged_once(self) -> None:
        declarations = [
            AccessDeclaration("app", "app", 8080, "loopback"),
            AccessDeclaration("app", "app", 8080, "loopback again"),
        ]

        edges, warnings = derive_access_edges(declarations, SERVICES)

        assert [edge.key for edge in edges] == [("app", "app", 8080)]
        assert len(warnings) == 1
        assert isinstance(warnings[0], SuspiciousEdgeWarning)
        assert warnings[0].service == "app"
        assert isinstance(warnings[0], UserWarning)

    @pytest.mark.parametrize("port", [0, 65536, "8080", True])
    def test_invalid_port(self, port: object) -> None:
        with pytest.raises(InvalidSpecError):
            derive_access_edges([AccessDeclaration("scraper", "app", port)], SERVICES)  # type: ignore[arg-type]
