"""Tests for the command registry and path resolver (core/registry.py, core/resolver.py).

All tests are pure — registries are built in memory per test.
"""

from __future__ import annotations

import pytest

from cli_maker.core.models import CommandNode, ParamSpec, ParamType
from cli_maker.core.registry import CommandRegistry
from cli_maker.core.resolver import is_flag, resolve_command_path
from cli_maker.exceptions import RegistryError, UnknownCommandError


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _registry() -> CommandRegistry:
    staging = CommandNode(
        "staging",
        "Deploy to staging",
        params=[ParamSpec("version", type=ParamType.TEXT, required=True)],
    )
    production = CommandNode(
        "production",
        "Deploy to production",
        subcommands=[CommandNode("eu", "EU region"), CommandNode("us", "US region")],
    )
    return CommandRegistry(
        [
            CommandNode("deploy", "Deploy things", subcommands=[staging, production]),
            CommandNode(
                "project",
                "Project tools",
                params=[ParamSpec("name")],
                subcommands=[CommandNode("init", "Create a project")],
            ),
            CommandNode("status", "Show status"),
        ]
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_preserves_registration_order(self) -> None:
        assert [c.name for c in _registry()] == ["deploy", "project", "status"]

    def test_duplicate_top_level_rejected(self) -> None:
        registry = _registry()
        with pytest.raises(RegistryError, match="already registered"):
            registry.add(CommandNode("status"))

    def test_find(self) -> None:
        registry = _registry()
        assert registry.find("status") is not None
        assert registry.find("nope") is None

    def test_find_path_nested(self) -> None:
        node = _registry().find_path(["deploy", "production", "eu"])
        assert node is not None
        assert node.description == "EU region"

    def test_find_path_through_leaf_fails(self) -> None:
        assert _registry().find_path(["status", "extra"]) is None

    def test_find_path_empty(self) -> None:
        assert _registry().find_path([]) is None

    def test_contains_and_len(self) -> None:
        registry = _registry()
        assert "deploy" in registry
        assert "staging" not in registry
        assert len(registry) == 3

    def test_describe_lists_first_level_children(self) -> None:
        lines = _registry().describe()
        assert "deploy: Deploy things" in lines
        assert "  deploy staging: Deploy to staging" in lines

    def test_independent_instances(self) -> None:
        a = CommandRegistry([CommandNode("x")])
        b = CommandRegistry()
        assert "x" in a
        assert "x" not in b


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class TestResolver:
    def test_is_flag(self) -> None:
        assert is_flag("--host")
        assert not is_flag("-h")
        assert not is_flag("host")

    def test_nested_path_with_flag(self) -> None:
        res = resolve_command_path(_registry(), ["deploy", "staging", "--version=1.0.0"])
        assert res.node.name == "staging"
        assert res.path == ("deploy", "staging")
        assert res.residual == ("--version=1.0.0",)

    def test_backtracks_to_parent(self) -> None:
        res = resolve_command_path(_registry(), ["project", "unknown"])
        assert res.node.name == "project"
        assert res.path == ("project",)
        assert res.residual == ("unknown",)

    def test_backtrack_keeps_following_tokens(self) -> None:
        res = resolve_command_path(_registry(), ["project", "unknown", "--name", "x"])
        assert res.residual == ("unknown", "--name", "x")

    def test_three_levels(self) -> None:
        res = resolve_command_path(_registry(), ["deploy", "production", "us"])
        assert res.node.name == "us"
        assert res.residual == ()

    def test_leaf_stops_descent(self) -> None:
        res = resolve_command_path(_registry(), ["status", "extra"])
        assert res.node.name == "status"
        assert res.residual == ("extra",)

    def test_parent_invoked_directly(self) -> None:
        res = resolve_command_path(_registry(), ["deploy"])
        assert res.node.name == "deploy"
        assert res.residual == ()

    def test_flag_ends_descent(self) -> None:
        res = resolve_command_path(_registry(), ["project", "--name", "init"])
        assert res.node.name == "project"
        assert res.residual == ("--name", "init")

    def test_unknown_top_level(self) -> None:
        with pytest.raises(UnknownCommandError) as exc_info:
            resolve_command_path(_registry(), ["nope"])
        assert exc_info.value.command == "nope"
        assert exc_info.value.hint is not None
        assert "deploy: Deploy things" in exc_info.value.hint

    def test_leading_flag_is_unknown(self) -> None:
        with pytest.raises(UnknownCommandError):
            resolve_command_path(_registry(), ["--host", "x"])

    def test_empty_tokens_is_unknown(self) -> None:
        with pytest.raises(UnknownCommandError):
            resolve_command_path(_registry(), [])

    def test_empty_registry_has_no_hint(self) -> None:
        with pytest.raises(UnknownCommandError) as exc_info:
            resolve_command_path(CommandRegistry(), ["x"])
        assert exc_info.value.hint is None

    def test_idempotent(self) -> None:
        registry = _registry()
        tokens = ["deploy", "production", "mars", "--x"]
        assert resolve_command_path(registry, tokens) == resolve_command_path(registry, tokens)

    def test_path_plus_residual_is_input(self) -> None:
        tokens = ["deploy", "production", "mars", "--x"]
        res = resolve_command_path(_registry(), tokens)
        assert list(res.path) + list(res.residual) == tokens
