"""
Tests for the capability tree builder in dualmode.tree.
"""

import pytest

from dualmode.exceptions import ArgumentError
from dualmode.models import CapabilityTree
from dualmode.tree import MANIFEST_ATTR, build, declare
from tests.mocks.consumers import Agent, Client, ExtendedClient, Kv

CLIENT_METHODS = {"status", "echo", "fail", "explode", "twice", "later", "version", "leader"}


def test_build_discovers_lowercase_functions_only():
    """Test that methods are exactly the lowercase-leading functions."""
    tree = build(Client)

    assert tree.name == "Client"
    assert tree.definition is Client
    assert set(tree.methods) == CLIENT_METHODS
    assert tree.methods["status"].value is Client.status


def test_build_discovers_uppercase_classes_only():
    """Test that objects are exactly the uppercase-leading nested classes."""
    tree = build(Client)

    assert set(tree.objects) == {"Kv", "Agent"}
    assert "MAX_RETRIES" not in tree.objects


def test_build_recurses_into_nested_definitions():
    """Test that nested definitions get their own subtrees."""
    tree = build(Client)

    assert set(tree.objects["Kv"].methods) == {"get", "set", "keys"}
    agent = tree.objects["Agent"]
    assert agent.name == "Agent"
    assert set(agent.methods) == {"members"}
    assert set(agent.objects) == {"Service"}
    assert set(agent.objects["Service"].methods) == {"list"}
    assert agent.objects["Service"].objects == {}


def test_build_reads_modes_from_meta():
    """Test that the meta map overrides the default callback mode."""
    tree = build(Client)

    assert tree.methods["status"].mode == "callback"
    assert tree.methods["status"].is_callback
    assert tree.methods["version"].mode == "sync"
    assert tree.methods["leader"].mode == "promise"
    assert not tree.methods["leader"].is_callback


def test_build_includes_inherited_operations():
    """Test that operations defined on base classes are discovered."""
    tree = build(ExtendedClient)

    assert set(tree.methods) == CLIENT_METHODS | {"health"}
    assert tree.methods["version"].mode == "sync"


def test_build_with_name():
    """Test that the two-argument form names the fresh tree."""
    tree = build(Kv, "Store")

    assert tree.name == "Store"
    assert set(tree.methods) == {"get", "set", "keys"}


def test_build_populates_given_tree():
    """Test that the three-argument form fills the accumulator in place."""
    accumulator = CapabilityTree(name="Root")

    tree = build(Agent, "Root", accumulator)

    assert tree is accumulator
    assert set(accumulator.methods) == {"members"}
    assert set(accumulator.objects) == {"Service"}


def test_build_does_not_mutate_definition():
    """Test that building leaves the class untouched."""
    before = dict(vars(Client))

    build(Client)

    assert dict(vars(Client)) == before


@pytest.mark.parametrize(
    "args",
    [
        (),
        (Client, "Client", CapabilityTree(name="Client"), "extra"),
    ],
)
def test_build_rejects_invalid_arity(args):
    """Test that build only accepts one to three arguments."""
    with pytest.raises(ArgumentError):
        build(*args)


def test_build_rejects_non_class_definition():
    """Test that build requires a class."""
    with pytest.raises(ArgumentError):
        build(Client())


def test_argument_error_is_type_error():
    """Test that ArgumentError can be caught as a TypeError."""
    with pytest.raises(TypeError):
        build()


def test_walk_yields_dotted_paths():
    """Test that walk visits every node depth first."""
    tree = build(Client)

    paths = [path for path, _ in tree.walk()]

    assert paths == ["Client", "Client.Kv", "Client.Agent", "Client.Agent.Service"]


def test_declare_replaces_casing_discovery():
    """Test that a manifest overrides name-based discovery."""

    @declare(methods={"Fetch": "callback", "close": "sync"}, objects={"store": Kv})
    class Declared:
        Ignored = Agent

        def Fetch(self, callback):
            return callback(None, "fetched")

        def close(self):
            return None

        def hidden(self, callback):
            return callback(None, "hidden")

    tree = build(Declared)

    assert set(tree.methods) == {"Fetch", "close"}
    assert tree.methods["close"].mode == "sync"
    assert set(tree.objects) == {"store"}
    assert set(tree.objects["store"].methods) == {"get", "set", "keys"}
    assert getattr(Declared, MANIFEST_ATTR).methods == {"Fetch": "callback", "close": "sync"}


def test_declare_accepts_method_names():
    """Test that a plain list of names defaults to callback mode."""

    @declare(methods=["ping"])
    class Pinger:
        def ping(self, callback):
            return callback(None, "pong")

    assert build(Pinger).methods["ping"].mode == "callback"


def test_declare_manifest_is_not_inherited():
    """Test that subclasses of a declared class fall back to casing discovery."""

    @declare(methods=["ping"])
    class Pinger:
        def ping(self, callback):
            return callback(None, "pong")

        def other(self, callback):
            return callback(None, "other")

    class SubPinger(Pinger):
        pass

    assert set(build(Pinger).methods) == {"ping"}
    assert set(build(SubPinger).methods) == {"ping", "other"}


def test_declare_rejects_unknown_method():
    """Test that listing a non-function raises ArgumentError."""
    with pytest.raises(ArgumentError):

        @declare(methods=["missing"])
        class Broken:
            pass


def test_declare_rejects_non_class_object():
    """Test that a nested capability must be a class."""
    with pytest.raises(ArgumentError):

        @declare(objects={"store": Kv()})
        class Broken:
            pass


def test_build_ignores_non_mapping_meta_entries():
    """Test that a meta entry without a mapping falls back to callback mode."""

    class Loose:
        meta = {"ping": "sync", "pong": None}

        def ping(self, callback):
            return callback(None, "ping")

        def pong(self, callback):
            return callback(None, "pong")

    tree = build(Loose)

    assert tree.methods["ping"].mode == "callback"
    assert tree.methods["pong"].mode == "callback"


def test_build_returns_independent_trees():
    """Test that editing a returned tree does not leak into later builds."""
    first = build(Client)
    first.methods.pop("status")
    first.objects["Kv"].methods.clear()

    second = build(Client)

    assert "status" in second.methods
    assert set(second.objects["Kv"].methods) == {"get", "set", "keys"}
    assert second.methods is not first.methods
