"""Shared pytest fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory):
    """Run each test against default configuration with no DEPGRAPH_ env vars.

    The working directory is an empty repository so that no .depgraph.toml
    is discovered from the checkout running the tests.
    """
    from depgraph.config import reset_config

    for name in list(os.environ):
        if name.startswith("DEPGRAPH_"):
            monkeypatch.delenv(name)
    cwd = tmp_path_factory.mktemp("cwd")
    (cwd / ".git").mkdir()
    monkeypatch.chdir(cwd)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def chain():
    """A -> B -> C (A depends on B, B depends on C)."""
    from tests.core.graph_test_helpers import make_chain

    return make_chain("A", "B", "C")


@pytest.fixture
def diamond():
    """A depends on B and C; both depend on D."""
    from tests.core.graph_test_helpers import make_diamond

    return make_diamond()


@pytest.fixture
def two_roots():
    """X depends on R1 and R2; Y depends on X.

    R1 is the canonical root since it is X's first dependency.
    """
    from tests.core.graph_test_helpers import make_nodes

    nodes = make_nodes("R1", "R2", "X", "Y")
    nodes["X"].add_dependency(nodes["R1"])
    nodes["X"].add_dependency(nodes["R2"])
    nodes["Y"].add_dependency(nodes["X"])
    return nodes
