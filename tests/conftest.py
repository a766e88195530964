"""
Pytest fixtures for supplynet analytics testing.

Provides shared fixtures for:
- Small reference networks (chain, diamond, cycle, star, isolated)
- Built SupplyGraph instances for each network
- A temporary SQLite store

Every network fixture returns a (nodes, routes) pair of plain dicts in
the camelCase shape the API and upload paths use.
"""

import pytest

from supplynet.analytics.config import reload_config
from supplynet.analytics.db import SupplyChainDB
from supplynet.analytics.graph import build_graph


def make_node(node_id, **extra):
    node = {"nodeId": node_id, "name": f"Facility {node_id}", "type": "warehouse"}
    node.update(extra)
    return node


def make_route(source, target, **extra):
    route = {"source": source, "target": target, "distance": 100.0, "cost": 10.0, "time": 2.0}
    route.update(extra)
    return route


# ============================================================================
# Network Fixtures
# ============================================================================

@pytest.fixture
def chain_network():
    """N1 -> N2 -> N3"""
    nodes = [make_node("N1"), make_node("N2"), make_node("N3")]
    routes = [make_route("N1", "N2"), make_route("N2", "N3")]
    return nodes, routes


@pytest.fixture
def diamond_network():
    """N1 -> {N2, N3} -> N4, the N3 branch being cheaper."""
    nodes = [make_node(n) for n in ("N1", "N2", "N3", "N4")]
    routes = [
        make_route("N1", "N2", cost=10.0),
        make_route("N1", "N3", cost=5.0),
        make_route("N2", "N4", cost=10.0),
        make_route("N3", "N4", cost=5.0),
    ]
    return nodes, routes


@pytest.fixture
def cycle_network():
    """N1 -> N2 -> N3 -> N1"""
    nodes = [make_node(n) for n in ("N1", "N2", "N3")]
    routes = [make_route("N1", "N2"), make_route("N2", "N3"), make_route("N3", "N1")]
    return nodes, routes


@pytest.fixture
def star_network():
    """Hub H shipping to A, B and C."""
    nodes = [make_node(n) for n in ("H", "A", "B", "C")]
    routes = [make_route("H", leaf) for leaf in ("A", "B", "C")]
    return nodes, routes


@pytest.fixture
def isolated_network():
    """Three facilities and no routes."""
    return [make_node(n) for n in ("N1", "N2", "N3")], []


@pytest.fixture
def chain_graph(chain_network):
    return build_graph(*chain_network)


@pytest.fixture
def diamond_graph(diamond_network):
    return build_graph(*diamond_network)


@pytest.fixture
def cycle_graph(cycle_network):
    return build_graph(*cycle_network)


@pytest.fixture
def star_graph(star_network):
    return build_graph(*star_network)


@pytest.fixture
def isolated_graph(isolated_network):
    return build_graph(*isolated_network)


# ============================================================================
# Storage / Config Fixtures
# ============================================================================

@pytest.fixture
def db(tmp_path):
    """Fresh SQLite store in a temp directory."""
    return SupplyChainDB(tmp_path / "supplynet.db")


@pytest.fixture
def env_config(monkeypatch):
    """
    Set SUPPLYNET_* env vars inside a test, then restore the defaults.

    Usage:
        def test_x(env_config):
            env_config(SUPPLYNET_PATHS_DEFAULT_MAX_PATHS="2")
    """
    def apply(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        reload_config()

    yield apply

    monkeypatch.undo()
    reload_config()
