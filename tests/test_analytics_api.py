"""
Analytics API tests.

Handlers are called directly; json_out only marks them for CherryPy,
so each call returns the response dict.
"""

import pytest

from supplynet.web.analytics_api import AnalyticsAPI

from conftest import make_node, make_route


@pytest.fixture
def api(tmp_path):
    return AnalyticsAPI(tmp_path / "api.db")


@pytest.fixture
def diamond_api(api, diamond_network):
    nodes, routes = diamond_network
    api._db.upsert_nodes(nodes)
    api._db.upsert_routes(routes)
    return api


@pytest.fixture
def chain_api(api, chain_network):
    nodes, routes = chain_network
    api._db.upsert_nodes(nodes)
    api._db.upsert_routes(routes)
    return api


class TestEmptyStore:

    @pytest.mark.parametrize("endpoint", ["metrics", "bottlenecks", "critical_nodes", "network_health"])
    def test_empty_graph_envelope(self, api, endpoint):
        response = getattr(api, endpoint)()

        assert response["success"] is False
        assert response["error"]["code"] == "EMPTY_GRAPH"
        assert response["error"]["httpStatus"] == 400

    def test_find_paths_on_empty_store(self, api):
        response = api.find_paths(source="N1", target="N4")

        assert response["error"]["code"] == "EMPTY_GRAPH"


class TestMetricsEndpoints:

    def test_metrics_writes_back(self, chain_api):
        response = chain_api.metrics()

        assert response["success"] is True
        assert response["updatedNodes"] == 3
        assert response["data"]["nodeMetrics"]["N2"]["isBottleneck"] is True
        assert chain_api._db.load_node_metrics()["N2"]["isBottleneck"] is True

    def test_metrics_without_write_back(self, chain_api):
        response = chain_api.metrics(writeBack="false")

        assert response["updatedNodes"] == 0
        assert chain_api._db.load_node_metrics()["N2"]["isBottleneck"] is False

    def test_metrics_invalid_threshold(self, chain_api):
        response = chain_api.metrics(bottleneckThreshold="7")

        assert response["error"]["code"] == "INVALID_PARAMETER"
        assert response["error"]["details"]["parameter"] == "bottleneckThreshold"

    def test_bottlenecks(self, chain_api):
        response = chain_api.bottlenecks()

        assert response["count"] == 1
        assert response["data"][0]["nodeId"] == "N2"

    def test_critical_nodes_threshold(self, chain_api):
        response = chain_api.critical_nodes(threshold="0.9")

        assert [c["nodeId"] for c in response["data"]] == ["N2"]

    def test_network_health(self, chain_api):
        data = chain_api.network_health()["data"]

        assert data["healthStatus"] == "Excellent"
        assert data["summary"]["totalNodes"] == 3


class TestPathEndpoint:

    def test_sorted_by_cost(self, diamond_api):
        data = diamond_api.find_paths(source="N1", target="N4")["data"]

        assert data["count"] == 2
        assert data["paths"][0]["path"] == ["N1", "N3", "N4"]
        assert data["paths"][0]["totalCost"] == 10.0
        assert data["paths"][1]["totalCost"] == 20.0

    def test_max_paths(self, diamond_api):
        data = diamond_api.find_paths(source="N1", target="N4", maxPaths="1")["data"]

        assert data["count"] == 1

    def test_missing_source(self, diamond_api):
        response = diamond_api.find_paths(target="N4")

        assert response["error"]["code"] == "MISSING_PARAMETER"
        assert response["error"]["details"]["parameter"] == "source"

    def test_max_paths_limit(self, diamond_api):
        response = diamond_api.find_paths(source="N1", target="N4", maxPaths="500")

        assert response["error"]["code"] == "INVALID_PARAMETER"

    def test_unknown_rank_key(self, diamond_api):
        response = diamond_api.find_paths(source="N1", target="N4", rankBy="beauty")

        assert response["error"]["details"]["parameter"] == "rankBy"


class TestDisruptionEndpoints:

    def test_node_disruption(self, chain_api):
        data = chain_api.simulate_disruption(nodeId="N2")["data"]

        assert data["disruptionType"] == "node"
        assert data["impact"]["affectedNodes"] == ["N1", "N3"]
        assert data["impact"]["networkSizeAfter"] == 2

    def test_edge_disruption_with_alternative(self, api):
        api._db.upsert_nodes([make_node("N1"), make_node("N2"), make_node("N3")])
        api._db.upsert_routes([make_route("N1", "N2"), make_route("N1", "N3"), make_route("N3", "N2")])

        data = api.simulate_disruption(edgeSource="N1", edgeTarget="N2")["data"]

        assert data["disruptionType"] == "edge"
        assert [p["path"] for p in data["alternativePaths"]] == [["N1", "N3", "N2"]]

    def test_no_target(self, chain_api):
        response = chain_api.simulate_disruption()

        assert response["error"]["code"] == "INVALID_REQUEST"

    def test_half_edge(self, chain_api):
        response = chain_api.simulate_disruption(edgeSource="N1")

        assert response["error"]["code"] == "INVALID_REQUEST"

    def test_reachability(self, chain_api):
        data = chain_api.reachability(nodeId="N2")["data"]

        assert data["lostPairs"] == 1
        assert data["lostReachability"] == {"N1": ["N3"]}
