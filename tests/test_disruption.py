"""
Disruption simulator tests.

Tests verify:
- Node and edge removal impact (isolated nodes, counts, new metrics)
- The input graph is never mutated
- Missing target policies
- Reachability delta
- Alternatives around a removed route
- Recommendations that reflect lost reachability
"""

import logging

import pytest

from supplynet.analytics.disruption import (
    EdgeRemoval,
    MissingTargetPolicy,
    NodeRemoval,
    assess_disruption,
    disruption_target,
    reachability_delta,
    simulate_disruption,
)
from supplynet.analytics.errors import InvalidRequestError, NotFoundError
from supplynet.analytics.graph import build_graph

from conftest import make_node, make_route


@pytest.fixture
def bypass_graph():
    """N1 -> N2 direct, plus N1 -> N3 -> N2."""
    nodes = [make_node(n) for n in ("N1", "N2", "N3")]
    routes = [
        make_route("N1", "N2", cost=5.0),
        make_route("N1", "N3", cost=4.0),
        make_route("N3", "N2", cost=4.0),
    ]
    return build_graph(nodes, routes)


class TestSimulateDisruption:

    def test_remove_chain_middle(self, chain_graph):
        result = simulate_disruption(chain_graph, NodeRemoval("N2"))

        assert result.applied is True
        assert result.affected_nodes == ["N1", "N3"]
        assert result.node_count_after == 2
        assert result.edge_count_after == 0
        assert result.degree == {"N1": 0.0, "N3": 0.0}
        assert result.betweenness == {"N1": 0.0, "N3": 0.0}

    def test_input_not_mutated(self, chain_graph):
        simulate_disruption(chain_graph, NodeRemoval("N2"))
        simulate_disruption(chain_graph, EdgeRemoval("N1", "N2"))

        assert chain_graph.node_count == 3
        assert chain_graph.edge_count == 2
        assert chain_graph.has_edge("N1", "N2")

    def test_remove_edge(self, chain_graph):
        result = simulate_disruption(chain_graph, EdgeRemoval("N1", "N2"))

        assert result.affected_nodes == ["N1"]
        assert result.node_count_after == 3
        assert result.edge_count_after == 1

    def test_remove_edge_keeps_reverse(self):
        graph = build_graph(
            [make_node("A"), make_node("B")],
            [make_route("A", "B"), make_route("B", "A")],
        )
        result = simulate_disruption(graph, EdgeRemoval("A", "B"))

        assert result.edge_count_after == 1
        assert result.affected_nodes == []

    def test_missing_target_is_noop(self, chain_graph):
        result = simulate_disruption(chain_graph, NodeRemoval("NOPE"))

        assert result.applied is False
        assert result.node_count_after == 3
        assert result.edge_count_after == 2
        assert result.affected_nodes == []

    def test_missing_target_error_policy(self, chain_graph):
        with pytest.raises(NotFoundError):
            simulate_disruption(chain_graph, EdgeRemoval("N3", "N1"), on_missing_target=MissingTargetPolicy.ERROR)

    def test_missing_target_policy_from_config(self, chain_graph, env_config):
        env_config(SUPPLYNET_DISRUPTION_ON_MISSING_TARGET="error")

        with pytest.raises(NotFoundError):
            simulate_disruption(chain_graph, NodeRemoval("NOPE"))

    def test_pre_isolated_nodes_reported(self, isolated_graph):
        result = simulate_disruption(isolated_graph, NodeRemoval("N1"))

        assert result.affected_nodes == ["N2", "N3"]

    def test_rejects_unknown_target_type(self, chain_graph):
        with pytest.raises(InvalidRequestError):
            simulate_disruption(chain_graph, "N2")

    def test_to_dict(self, chain_graph):
        data = simulate_disruption(chain_graph, NodeRemoval("N2")).to_dict()

        assert data["disruptionType"] == "node"
        assert data["disruptedElement"] == "N2"
        assert data["newMetrics"]["degree"] == {"N1": 0.0, "N3": 0.0}


class TestDisruptionTarget:

    def test_node(self):
        assert disruption_target(node_id="N1") == NodeRemoval("N1")

    def test_edge(self):
        assert disruption_target(edge_source="N1", edge_target="N2") == EdgeRemoval("N1", "N2")

    @pytest.mark.parametrize("kwargs", [
        {},
        {"edge_source": "N1"},
        {"edge_target": "N2"},
        {"node_id": "N1", "edge_source": "N1", "edge_target": "N2"},
    ])
    def test_invalid_combinations(self, kwargs):
        with pytest.raises(InvalidRequestError):
            disruption_target(**kwargs)


class TestReachabilityDelta:

    def test_node_removal(self, chain_graph):
        delta = reachability_delta(chain_graph, NodeRemoval("N2"))

        assert delta.lost_reachability == {"N1": ["N3"], "N3": []}
        assert delta.lost_pairs == 1
        assert delta.impacted_nodes == ["N1"]

    def test_edge_removal(self, chain_graph):
        delta = reachability_delta(chain_graph, EdgeRemoval("N2", "N3"))

        assert delta.lost_reachability["N1"] == ["N3"]
        assert delta.lost_reachability["N2"] == ["N3"]
        assert delta.lost_pairs == 2

    def test_bypass_loses_nothing(self, bypass_graph):
        delta = reachability_delta(bypass_graph, EdgeRemoval("N1", "N2"))

        assert delta.lost_pairs == 0
        assert delta.to_dict()["lostReachability"] == {}

    def test_non_isolated_loss(self, diamond_network):
        # N5 hangs off N4; dropping N4 cuts N1 off from N5 without isolating N1
        nodes, routes = diamond_network
        graph = build_graph(nodes + [make_node("N5")], routes + [make_route("N4", "N5")])

        result = simulate_disruption(graph, NodeRemoval("N4"))
        delta = reachability_delta(graph, NodeRemoval("N4"))

        assert "N1" not in result.affected_nodes
        assert "N5" in delta.lost_reachability["N1"]


class TestAssessDisruption:

    def test_edge_with_alternative(self, bypass_graph):
        assessment = assess_disruption(bypass_graph, EdgeRemoval("N1", "N2"))

        assert [p.path for p in assessment.alternative_paths] == [["N1", "N3", "N2"]]
        assert assessment.alternative_paths[0].total_cost == pytest.approx(8.0)
        assert assessment.recommendation == "1 alternative route(s) available"

    def test_edge_without_alternative(self, chain_graph):
        assessment = assess_disruption(chain_graph, EdgeRemoval("N1", "N2"))

        assert assessment.alternative_paths == []
        assert assessment.recommendation.startswith("Critical disruption")

    def test_node_impact_block(self, chain_graph):
        data = assess_disruption(chain_graph, NodeRemoval("N2")).to_dict()

        assert data["impact"] == {
            "affectedNodes": ["N1", "N3"],
            "networkSizeBefore": 3,
            "networkSizeAfter": 2,
            "edgesBefore": 2,
            "edgesAfter": 0,
            "nodesDisconnected": 2,
            "lostPairs": 1,
            "impactedNodes": ["N1"],
        }
        assert data["alternativePaths"] == []
        assert "2 node(s)" in data["recommendation"]

    def test_reports_lost_reachability_without_isolation(self):
        # A -> B -> C -> D plus A -> E; dropping B strands C and D from A
        nodes = [make_node(n) for n in ("A", "B", "C", "D", "E")]
        routes = [
            make_route("A", "B"),
            make_route("B", "C"),
            make_route("C", "D"),
            make_route("A", "E"),
        ]
        graph = build_graph(nodes, routes)

        assessment = assess_disruption(graph, NodeRemoval("B"))

        assert assessment.result.affected_nodes == []
        assert assessment.lost_pairs == 2
        assert assessment.reachability.lost_reachability["A"] == ["C", "D"]
        assert "2 origin-destination pair(s)" in assessment.recommendation
        assert "connected" not in assessment.recommendation
        assert assessment.to_dict()["impact"]["impactedNodes"] == ["A"]

    def test_node_removal_with_no_loss(self):
        graph = build_graph(
            [make_node(n) for n in ("N1", "N2", "N3", "N4")],
            [make_route("N1", "N2"), make_route("N1", "N3"), make_route("N3", "N2"), make_route("N4", "N1")],
        )

        assessment = assess_disruption(graph, NodeRemoval("N4"))

        assert assessment.lost_pairs == 0
        assert assessment.recommendation == "No facility isolated and no reachability lost"

    def test_missing_target_handled_once(self, chain_graph, caplog):
        with caplog.at_level(logging.INFO, logger="Analytics.Disruption"):
            assessment = assess_disruption(chain_graph, EdgeRemoval("N3", "N1"))

        messages = [r.getMessage() for r in caplog.records if "nothing removed" in r.getMessage()]
        assert len(messages) == 1
        assert assessment.result.applied is False
        assert assessment.reachability.applied is False


class TestPolicyResolution:

    def test_unknown_missing_target_policy(self, chain_graph):
        with pytest.raises(InvalidRequestError) as exc:
            simulate_disruption(chain_graph, NodeRemoval("N2"), on_missing_target="ignore")

        assert exc.value.details["allowed"] == ["noop", "error"]

    def test_policy_is_case_insensitive(self, chain_graph):
        with pytest.raises(NotFoundError):
            simulate_disruption(chain_graph, NodeRemoval("N9"), on_missing_target="ERROR")

    def test_resolve_defaults_to_config(self):
        assert MissingTargetPolicy.resolve(None) is MissingTargetPolicy.NOOP
