"""
Classifier tests.

Tests verify:
- Bottleneck detection by normalized betweenness
- Critical node detection by combined degree and betweenness
- Threshold resolution and validation
"""

import pytest

from supplynet.analytics.centrality import betweenness_centrality, degree_centrality
from supplynet.analytics.classifier import (
    ClassifierThresholds,
    identify_bottlenecks,
    identify_critical_nodes,
)
from supplynet.analytics.errors import InvalidRequestError
from supplynet.analytics.graph import build_graph

from conftest import make_node


class TestBottlenecks:

    def test_chain_middle_is_bottleneck(self, chain_graph):
        bottlenecks = identify_bottlenecks(chain_graph, betweenness_centrality(chain_graph))

        assert [b.node_id for b in bottlenecks] == ["N2"]
        assert bottlenecks[0].normalized_score == pytest.approx(1.0)
        assert bottlenecks[0].in_degree == 1
        assert bottlenecks[0].out_degree == 1
        assert bottlenecks[0].total_degree == 2

    def test_no_bottlenecks_when_max_is_zero(self, star_graph, isolated_graph):
        assert identify_bottlenecks(star_graph, betweenness_centrality(star_graph)) == []
        assert identify_bottlenecks(isolated_graph, betweenness_centrality(isolated_graph)) == []

    def test_sorted_descending(self, chain_graph):
        scores = {"N1": 0.1, "N2": 0.4, "N3": 0.2}
        bottlenecks = identify_bottlenecks(chain_graph, scores, threshold=0.0)

        assert [b.node_id for b in bottlenecks] == ["N2", "N3", "N1"]

    def test_threshold_filters(self, chain_graph):
        scores = {"N1": 0.1, "N2": 0.4, "N3": 0.2}
        bottlenecks = identify_bottlenecks(chain_graph, scores, threshold=0.5)

        assert [b.node_id for b in bottlenecks] == ["N2", "N3"]

    def test_to_dict(self, chain_graph):
        data = identify_bottlenecks(chain_graph, betweenness_centrality(chain_graph))[0].to_dict()

        assert data["nodeId"] == "N2"
        assert data["betweennessScore"] == pytest.approx(0.5)
        assert data["totalDegree"] == 2


class TestCriticalNodes:

    def test_chain(self, chain_graph):
        critical = identify_critical_nodes(
            chain_graph,
            degree_centrality(chain_graph),
            betweenness_centrality(chain_graph),
        )

        assert [c.node_id for c in critical] == ["N2", "N1", "N3"]
        assert critical[0].criticality_score == pytest.approx(1.0)
        assert critical[1].criticality_score == pytest.approx(0.25)

    def test_star_uses_degree_only(self, star_graph):
        critical = identify_critical_nodes(
            star_graph,
            degree_centrality(star_graph),
            betweenness_centrality(star_graph),
        )

        assert critical[0].node_id == "H"
        assert critical[0].criticality_score == pytest.approx(0.5)

    def test_isolated_graph_below_default_threshold(self, isolated_graph):
        critical = identify_critical_nodes(
            isolated_graph,
            degree_centrality(isolated_graph),
            betweenness_centrality(isolated_graph),
        )

        assert critical == []

    def test_zero_threshold_includes_every_node(self, isolated_graph):
        critical = identify_critical_nodes(
            isolated_graph,
            degree_centrality(isolated_graph),
            betweenness_centrality(isolated_graph),
            threshold=0.0,
        )

        assert [c.node_id for c in critical] == ["N1", "N2", "N3"]
        assert all(c.criticality_score == 0.0 for c in critical)

    def test_zero_threshold_includes_isolated_node_beside_chain(self, chain_network):
        nodes, routes = chain_network
        graph = build_graph(nodes + [make_node("X")], routes)

        critical = identify_critical_nodes(
            graph,
            degree_centrality(graph),
            betweenness_centrality(graph),
            threshold=0.0,
        )

        assert [c.node_id for c in critical] == ["N2", "N1", "N3", "X"]
        assert critical[-1].criticality_score == 0.0

    def test_high_threshold(self, chain_graph):
        critical = identify_critical_nodes(
            chain_graph,
            degree_centrality(chain_graph),
            betweenness_centrality(chain_graph),
            threshold=0.9,
        )

        assert [c.node_id for c in critical] == ["N2"]


class TestThresholds:

    def test_defaults_from_config(self):
        thresholds = ClassifierThresholds.resolve()

        assert thresholds.bottleneck == pytest.approx(0.05)
        assert thresholds.critical == pytest.approx(0.10)

    def test_env_override(self, env_config):
        env_config(SUPPLYNET_CLASSIFIER_BOTTLENECK_THRESHOLD="0.3")

        assert ClassifierThresholds.resolve().bottleneck == pytest.approx(0.3)

    @pytest.mark.parametrize("value", [-0.1, 1.5, "high", True])
    def test_invalid_values_rejected(self, value):
        with pytest.raises(InvalidRequestError) as exc:
            ClassifierThresholds.resolve(bottleneck=value)

        assert exc.value.details == {"parameter": "bottleneckThreshold"}

    def test_bounds_inclusive(self):
        thresholds = ClassifierThresholds.resolve(bottleneck=0.0, critical=1.0)

        assert thresholds.to_dict() == {"bottleneckThreshold": 0.0, "criticalThreshold": 1.0}
