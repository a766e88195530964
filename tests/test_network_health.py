"""
Network health tests.

Tests verify:
- Weighted health score and status labels
- Recommendation generation per detected issue
"""

import pytest

from supplynet.analytics.errors import EmptyGraphError
from supplynet.analytics.network_health import (
    HealthSummary,
    RecommendationPriority,
    assess_network_health,
    calculate_health_score,
    health_status,
)

from conftest import make_node, make_route


class TestHealthScore:

    @pytest.mark.parametrize("score,status", [
        (100, "Excellent"),
        (80, "Excellent"),
        (79.9, "Good"),
        (60, "Good"),
        (40, "Fair"),
        (20, "Poor"),
        (19.9, "Critical"),
        (0, "Critical"),
    ])
    def test_status_labels(self, score, status):
        assert health_status(score) == status

    def test_perfect_network(self):
        summary = HealthSummary(total_nodes=4, active_nodes=4, total_routes=3, active_routes=3)
        assert calculate_health_score(summary) == pytest.approx(100.0)

    def test_no_nodes(self):
        assert calculate_health_score(HealthSummary()) == 0.0

    def test_weights(self):
        summary = HealthSummary(
            total_nodes=4, active_nodes=2,
            total_routes=4, active_routes=2,
            bottlenecks=2, high_risk_routes=2,
        )
        # 0.5 * 40 + 0.5 * 30 + 0.5 * 20 + 0.5 * 10
        assert calculate_health_score(summary) == pytest.approx(50.0)


class TestAssessNetworkHealth:

    def test_chain(self, chain_network):
        report = assess_network_health(*chain_network)

        # 40 + 30 + (1 - 1/3) * 20 + 10
        assert report.health_score == pytest.approx(93.333, abs=1e-3)
        assert report.health_status == "Excellent"
        assert report.to_dict()["healthScore"] == 93

        issues = [r.issue for r in report.recommendations]
        assert issues == ["Bottleneck nodes detected", "Critical nodes identified"]
        assert report.recommendations[0].related_nodes == ["N2"]

    def test_sparse_network(self, isolated_network):
        report = assess_network_health(*isolated_network)

        assert report.health_score == pytest.approx(70.0)
        assert report.health_status == "Good"
        assert [r.priority for r in report.recommendations] == [RecommendationPriority.LOW]

    def test_disrupted_and_risky(self):
        nodes = [make_node("A"), make_node("B", status="disrupted"), make_node("C")]
        routes = [
            make_route("A", "B", riskLevel="high"),
            make_route("B", "C", status="disrupted"),
            make_route("C", "A"),
        ]
        report = assess_network_health(nodes, routes)

        assert report.summary.disrupted_nodes == 1
        assert report.summary.high_risk_routes == 1
        assert report.summary.disrupted_routes == 1

        by_priority = {r.priority: r for r in report.recommendations}
        assert by_priority[RecommendationPriority.CRITICAL].related_nodes == ["B"]
        assert RecommendationPriority.MEDIUM in by_priority

    def test_healthy_network(self):
        # Complete digraph on three nodes: dense, symmetric, no bottlenecks
        ids = ("A", "B", "C")
        routes = [make_route(a, b) for a in ids for b in ids if a != b]
        report = assess_network_health([make_node(n) for n in ids], routes)

        assert report.summary.bottlenecks == 0
        assert report.health_score == pytest.approx(100.0)

    def test_empty(self):
        with pytest.raises(EmptyGraphError):
            assess_network_health([], [])

    def test_reuses_metrics(self, chain_network):
        from supplynet.analytics.metrics import compute_metrics

        metrics = compute_metrics(*chain_network, bottleneck_threshold=1.0, critical_threshold=1.0)
        report = assess_network_health(*chain_network, metrics=metrics)

        assert report.metrics is metrics
        assert report.summary.critical_nodes == 1
