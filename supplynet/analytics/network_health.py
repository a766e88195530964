"""
Network Health - overall supply network health assessment
=========================================================

Scores the network from 0 to 100 and generates actionable
recommendations. Structural inputs come from MetricsResult; operational
inputs come from the node and route status fields.

Health Score Components
-----------------------
    Active nodes (40%):
        Share of facilities with status "active".

    Active routes (30%):
        Share of routes with status "active".

    Bottleneck load (20%):
        1 - (bottleneck count / node count).

    Route risk (10%):
        1 - (high or critical risk routes / route count).

The score is clamped to [0, 100] and mapped to a status:
Excellent >= 80, Good >= 60, Fair >= 40, Poor >= 20, otherwise Critical.

Recommendations
---------------
    critical: disrupted facilities
    high:     bottlenecks, critical nodes
    medium:   high-risk routes
    low:      network density below the configured threshold
    info:     nothing to report
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .config import Config
from .errors import EmptyGraphError
from .graph import NodeInput, RouteInput, as_node_record, as_route_record
from .metrics import MetricsResult, compute_metrics
from .models import NodeStatus, RiskLevel, RouteStatus

logger = logging.getLogger("Analytics.NetworkHealth")


class RecommendationPriority(str, Enum):
    """Priority levels for recommendations."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


@dataclass
class Recommendation:
    """An actionable recommendation for improving network health."""
    priority: RecommendationPriority
    issue: str
    description: str
    action: str
    related_nodes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "priority": self.priority.value,
            "issue": self.issue,
            "description": self.description,
            "action": self.action,
            "relatedNodes": self.related_nodes,
        }


@dataclass
class HealthSummary:
    """Operational counts behind the health score."""
    total_nodes: int = 0
    active_nodes: int = 0
    disrupted_nodes: int = 0
    total_routes: int = 0
    active_routes: int = 0
    disrupted_routes: int = 0
    high_risk_routes: int = 0
    bottlenecks: int = 0
    critical_nodes: int = 0

    def to_dict(self) -> dict:
        return {
            "totalNodes": self.total_nodes,
            "activeNodes": self.active_nodes,
            "disruptedNodes": self.disrupted_nodes,
            "totalRoutes": self.total_routes,
            "activeRoutes": self.active_routes,
            "disruptedRoutes": self.disrupted_routes,
            "highRiskRoutes": self.high_risk_routes,
            "bottlenecks": self.bottlenecks,
            "criticalNodes": self.critical_nodes,
        }


@dataclass
class NetworkHealthReport:
    """Complete network health report."""
    health_score: float
    health_status: str
    summary: HealthSummary
    metrics: MetricsResult
    recommendations: List[Recommendation] = field(default_factory=list)
    computed_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "healthScore": round(self.health_score),
            "healthStatus": self.health_status,
            "summary": self.summary.to_dict(),
            "networkStats": self.metrics.network_stats.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "computedAt": self.computed_at,
        }


def health_status(score: float) -> str:
    """Map a 0-100 health score to its label."""
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    if score >= 20:
        return "Poor"
    return "Critical"


def calculate_health_score(summary: HealthSummary) -> float:
    """Weighted health score clamped to [0, 100]."""
    if summary.total_nodes == 0:
        return 0.0

    route_base = summary.total_routes or 1
    score = (
        (summary.active_nodes / summary.total_nodes) * 40
        + (summary.active_routes / route_base) * 30
        + (1 - summary.bottlenecks / summary.total_nodes) * 20
        + (1 - summary.high_risk_routes / route_base) * 10
    )
    return max(0.0, min(100.0, score))


def generate_recommendations(
    summary: HealthSummary,
    metrics: MetricsResult,
    disrupted_node_ids: List[str],
) -> List[Recommendation]:
    """Build recommendations from detected issues."""
    recommendations = []

    if metrics.bottlenecks:
        recommendations.append(Recommendation(
            priority=RecommendationPriority.HIGH,
            issue="Bottleneck nodes detected",
            description=(
                f"{len(metrics.bottlenecks)} bottleneck node(s) identified that "
                "could disrupt supply chain flow"
            ),
            action="Consider adding redundant routes or increasing capacity at these nodes",
            related_nodes=[b.node_id for b in metrics.bottlenecks],
        ))

    if metrics.critical_nodes:
        recommendations.append(Recommendation(
            priority=RecommendationPriority.HIGH,
            issue="Critical nodes identified",
            description=f"{len(metrics.critical_nodes)} critical node(s) with high connectivity",
            action="Implement backup plans and monitoring for these critical nodes",
            related_nodes=[c.node_id for c in metrics.critical_nodes],
        ))

    if summary.high_risk_routes:
        recommendations.append(Recommendation(
            priority=RecommendationPriority.MEDIUM,
            issue="High-risk routes detected",
            description=f"{summary.high_risk_routes} route(s) with high risk levels",
            action="Establish alternative routes and contingency plans",
        ))

    if disrupted_node_ids:
        recommendations.append(Recommendation(
            priority=RecommendationPriority.CRITICAL,
            issue="Disrupted nodes",
            description=f"{len(disrupted_node_ids)} node(s) currently disrupted",
            action="Immediate action required to restore operations or activate backup routes",
            related_nodes=list(disrupted_node_ids),
        ))

    if metrics.network_stats.density < Config.HEALTH.LOW_DENSITY_THRESHOLD:
        recommendations.append(Recommendation(
            priority=RecommendationPriority.LOW,
            issue="Low network density",
            description="Network has relatively few connections between nodes",
            action="Consider establishing additional routes to improve resilience",
        ))

    if not recommendations:
        recommendations.append(Recommendation(
            priority=RecommendationPriority.INFO,
            issue="Network healthy",
            description="No major issues detected in the supply chain network",
            action="Continue monitoring and maintain current operations",
        ))

    return recommendations


def assess_network_health(
    nodes: Iterable[NodeInput],
    routes: Iterable[RouteInput],
    metrics: Optional[MetricsResult] = None,
) -> NetworkHealthReport:
    """
    Assess overall network health.

    Args:
        nodes: Node records (or dicts)
        routes: Route records (or dicts)
        metrics: Precomputed MetricsResult for the same snapshot; computed
            here when omitted

    Raises:
        EmptyGraphError: No node records were supplied
    """
    node_records = [as_node_record(n) for n in nodes]
    route_records = [as_route_record(r) for r in routes]

    if not node_records:
        raise EmptyGraphError()

    if metrics is None:
        metrics = compute_metrics(node_records, route_records)

    disrupted = [n.node_id for n in node_records if n.status is NodeStatus.DISRUPTED]

    summary = HealthSummary(
        total_nodes=len(node_records),
        active_nodes=sum(1 for n in node_records if n.status is NodeStatus.ACTIVE),
        disrupted_nodes=len(disrupted),
        total_routes=len(route_records),
        active_routes=sum(1 for r in route_records if r.status is RouteStatus.ACTIVE),
        disrupted_routes=sum(1 for r in route_records if r.status is RouteStatus.DISRUPTED),
        high_risk_routes=sum(
            1 for r in route_records
            if r.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)
        ),
        bottlenecks=len(metrics.bottlenecks),
        critical_nodes=len(metrics.critical_nodes),
    )

    score = calculate_health_score(summary)
    report = NetworkHealthReport(
        health_score=score,
        health_status=health_status(score),
        summary=summary,
        metrics=metrics,
        recommendations=generate_recommendations(summary, metrics, disrupted),
    )

    logger.debug(f"Network health {score:.1f} ({report.health_status})")
    return report
