"""
Classifier - bottleneck and critical node detection
===================================================

Derives two independent node sets from centrality scores:

    Bottlenecks:
        betweenness / max(betweenness) >= bottleneck threshold.
        A graph whose maximum betweenness is 0 (empty graph, star,
        isolated nodes) has no bottlenecks.

    Critical nodes:
        criticality = (degree / max(degree) + betweenness / max(betweenness)) / 2
        Nodes with criticality >= critical threshold qualify. A term
        whose maximum is 0 contributes 0, so at a threshold of 0 every
        node qualifies, isolated ones included.

A node may be in both sets. Thresholds default to Config.CLASSIFIER and
can be overridden per call.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import Config
from .errors import InvalidRequestError
from .graph import SupplyGraph

logger = logging.getLogger("Analytics.Classifier")


@dataclass(frozen=True)
class ClassifierThresholds:
    """Thresholds applied by the classifier."""
    bottleneck: float
    critical: float

    @classmethod
    def resolve(
        cls,
        bottleneck: Optional[float] = None,
        critical: Optional[float] = None,
    ) -> "ClassifierThresholds":
        """Fill unspecified thresholds from config and validate both."""
        resolved = cls(
            bottleneck=Config.CLASSIFIER.BOTTLENECK_THRESHOLD if bottleneck is None else bottleneck,
            critical=Config.CLASSIFIER.CRITICAL_THRESHOLD if critical is None else critical,
        )
        for name, value in (("bottleneckThreshold", resolved.bottleneck),
                            ("criticalThreshold", resolved.critical)):
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not 0.0 <= value <= 1.0:
                raise InvalidRequestError(
                    f"'{name}' must be a number between 0 and 1, got {value!r}",
                    details={"parameter": name},
                )
        return resolved

    def to_dict(self) -> dict:
        return {
            "bottleneckThreshold": self.bottleneck,
            "criticalThreshold": self.critical,
        }


@dataclass
class BottleneckNode:
    """A node carrying a large share of shortest-path traffic."""
    node_id: str
    betweenness_score: float
    normalized_score: float
    in_degree: int
    out_degree: int
    total_degree: int

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "betweennessScore": self.betweenness_score,
            "normalizedScore": self.normalized_score,
            "inDegree": self.in_degree,
            "outDegree": self.out_degree,
            "totalDegree": self.total_degree,
        }


@dataclass
class CriticalNode:
    """A node that is both well connected and a frequent intermediary."""
    node_id: str
    criticality_score: float
    degree_score: float
    betweenness_score: float
    in_degree: int
    out_degree: int

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "criticalityScore": self.criticality_score,
            "degreeScore": self.degree_score,
            "betweennessScore": self.betweenness_score,
            "inDegree": self.in_degree,
            "outDegree": self.out_degree,
        }


def identify_bottlenecks(
    graph: SupplyGraph,
    betweenness: Dict[str, float],
    threshold: Optional[float] = None,
) -> List[BottleneckNode]:
    """
    Find bottleneck nodes.

    Args:
        graph: Graph the scores were computed on (for degree lookups)
        betweenness: Node -> betweenness centrality
        threshold: Minimum normalized betweenness (default from config)

    Returns:
        BottleneckNode list sorted by raw betweenness, highest first
    """
    threshold = ClassifierThresholds.resolve(bottleneck=threshold).bottleneck
    max_betweenness = max(betweenness.values(), default=0.0)

    if max_betweenness <= 0:
        return []

    bottlenecks = []
    for node_id, score in betweenness.items():
        normalized = score / max_betweenness
        if normalized >= threshold:
            bottlenecks.append(BottleneckNode(
                node_id=node_id,
                betweenness_score=score,
                normalized_score=normalized,
                in_degree=graph.in_degree(node_id),
                out_degree=graph.out_degree(node_id),
                total_degree=graph.degree(node_id),
            ))

    # Stable sort keeps graph order among equal scores
    bottlenecks.sort(key=lambda b: b.betweenness_score, reverse=True)
    return bottlenecks


def identify_critical_nodes(
    graph: SupplyGraph,
    degree: Dict[str, float],
    betweenness: Dict[str, float],
    threshold: Optional[float] = None,
) -> List[CriticalNode]:
    """
    Find critical nodes by combined degree and betweenness.

    Args:
        graph: Graph the scores were computed on
        degree: Node -> degree centrality
        betweenness: Node -> betweenness centrality
        threshold: Minimum criticality score (default from config)

    Returns:
        CriticalNode list sorted by criticality, highest first
    """
    threshold = ClassifierThresholds.resolve(critical=threshold).critical
    max_degree = max(degree.values(), default=0.0)
    max_betweenness = max(betweenness.values(), default=0.0)

    critical = []
    for node_id, degree_score in degree.items():
        betweenness_score = betweenness.get(node_id, 0.0)
        normalized_degree = degree_score / max_degree if max_degree > 0 else 0.0
        normalized_betweenness = betweenness_score / max_betweenness if max_betweenness > 0 else 0.0
        criticality = (normalized_degree + normalized_betweenness) / 2

        if criticality >= threshold:
            critical.append(CriticalNode(
                node_id=node_id,
                criticality_score=criticality,
                degree_score=degree_score,
                betweenness_score=betweenness_score,
                in_degree=graph.in_degree(node_id),
                out_degree=graph.out_degree(node_id),
            ))

    critical.sort(key=lambda c: c.criticality_score, reverse=True)
    return critical
