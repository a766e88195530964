"""
Metrics Aggregator - one consolidated analysis per request
==========================================================

Pure orchestration over the other analytics modules:

    build_graph -> centrality -> classifier -> per-node merge -> network stats

The MetricsResult it returns is the unit every outward-facing consumer
(API, reports, alert mails, write-back to node records) works from. It
is recomputed on every call; nothing is cached or shared between calls.

Example
-------
    >>> from supplynet.analytics.metrics import compute_metrics
    >>>
    >>> result = compute_metrics(nodes, routes)
    >>> result.network_stats.density
    0.3333333333333333
    >>> [b.node_id for b in result.bottlenecks]
    ['N2']
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

from .centrality import compute_all_centrality
from .classifier import (
    BottleneckNode,
    ClassifierThresholds,
    CriticalNode,
    identify_bottlenecks,
    identify_critical_nodes,
)
from .errors import EmptyGraphError
from .graph import DanglingEdgePolicy, NodeInput, RouteInput, SupplyGraph, build_graph

logger = logging.getLogger("Analytics.Metrics")


@dataclass
class NodeMetrics:
    """Merged structural metrics for one node."""
    degree_centrality: float = 0.0
    betweenness_centrality: float = 0.0
    closeness_centrality: float = 0.0
    clustering_coefficient: float = 0.0
    in_degree: int = 0
    out_degree: int = 0
    total_degree: int = 0
    is_bottleneck: bool = False
    is_critical: bool = False

    def to_dict(self) -> dict:
        return {
            "degreeCentrality": self.degree_centrality,
            "betweennessCentrality": self.betweenness_centrality,
            "closenessCentrality": self.closeness_centrality,
            "clusteringCoefficient": self.clustering_coefficient,
            "inDegree": self.in_degree,
            "outDegree": self.out_degree,
            "totalDegree": self.total_degree,
            "isBottleneck": self.is_bottleneck,
            "isCritical": self.is_critical,
        }


@dataclass
class NetworkStats:
    """Network-level summary statistics."""
    total_nodes: int
    total_edges: int
    density: float
    average_degree: float
    global_clustering_coefficient: float

    def to_dict(self) -> dict:
        return {
            "totalNodes": self.total_nodes,
            "totalEdges": self.total_edges,
            "density": self.density,
            "averageDegree": self.average_degree,
            "globalClusteringCoefficient": self.global_clustering_coefficient,
        }


@dataclass
class MetricsResult:
    """Complete analysis of one network snapshot."""
    node_metrics: Dict[str, NodeMetrics]
    network_stats: NetworkStats
    bottlenecks: List[BottleneckNode] = field(default_factory=list)
    critical_nodes: List[CriticalNode] = field(default_factory=list)
    thresholds: Optional[ClassifierThresholds] = None
    graph: Optional[SupplyGraph] = field(default=None, repr=False, compare=False)
    analysis_duration_ms: float = field(default=0.0, compare=False)

    def to_dict(self) -> dict:
        return {
            "nodeMetrics": {k: v.to_dict() for k, v in self.node_metrics.items()},
            "networkStats": self.network_stats.to_dict(),
            "bottlenecks": [b.to_dict() for b in self.bottlenecks],
            "criticalNodes": [c.to_dict() for c in self.critical_nodes],
            "thresholds": self.thresholds.to_dict() if self.thresholds else None,
            "analysisDurationMs": round(self.analysis_duration_ms, 1),
        }


def _network_stats(graph: SupplyGraph, global_clustering: float) -> NetworkStats:
    n = graph.node_count
    m = graph.edge_count

    # Density and average degree are undefined below two nodes
    if n <= 1:
        density = 0.0
        average_degree = 0.0
    else:
        density = m / (n * (n - 1))
        average_degree = (2 * m) / n

    return NetworkStats(
        total_nodes=n,
        total_edges=m,
        density=density,
        average_degree=average_degree,
        global_clustering_coefficient=global_clustering,
    )


def compute_graph_metrics(
    graph: SupplyGraph,
    bottleneck_threshold: Optional[float] = None,
    critical_threshold: Optional[float] = None,
) -> MetricsResult:
    """
    Run the full metrics pipeline over an already built graph.

    Raises:
        EmptyGraphError: The graph has no nodes
        InvalidRequestError: A threshold is outside [0, 1]
    """
    if graph.node_count == 0:
        raise EmptyGraphError()

    started = time.time()
    thresholds = ClassifierThresholds.resolve(bottleneck_threshold, critical_threshold)

    scores = compute_all_centrality(graph)
    bottlenecks = identify_bottlenecks(graph, scores.betweenness, thresholds.bottleneck)
    critical_nodes = identify_critical_nodes(
        graph, scores.degree, scores.betweenness, thresholds.critical
    )

    bottleneck_ids = {b.node_id for b in bottlenecks}
    critical_ids = {c.node_id for c in critical_nodes}

    node_metrics = {}
    for node_id in graph.nodes():
        node_metrics[node_id] = NodeMetrics(
            degree_centrality=scores.degree.get(node_id, 0.0),
            betweenness_centrality=scores.betweenness.get(node_id, 0.0),
            closeness_centrality=scores.closeness.get(node_id, 0.0),
            clustering_coefficient=scores.clustering.get(node_id, 0.0),
            in_degree=graph.in_degree(node_id),
            out_degree=graph.out_degree(node_id),
            total_degree=graph.degree(node_id),
            is_bottleneck=node_id in bottleneck_ids,
            is_critical=node_id in critical_ids,
        )

    result = MetricsResult(
        node_metrics=node_metrics,
        network_stats=_network_stats(graph, scores.global_clustering),
        bottlenecks=bottlenecks,
        critical_nodes=critical_nodes,
        thresholds=thresholds,
        graph=graph,
        analysis_duration_ms=(time.time() - started) * 1000,
    )

    logger.debug(
        f"Metrics for {graph.node_count} nodes / {graph.edge_count} edges: "
        f"{len(bottlenecks)} bottleneck(s), {len(critical_nodes)} critical "
        f"in {result.analysis_duration_ms:.1f}ms"
    )
    return result


def compute_metrics(
    nodes: Iterable[NodeInput],
    routes: Iterable[RouteInput],
    bottleneck_threshold: Optional[float] = None,
    critical_threshold: Optional[float] = None,
    on_dangling_edge: Optional[Union[DanglingEdgePolicy, str]] = None,
) -> MetricsResult:
    """
    Build the network from records and analyse it.

    Args:
        nodes: Node records (or dicts)
        routes: Route records (or dicts)
        bottleneck_threshold: Override Config.CLASSIFIER.BOTTLENECK_THRESHOLD
        critical_threshold: Override Config.CLASSIFIER.CRITICAL_THRESHOLD
        on_dangling_edge: Override Config.GRAPH.ON_DANGLING_EDGE

    Returns:
        MetricsResult for the snapshot

    Raises:
        EmptyGraphError: No node records were supplied
    """
    graph = build_graph(nodes, routes, on_dangling_edge=on_dangling_edge)
    return compute_graph_metrics(graph, bottleneck_threshold, critical_threshold)


def metrics_for_write_back(result: MetricsResult) -> Dict[str, dict]:
    """
    Per-node values persisted onto node records.

    Returns:
        Dict node_id -> {degreeCentrality, betweennessCentrality,
        closenessCentrality, clusteringCoefficient, isBottleneck, isCritical}
    """
    return {
        node_id: {
            "degreeCentrality": m.degree_centrality,
            "betweennessCentrality": m.betweenness_centrality,
            "closenessCentrality": m.closeness_centrality,
            "clusteringCoefficient": m.clustering_coefficient,
            "isBottleneck": m.is_bottleneck,
            "isCritical": m.is_critical,
        }
        for node_id, m in result.node_metrics.items()
    }
