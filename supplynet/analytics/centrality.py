"""
Centrality Engine - structural metrics over a SupplyGraph
=========================================================

Four independent computations, each a pure function of the graph
snapshot:

    Degree centrality:
        (in-degree + out-degree) / (n - 1)

    Betweenness centrality:
        Directed Brandes betweenness, normalized by (n - 1)(n - 2).
        Pairs with no path contribute nothing.

    Closeness centrality:
        Outward hop distances (BFS). (r - 1) / sum(d) over the r nodes
        a node reaches (itself included), optionally scaled by
        (r - 1) / (n - 1) so partially connected nodes never outscore
        fully connected ones (Wasserman-Faust).

    Clustering coefficient:
        Computed on the undirected projection. Local value is the share
        of neighbor pairs that are themselves linked; global value is
        the mean of local values.

Every function returns zero-filled scores for graphs with 0 or 1 node
instead of failing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

import networkx as nx

from .graph import SupplyGraph

logger = logging.getLogger("Analytics.Centrality")


@dataclass
class CentralityScores:
    """All per-node centrality maps for one graph snapshot."""
    degree: Dict[str, float] = field(default_factory=dict)
    betweenness: Dict[str, float] = field(default_factory=dict)
    closeness: Dict[str, float] = field(default_factory=dict)
    clustering: Dict[str, float] = field(default_factory=dict)
    global_clustering: float = 0.0

    def to_dict(self) -> dict:
        return {
            "degree": {k: round(v, 4) for k, v in self.degree.items()},
            "betweenness": {k: round(v, 4) for k, v in self.betweenness.items()},
            "closeness": {k: round(v, 4) for k, v in self.closeness.items()},
            "clustering": {k: round(v, 4) for k, v in self.clustering.items()},
            "globalClustering": round(self.global_clustering, 4),
        }


def _zeros(graph: SupplyGraph) -> Dict[str, float]:
    return {node: 0.0 for node in graph.nodes()}


def degree_centrality(graph: SupplyGraph) -> Dict[str, float]:
    """
    Degree centrality for all nodes.

    NetworkX reports 1.0 for a lone node; here a graph with fewer than
    two nodes scores 0 everywhere.
    """
    n = graph.node_count
    if n <= 1:
        return _zeros(graph)

    scale = 1.0 / (n - 1)
    return {node: graph.degree(node) * scale for node in graph.nodes()}


def betweenness_centrality(graph: SupplyGraph) -> Dict[str, float]:
    """
    Directed betweenness centrality for all nodes.

    For every ordered pair (s, t) each intermediate node on a shortest
    s -> t path earns 1 / (number of shortest s -> t paths). Sums are
    normalized by (n - 1)(n - 2).
    """
    if graph.node_count <= 2:
        # No node can sit strictly between two others
        return _zeros(graph)

    scores = nx.betweenness_centrality(graph.graph, normalized=True)
    return {node: float(scores.get(node, 0.0)) for node in graph.nodes()}


def closeness_centrality(graph: SupplyGraph, wf_improved: bool = True) -> Dict[str, float]:
    """
    Outward closeness centrality for all nodes.

    Args:
        graph: Graph snapshot
        wf_improved: Scale by the fraction of the graph a node reaches

    Returns:
        Dict node -> closeness; nodes that reach nothing score 0
    """
    n = graph.node_count
    if n <= 1:
        return _zeros(graph)

    scores = {}
    for node in graph.nodes():
        distances = nx.single_source_shortest_path_length(graph.graph, node)
        total = sum(distances.values())
        reached = len(distances)

        if total > 0:
            score = (reached - 1.0) / total
            if wf_improved:
                score *= (reached - 1.0) / (n - 1)
        else:
            score = 0.0

        scores[node] = score

    return scores


def local_clustering(graph: SupplyGraph) -> Dict[str, float]:
    """
    Local clustering coefficient per node on the undirected projection.

    With k distinct neighbors, k < 2 scores 0, otherwise the number of
    linked neighbor pairs divided by k(k - 1) / 2.
    """
    if graph.node_count <= 1:
        return _zeros(graph)

    coefficients = nx.clustering(graph.to_undirected())
    return {node: float(coefficients.get(node, 0.0)) for node in graph.nodes()}


def global_clustering(graph: SupplyGraph) -> float:
    """Mean of local clustering coefficients (0.0 for an empty graph)."""
    if graph.node_count == 0:
        return 0.0

    local = local_clustering(graph)
    return sum(local.values()) / len(local)


def compute_all_centrality(graph: SupplyGraph) -> CentralityScores:
    """Run every centrality computation on one snapshot."""
    local = local_clustering(graph)
    scores = CentralityScores(
        degree=degree_centrality(graph),
        betweenness=betweenness_centrality(graph),
        closeness=closeness_centrality(graph),
        clustering=local,
        global_clustering=(sum(local.values()) / len(local)) if local else 0.0,
    )

    logger.debug(f"Computed centrality for {graph.node_count} nodes")
    return scores
