"""
Graph Builder - NetworkX-backed supply network graph
====================================================

Builds the in-memory directed graph every analysis runs on. Facilities
become graph nodes and transport routes become directed arcs.

Architecture
------------
    Persistence (node/route records) --> SupplyGraph (NetworkX DiGraph)

    1. One graph node per node record, attributes carried verbatim
    2. One arc per route whose endpoints both exist
    3. Dangling, duplicate and self-loop routes are skipped and logged
       (or rejected, under the strict dangling-edge policy)

The resulting graph is treated as an immutable snapshot by the
centrality and classification code. The disruption simulator works on
``SupplyGraph.copy()``.

Example
-------
    >>> from supplynet.analytics.graph import build_graph
    >>>
    >>> graph = build_graph(nodes, routes)
    >>> graph.node_count, graph.edge_count
    (3, 2)
    >>> graph.out_neighbors('N1')
    ['N2']
"""

import logging
import time
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import networkx as nx

from .config import Config
from .errors import InvalidRequestError
from .models import NodeRecord, RouteRecord

logger = logging.getLogger("Analytics.Graph")

NodeInput = Union[NodeRecord, Mapping[str, Any]]
RouteInput = Union[RouteRecord, Mapping[str, Any]]


class DanglingEdgePolicy(str, Enum):
    """How the builder treats a route with an unknown endpoint."""
    SKIP = "skip"
    ERROR = "error"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "DanglingEdgePolicy":
        """Policy for a caller value, falling back to Config.GRAPH."""
        value = value or Config.GRAPH.ON_DANGLING_EDGE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidRequestError(
                f"Unknown dangling edge policy '{value}'",
                details={"parameter": "on_dangling_edge", "allowed": [p.value for p in cls]},
            )


class SupplyGraph:
    """
    NetworkX-backed supply network graph.

    Directed, no self-loops, at most one arc per ordered node pair.

    Attributes:
        graph: Underlying NetworkX DiGraph
        built_at: Timestamp when graph was constructed

    Example:
        >>> g = SupplyGraph()
        >>> g.add_node('N1', name='Plant')
        >>> g.add_node('N2', name='Warehouse')
        >>> g.add_edge('N1', 'N2', cost=120.0)
        True
        >>> g.degree('N1')
        1
    """

    def __init__(self, graph: Optional[nx.DiGraph] = None):
        self.graph: nx.DiGraph = graph if graph is not None else nx.DiGraph()
        self.built_at = time.time()

    @property
    def node_count(self) -> int:
        """Number of nodes in the graph (order)."""
        return self.graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        """Number of arcs in the graph (size)."""
        return self.graph.number_of_edges()

    def nodes(self) -> List[str]:
        """Node ids in insertion order."""
        return list(self.graph.nodes())

    def edges(self) -> List[Tuple[str, str]]:
        return list(self.graph.edges())

    def add_node(self, node_id: str, **attrs) -> None:
        """Add a node with optional attributes."""
        self.graph.add_node(node_id, **attrs)

    def add_edge(self, source: str, target: str, **attrs) -> bool:
        """
        Add a directed arc.

        Returns:
            False (and adds nothing) for self-loops, duplicate pairs and
            arcs touching unknown nodes; True otherwise.
        """
        if source == target:
            return False
        if not self.has_node(source) or not self.has_node(target):
            return False
        if self.graph.has_edge(source, target):
            return False
        self.graph.add_edge(source, target, **attrs)
        return True

    def has_node(self, node_id: str) -> bool:
        """Check if node exists in graph."""
        return self.graph.has_node(node_id)

    def has_edge(self, source: str, target: str) -> bool:
        """Check if the directed arc source -> target exists."""
        return self.graph.has_edge(source, target)

    def node_attributes(self, node_id: str) -> Dict[str, Any]:
        if not self.has_node(node_id):
            return {}
        return dict(self.graph.nodes[node_id])

    def edge_attributes(self, source: str, target: str) -> Dict[str, Any]:
        return dict(self.graph.get_edge_data(source, target, default={}))

    def out_neighbors(self, node_id: str) -> List[str]:
        """Successors of a node, in arc insertion order."""
        if not self.has_node(node_id):
            return []
        return list(self.graph.successors(node_id))

    def neighbors(self, node_id: str) -> List[str]:
        """Neighbors in either direction (undirected projection)."""
        if not self.has_node(node_id):
            return []
        seen = dict.fromkeys(self.graph.successors(node_id))
        seen.update(dict.fromkeys(self.graph.predecessors(node_id)))
        return list(seen)

    def in_degree(self, node_id: str) -> int:
        if not self.has_node(node_id):
            return 0
        return self.graph.in_degree(node_id)

    def out_degree(self, node_id: str) -> int:
        if not self.has_node(node_id):
            return 0
        return self.graph.out_degree(node_id)

    def degree(self, node_id: str) -> int:
        """Total directed degree (in + out)."""
        return self.in_degree(node_id) + self.out_degree(node_id)

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and all incident arcs. Returns False if absent."""
        if not self.has_node(node_id):
            return False
        self.graph.remove_node(node_id)
        return True

    def remove_edge(self, source: str, target: str) -> bool:
        """Remove a single directed arc. Returns False if absent."""
        if not self.has_edge(source, target):
            return False
        self.graph.remove_edge(source, target)
        return True

    def copy(self) -> "SupplyGraph":
        """Independent copy; attribute dicts are copied too."""
        return SupplyGraph(self.graph.copy())

    def to_undirected(self) -> nx.Graph:
        """Undirected projection: an arc in either direction links the pair."""
        return self.graph.to_undirected(as_view=False)

    def density(self) -> float:
        """
        Density = arcs / (n * (n - 1)).

        Returns 0.0 when n <= 1, where density is undefined.
        """
        n = self.node_count
        if n <= 1:
            return 0.0
        return self.edge_count / (n * (n - 1))

    def to_dict(self) -> dict:
        """Export graph summary as dict."""
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "builtAt": self.built_at,
            "density": round(self.density(), 4),
        }


def as_node_record(record: NodeInput) -> NodeRecord:
    return record if isinstance(record, NodeRecord) else NodeRecord.from_dict(record)


def as_route_record(record: RouteInput) -> RouteRecord:
    return record if isinstance(record, RouteRecord) else RouteRecord.from_dict(record)


def build_graph(
    nodes: Iterable[NodeInput],
    routes: Iterable[RouteInput],
    on_dangling_edge: Optional[Union[DanglingEdgePolicy, str]] = None,
) -> SupplyGraph:
    """
    Build a SupplyGraph from node and route records.

    Args:
        nodes: NodeRecord objects or dicts accepted by NodeRecord.from_dict
        routes: RouteRecord objects or dicts accepted by RouteRecord.from_dict
        on_dangling_edge: "skip" (default from config) drops routes with
            an unknown endpoint; "error" raises InvalidRequestError

    Returns:
        SupplyGraph populated with every node and every valid route
    """
    policy = DanglingEdgePolicy.resolve(on_dangling_edge)
    graph = SupplyGraph()

    for record in nodes:
        node = as_node_record(record)
        graph.add_node(node.node_id, **node.attributes())

    skipped_dangling = 0
    skipped_duplicate = 0
    skipped_loops = 0

    for record in routes:
        route = as_route_record(record)

        if not graph.has_node(route.source) or not graph.has_node(route.target):
            if policy is DanglingEdgePolicy.ERROR:
                missing = [n for n in (route.source, route.target) if not graph.has_node(n)]
                raise InvalidRequestError(
                    f"Route {route.source} -> {route.target} references unknown node(s): {', '.join(missing)}",
                    details={"source": route.source, "target": route.target, "missing": missing},
                )
            logger.debug(f"Skipping route {route.source} -> {route.target}: unknown endpoint")
            skipped_dangling += 1
            continue

        if route.source == route.target:
            logger.debug(f"Skipping self-loop route on {route.source}")
            skipped_loops += 1
            continue

        if graph.has_edge(route.source, route.target):
            logger.debug(f"Edge {route.source} -> {route.target} already exists, skipping")
            skipped_duplicate += 1
            continue

        graph.add_edge(route.source, route.target, **route.attributes())

    logger.debug(
        f"Built graph with {graph.node_count} nodes, {graph.edge_count} edges "
        f"(skipped {skipped_dangling} dangling, {skipped_duplicate} duplicate, "
        f"{skipped_loops} self-loop routes)"
    )

    return graph
