"""
Path Finder - alternative route enumeration
===========================================

Breadth-first enumeration of simple paths between two facilities.

Algorithm
---------
    frontier = FIFO queue seeded with [source]
    pop a partial path:
        - last node == target  -> accept it
        - longer than MAX_PATH_NODES -> drop it
        - otherwise extend along every successor not already on the path
    stop after max_paths accepted paths or an empty frontier

Paths come out roughly ordered by hop count, but they are NOT ranked by
cost. Use rank_paths() to cost and sort them.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional

from .config import Config
from .errors import InvalidRequestError
from .graph import SupplyGraph

logger = logging.getLogger("Analytics.Paths")

RANK_KEYS = ("cost", "distance", "time", "hops")


@dataclass
class PathResult:
    """A path with totals aggregated over its arcs."""
    source: str
    target: str
    path: List[str] = field(default_factory=list)
    hop_count: int = 0
    total_distance: float = 0.0
    total_cost: float = 0.0
    total_time: float = 0.0

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "path": self.path,
            "hops": self.hop_count,
            "totalDistance": round(self.total_distance, 3),
            "totalCost": round(self.total_cost, 3),
            "totalTime": round(self.total_time, 3),
        }


def _require_node_id(value, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(
            f"'{name}' must be a non-empty node id string, got {value!r}",
            details={"parameter": name},
        )
    return value


def find_alternative_paths(
    graph: SupplyGraph,
    source: str,
    target: str,
    max_paths: Optional[int] = None,
) -> List[List[str]]:
    """
    Enumerate up to max_paths simple paths from source to target.

    Args:
        graph: Graph snapshot (not modified)
        source: Start node id
        target: End node id
        max_paths: Maximum number of paths (default from config)

    Returns:
        List of node-id lists. Empty when either endpoint is absent or
        target is unreachable.

    Raises:
        InvalidRequestError: Ids are not non-empty strings, or
            max_paths < 1
    """
    _require_node_id(source, "source")
    _require_node_id(target, "target")

    if max_paths is None:
        max_paths = Config.PATHS.DEFAULT_MAX_PATHS
    if isinstance(max_paths, bool) or not isinstance(max_paths, int) or max_paths < 1:
        raise InvalidRequestError(
            f"'maxPaths' must be a positive integer, got {max_paths!r}",
            details={"parameter": "maxPaths"},
        )

    if not graph.has_node(source) or not graph.has_node(target):
        logger.debug(f"Path search {source} -> {target}: endpoint not in graph")
        return []

    max_nodes = Config.PATHS.MAX_PATH_NODES
    paths: List[List[str]] = []
    frontier = deque([[source]])

    while frontier and len(paths) < max_paths:
        path = frontier.popleft()
        current = path[-1]

        if current == target:
            paths.append(path)
            continue

        if len(path) > max_nodes:
            continue

        for neighbor in graph.out_neighbors(current):
            if neighbor not in path:
                frontier.append(path + [neighbor])

    logger.debug(f"Found {len(paths)} path(s) {source} -> {target}")
    return paths


def path_costs(graph: SupplyGraph, path: List[str]) -> PathResult:
    """Sum distance, cost and time over the arcs of a path."""
    result = PathResult(
        source=path[0] if path else "",
        target=path[-1] if path else "",
        path=list(path),
        hop_count=max(len(path) - 1, 0),
    )

    for u, v in zip(path, path[1:]):
        edge = graph.edge_attributes(u, v)
        result.total_distance += edge.get("distance") or 0
        result.total_cost += edge.get("cost") or 0
        result.total_time += edge.get("time") or 0

    return result


def rank_paths(
    graph: SupplyGraph,
    paths: List[List[str]],
    key: str = "cost",
) -> List[PathResult]:
    """
    Cost every path and sort ascending.

    Args:
        graph: Graph the paths were found on
        paths: Output of find_alternative_paths
        key: One of "cost", "distance", "time", "hops"
    """
    if key not in RANK_KEYS:
        raise InvalidRequestError(
            f"Unknown ranking key '{key}'",
            details={"parameter": "key", "allowed": list(RANK_KEYS)},
        )

    sort_fields = {
        "cost": lambda r: r.total_cost,
        "distance": lambda r: r.total_distance,
        "time": lambda r: r.total_time,
        "hops": lambda r: r.hop_count,
    }

    results = [path_costs(graph, p) for p in paths]
    results.sort(key=sort_fields[key])
    return results
