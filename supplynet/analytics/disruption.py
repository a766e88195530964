"""
Disruption Simulator - what-if removal of a facility or route
=============================================================

Removes one node or one arc from a private copy of the graph and
reports how the network looks afterwards. The caller's graph is never
touched, so concurrent analyses over the same snapshot stay valid.

Operations
----------
    simulate_disruption(graph, target)
        Isolation impact: nodes left with no arcs at all, new order and
        size, recomputed degree and betweenness.

    reachability_delta(graph, target)
        Reachability impact: for every surviving node, the nodes it
        could reach before the removal but not after. A node can lose
        access to a distant cluster without being isolated, which
        simulate_disruption does not report.

    assess_disruption(graph, target)
        Request-level summary: before/after sizes, reachability lost,
        alternative paths around a removed route, and a recommendation.

Missing targets
---------------
With the default "noop" policy a target that is not in the graph is
logged and nothing is removed. The "error" policy raises NotFoundError.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple, Union

import networkx as nx

from .centrality import betweenness_centrality, degree_centrality
from .config import Config
from .errors import InvalidRequestError, NotFoundError
from .graph import SupplyGraph
from .paths import PathResult, find_alternative_paths, rank_paths

logger = logging.getLogger("Analytics.Disruption")


class MissingTargetPolicy(str, Enum):
    """How the simulator treats a target absent from the graph."""
    NOOP = "noop"
    ERROR = "error"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "MissingTargetPolicy":
        """Policy for a caller value, falling back to Config.DISRUPTION."""
        value = value or Config.DISRUPTION.ON_MISSING_TARGET
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidRequestError(
                f"Unknown missing target policy '{value}'",
                details={"parameter": "on_missing_target", "allowed": [p.value for p in cls]},
            )


@dataclass(frozen=True)
class NodeRemoval:
    """Remove a facility and every route touching it."""
    node_id: str

    @property
    def kind(self) -> str:
        return "node"

    @property
    def label(self) -> str:
        return self.node_id


@dataclass(frozen=True)
class EdgeRemoval:
    """Remove a single directed route."""
    source: str
    target: str

    @property
    def kind(self) -> str:
        return "edge"

    @property
    def label(self) -> str:
        return f"{self.source} -> {self.target}"


DisruptionTarget = Union[NodeRemoval, EdgeRemoval]


@dataclass
class DisruptionResult:
    """Outcome of removing one node or arc."""
    target: DisruptionTarget
    applied: bool
    affected_nodes: List[str] = field(default_factory=list)
    node_count_after: int = 0
    edge_count_after: int = 0
    degree: Dict[str, float] = field(default_factory=dict)
    betweenness: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "disruptionType": self.target.kind,
            "disruptedElement": self.target.label,
            "applied": self.applied,
            "affectedNodes": self.affected_nodes,
            "nodeCountAfter": self.node_count_after,
            "edgeCountAfter": self.edge_count_after,
            "newMetrics": {
                "degree": {k: round(v, 4) for k, v in self.degree.items()},
                "betweenness": {k: round(v, 4) for k, v in self.betweenness.items()},
            },
        }


@dataclass
class ReachabilityDelta:
    """Reachability lost by each surviving node after a removal."""
    target: DisruptionTarget
    applied: bool
    lost_reachability: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def lost_pairs(self) -> int:
        return sum(len(v) for v in self.lost_reachability.values())

    @property
    def impacted_nodes(self) -> List[str]:
        return [node for node, lost in self.lost_reachability.items() if lost]

    def to_dict(self) -> dict:
        return {
            "disruptionType": self.target.kind,
            "disruptedElement": self.target.label,
            "applied": self.applied,
            "lostPairs": self.lost_pairs,
            "impactedNodes": self.impacted_nodes,
            "lostReachability": {k: v for k, v in self.lost_reachability.items() if v},
        }


@dataclass
class DisruptionAssessment:
    """Simulation wrapped with before/after context, reachability and alternatives."""
    result: DisruptionResult
    node_count_before: int
    edge_count_before: int
    alternative_paths: List[PathResult] = field(default_factory=list)
    reachability: Optional[ReachabilityDelta] = None

    @property
    def lost_pairs(self) -> int:
        return self.reachability.lost_pairs if self.reachability is not None else 0

    @property
    def recommendation(self) -> str:
        if self.alternative_paths:
            return f"{len(self.alternative_paths)} alternative route(s) available"
        if isinstance(self.result.target, EdgeRemoval):
            return "Critical disruption - no alternative routes available"
        if self.result.affected_nodes:
            return (
                f"Critical disruption - {len(self.result.affected_nodes)} node(s) "
                "would be cut off from the network"
            )
        if self.lost_pairs:
            return (
                f"No facility isolated, but {self.lost_pairs} origin-destination "
                f"pair(s) lose every route ({len(self.reachability.impacted_nodes)} "
                "origin(s) affected)"
            )
        return "No facility isolated and no reachability lost"

    def to_dict(self) -> dict:
        return {
            "disruptionType": self.result.target.kind,
            "disruptedElement": self.result.target.label,
            "impact": {
                "affectedNodes": self.result.affected_nodes,
                "networkSizeBefore": self.node_count_before,
                "networkSizeAfter": self.result.node_count_after,
                "edgesBefore": self.edge_count_before,
                "edgesAfter": self.result.edge_count_after,
                "nodesDisconnected": len(self.result.affected_nodes),
                "lostPairs": self.lost_pairs,
                "impactedNodes": self.reachability.impacted_nodes if self.reachability else [],
            },
            "alternativePaths": [p.to_dict() for p in self.alternative_paths],
            "recommendation": self.recommendation,
        }


def disruption_target(
    node_id: Optional[str] = None,
    edge_source: Optional[str] = None,
    edge_target: Optional[str] = None,
) -> DisruptionTarget:
    """
    Build a disruption target from loose request parameters.

    Exactly one of node_id or the (edge_source, edge_target) pair must
    be given.

    Raises:
        InvalidRequestError: Neither, both, or only half an edge given
    """
    has_node = bool(node_id)
    has_source = bool(edge_source)
    has_target = bool(edge_target)

    if has_node and (has_source or has_target):
        raise InvalidRequestError(
            "Provide either nodeId or edgeSource/edgeTarget, not both",
            details={"nodeId": node_id, "edgeSource": edge_source, "edgeTarget": edge_target},
        )
    if has_node:
        if not isinstance(node_id, str):
            raise InvalidRequestError(f"'nodeId' must be a string, got {node_id!r}")
        return NodeRemoval(node_id)
    if has_source and has_target:
        if not isinstance(edge_source, str) or not isinstance(edge_target, str):
            raise InvalidRequestError("'edgeSource' and 'edgeTarget' must be strings")
        return EdgeRemoval(edge_source, edge_target)

    raise InvalidRequestError(
        "Please provide either nodeId or both edgeSource and edgeTarget",
        details={"nodeId": node_id, "edgeSource": edge_source, "edgeTarget": edge_target},
    )


def _apply_removal(
    graph: SupplyGraph,
    target: DisruptionTarget,
    on_missing_target: Optional[Union[MissingTargetPolicy, str]],
) -> Tuple[SupplyGraph, bool]:
    """Copy the graph and remove the target from the copy."""
    if not isinstance(target, (NodeRemoval, EdgeRemoval)):
        raise InvalidRequestError(
            f"Disruption target must be NodeRemoval or EdgeRemoval, got {type(target).__name__}"
        )

    policy = MissingTargetPolicy.resolve(on_missing_target)
    simulated = graph.copy()

    if isinstance(target, NodeRemoval):
        applied = simulated.remove_node(target.node_id)
    else:
        applied = simulated.remove_edge(target.source, target.target)

    if not applied:
        if policy is MissingTargetPolicy.ERROR:
            raise NotFoundError(
                f"{target.kind.capitalize()} '{target.label}' not found in network",
                details={"type": target.kind, "target": target.label},
            )
        logger.info(f"Disruption target {target.label} not in graph, nothing removed")

    return simulated, applied


def _disruption_result(
    simulated: SupplyGraph,
    target: DisruptionTarget,
    applied: bool,
) -> DisruptionResult:
    affected = [node for node in simulated.nodes() if simulated.degree(node) == 0]

    logger.debug(
        f"Disruption {target.label}: {len(affected)} isolated node(s), "
        f"{simulated.node_count} nodes / {simulated.edge_count} edges remain"
    )
    return DisruptionResult(
        target=target,
        applied=applied,
        affected_nodes=affected,
        node_count_after=simulated.node_count,
        edge_count_after=simulated.edge_count,
        degree=degree_centrality(simulated),
        betweenness=betweenness_centrality(simulated),
    )


def _reachable_sets(graph: SupplyGraph) -> Dict[str, Set[str]]:
    return {node: nx.descendants(graph.graph, node) for node in graph.nodes()}


def _reachability(
    graph: SupplyGraph,
    simulated: SupplyGraph,
    target: DisruptionTarget,
    applied: bool,
) -> ReachabilityDelta:
    before = _reachable_sets(graph)
    after = _reachable_sets(simulated)
    removed = {target.node_id} if isinstance(target, NodeRemoval) else set()

    lost: Dict[str, List[str]] = {}
    for node in simulated.nodes():
        still = after.get(node, set())
        # Keep graph order for deterministic output
        lost[node] = [
            other for other in graph.nodes()
            if other in before[node] and other not in still and other not in removed
        ]

    delta = ReachabilityDelta(target=target, applied=applied, lost_reachability=lost)
    logger.debug(f"Reachability delta for {target.label}: {delta.lost_pairs} pair(s) lost")
    return delta


def simulate_disruption(
    graph: SupplyGraph,
    target: DisruptionTarget,
    on_missing_target: Optional[Union[MissingTargetPolicy, str]] = None,
) -> DisruptionResult:
    """
    Simulate removing one facility or route.

    Args:
        graph: Graph snapshot (never mutated)
        target: NodeRemoval or EdgeRemoval
        on_missing_target: "noop" (default from config) or "error"

    Returns:
        DisruptionResult; affected_nodes lists nodes left with total
        degree 0, in graph order
    """
    simulated, applied = _apply_removal(graph, target, on_missing_target)
    return _disruption_result(simulated, target, applied)


def reachability_delta(
    graph: SupplyGraph,
    target: DisruptionTarget,
    on_missing_target: Optional[Union[MissingTargetPolicy, str]] = None,
) -> ReachabilityDelta:
    """
    Compare directed reachability before and after a removal.

    The removed node itself is excluded from both the sources and the
    lost targets; only surviving pairs are reported.
    """
    simulated, applied = _apply_removal(graph, target, on_missing_target)
    return _reachability(graph, simulated, target, applied)


def assess_disruption(
    graph: SupplyGraph,
    target: DisruptionTarget,
    max_paths: Optional[int] = None,
    on_missing_target: Optional[Union[MissingTargetPolicy, str]] = None,
) -> DisruptionAssessment:
    """
    Simulate a disruption and look for ways around it.

    The removal is applied once; isolation, reachability loss and, for
    a removed route, alternative paths between its endpoints (ranked by
    cost) are all read from that one disrupted copy.
    """
    simulated, applied = _apply_removal(graph, target, on_missing_target)

    alternatives: List[PathResult] = []
    if isinstance(target, EdgeRemoval):
        paths = find_alternative_paths(simulated, target.source, target.target, max_paths)
        alternatives = rank_paths(simulated, paths)

    return DisruptionAssessment(
        result=_disruption_result(simulated, target, applied),
        node_count_before=graph.node_count,
        edge_count_before=graph.edge_count,
        alternative_paths=alternatives,
        reachability=_reachability(graph, simulated, target, applied),
    )
