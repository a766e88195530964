"""
Analytics Module for supplynet
==============================

Structural analysis of supply-chain networks: which facilities carry
the most traffic, which would hurt most to lose, and what happens to
the network when one of them (or one route) goes down.

Architecture Overview
---------------------
Every analysis is computed fresh from a snapshot of node and route
records. The core is synchronous and side-effect free; persistence and
HTTP live at the edges.

    records --> build_graph --> centrality --> classifier --> MetricsResult
                     |
                     +--> disruption (on a copy)
                     +--> paths

Components
----------
    graph:
        SupplyGraph (NetworkX DiGraph wrapper) and build_graph, which
        skips dangling, duplicate and self-loop routes.

    centrality:
        Degree, betweenness, closeness and clustering per node, plus
        the global clustering coefficient.

    classifier:
        Bottlenecks (normalized betweenness) and critical nodes
        (combined degree and betweenness).

    disruption:
        What-if removal of a node or route, isolation impact and
        reachability delta, alternatives around a removed route.

    paths:
        Bounded BFS enumeration of alternative simple paths, with
        distance/cost/time aggregation and ranking.

    metrics:
        One-call pipeline producing MetricsResult.

    network_health:
        0-100 health score, status label and recommendations.

    db:
        SQLite node/route store with filtered loads, grouped counts
        and metric write-back.

API Endpoints
-------------
Mounted at /api/analytics/ by main.py:

    GET /api/analytics/metrics
    GET /api/analytics/bottlenecks
    GET /api/analytics/critical_nodes
    GET /api/analytics/simulate_disruption?nodeId=N2
    GET /api/analytics/reachability?edgeSource=N1&edgeTarget=N2
    GET /api/analytics/find_paths?source=N1&target=N4
    GET /api/analytics/network_health

Node and route data is loaded and listed through /api/data/ (see
supplynet.web.network_data_api):

    POST   /api/data/upload
    GET    /api/data/nodes?type=supplier
    GET    /api/data/routes?transportMode=sea
    GET    /api/data/node_stats
    DELETE /api/data/clear_all

Usage Example
-------------
    from supplynet.analytics import compute_metrics, build_graph, simulate_disruption, NodeRemoval

    result = compute_metrics(nodes, routes)
    print([b.node_id for b in result.bottlenecks])

    graph = build_graph(nodes, routes)
    impact = simulate_disruption(graph, NodeRemoval("N2"))
    print(impact.affected_nodes)
"""

from .models import (
    NodeType,
    NodeStatus,
    RouteStatus,
    TransportMode,
    RiskLevel,
    NodeRecord,
    RouteRecord,
)
from .graph import (
    SupplyGraph,
    DanglingEdgePolicy,
    build_graph,
)
from .centrality import (
    CentralityScores,
    degree_centrality,
    betweenness_centrality,
    closeness_centrality,
    local_clustering,
    global_clustering,
    compute_all_centrality,
)
from .classifier import (
    ClassifierThresholds,
    BottleneckNode,
    CriticalNode,
    identify_bottlenecks,
    identify_critical_nodes,
)
from .paths import (
    PathResult,
    find_alternative_paths,
    path_costs,
    rank_paths,
)
from .disruption import (
    MissingTargetPolicy,
    NodeRemoval,
    EdgeRemoval,
    DisruptionResult,
    ReachabilityDelta,
    DisruptionAssessment,
    disruption_target,
    simulate_disruption,
    reachability_delta,
    assess_disruption,
)
from .metrics import (
    NodeMetrics,
    NetworkStats,
    MetricsResult,
    compute_metrics,
    compute_graph_metrics,
    metrics_for_write_back,
)
from .network_health import (
    NetworkHealthReport,
    Recommendation,
    assess_network_health,
    calculate_health_score,
)
from .db import SupplyChainDB, unique_routes
from .errors import (
    ErrorCode,
    AnalyticsError,
    EmptyGraphError,
    InvalidRequestError,
    NotFoundError,
    DatabaseError,
    api_success,
    api_error,
    api_error_from_exception,
    invalid_param,
    missing_param,
    not_found,
)
from .config import Config, reload_config
from .validation import (
    ValidationError,
    validate_positive_int,
    validate_threshold,
    validate_max_paths,
    validate_node_param,
    validate_bool,
    validate_string_choice,
)

__all__ = [
    # Models
    "NodeType",
    "NodeStatus",
    "RouteStatus",
    "TransportMode",
    "RiskLevel",
    "NodeRecord",
    "RouteRecord",
    # Graph
    "SupplyGraph",
    "DanglingEdgePolicy",
    "build_graph",
    # Centrality
    "CentralityScores",
    "degree_centrality",
    "betweenness_centrality",
    "closeness_centrality",
    "local_clustering",
    "global_clustering",
    "compute_all_centrality",
    # Classifier
    "ClassifierThresholds",
    "BottleneckNode",
    "CriticalNode",
    "identify_bottlenecks",
    "identify_critical_nodes",
    # Paths
    "PathResult",
    "find_alternative_paths",
    "path_costs",
    "rank_paths",
    # Disruption
    "MissingTargetPolicy",
    "NodeRemoval",
    "EdgeRemoval",
    "DisruptionResult",
    "ReachabilityDelta",
    "DisruptionAssessment",
    "disruption_target",
    "simulate_disruption",
    "reachability_delta",
    "assess_disruption",
    # Metrics
    "NodeMetrics",
    "NetworkStats",
    "MetricsResult",
    "compute_metrics",
    "compute_graph_metrics",
    "metrics_for_write_back",
    # Network health
    "NetworkHealthReport",
    "Recommendation",
    "assess_network_health",
    "calculate_health_score",
    # Database
    "SupplyChainDB",
    "unique_routes",
    # Errors
    "ErrorCode",
    "AnalyticsError",
    "EmptyGraphError",
    "InvalidRequestError",
    "NotFoundError",
    "DatabaseError",
    "api_success",
    "api_error",
    "api_error_from_exception",
    "invalid_param",
    "missing_param",
    "not_found",
    # Config
    "Config",
    "reload_config",
    # Validation
    "ValidationError",
    "validate_positive_int",
    "validate_threshold",
    "validate_max_paths",
    "validate_node_param",
    "validate_bool",
    "validate_string_choice",
]
