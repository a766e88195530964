"""
Analytics API - CherryPy endpoints for supply network analysis
==============================================================

Provides REST endpoints for:
    - Consolidated network metrics (with write-back to node records)
    - Bottleneck and critical node listings
    - Disruption simulation and reachability impact
    - Alternative path search with cost aggregation
    - Network health score and recommendations

Every request loads a fresh snapshot of nodes and routes from the
store and runs the analysis on it; nothing is cached between requests.

Error Response Format
--------------------
All errors follow a consistent format:

    {
        "success": False,
        "error": {
            "code": "INVALID_PARAMETER",
            "message": "...",
            "httpStatus": 400,
            "details": {...}
        }
    }

Success Response Format
-----------------------
    {
        "success": True,
        "data": {...}
    }
"""

import logging
from typing import List, Tuple

import cherrypy

from supplynet.analytics.db import SupplyChainDB
from supplynet.analytics.errors import EmptyGraphError, api_success, api_error_from_exception
from supplynet.analytics.validation import (
    ValidationError,
    validate_bool,
    validate_max_paths,
    validate_node_param,
    validate_string_choice,
    validate_threshold,
)
from supplynet.analytics.graph import SupplyGraph, build_graph
from supplynet.analytics.metrics import compute_graph_metrics
from supplynet.analytics.models import NodeRecord, RouteRecord
from supplynet.analytics.disruption import (
    assess_disruption,
    disruption_target,
    reachability_delta,
)
from supplynet.analytics.paths import RANK_KEYS, find_alternative_paths, rank_paths
from supplynet.analytics.network_health import assess_network_health

logger = logging.getLogger("AnalyticsAPI")


class AnalyticsAPI:
    """
    CherryPy-mounted API for analytics endpoints.

    Mount at /api/analytics for URLs like:
        GET /api/analytics/metrics
        GET /api/analytics/bottlenecks
        GET /api/analytics/simulate_disruption?nodeId=N2

    Error Handling:
        All endpoints use standardized error responses via the errors module.
        ValidationErrors from the validation module are automatically converted
        to proper API error responses.
    """

    def __init__(self, db_path):
        """
        Initialize analytics API.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = db_path
        self._db = SupplyChainDB(db_path)

    def _load_snapshot(self) -> Tuple[List[NodeRecord], List[RouteRecord]]:
        """Load nodes and routes, failing fast when the store is empty."""
        nodes = self._db.load_nodes()
        if not nodes:
            raise EmptyGraphError()
        return nodes, self._db.load_routes()

    def _load_graph(self) -> SupplyGraph:
        nodes, routes = self._load_snapshot()
        return build_graph(nodes, routes)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def metrics(self, bottleneckThreshold=None, criticalThreshold=None, writeBack=True):
        """
        GET /api/analytics/metrics

        Compute centrality, classification and network statistics.

        Query params:
            bottleneckThreshold: Override bottleneck threshold (0-1)
            criticalThreshold: Override critical threshold (0-1)
            writeBack: Persist per-node metrics onto node records (default: true)

        Returns:
            MetricsResult with nodeMetrics, networkStats, bottlenecks, criticalNodes
        """
        try:
            bottleneck = validate_threshold(bottleneckThreshold, "bottleneckThreshold")
            critical = validate_threshold(criticalThreshold, "criticalThreshold")
            write_back = validate_bool(writeBack, "writeBack", default=True)

            result = compute_graph_metrics(self._load_graph(), bottleneck, critical)

            updated = 0
            if write_back:
                updated = self._db.save_node_metrics(result)

            return api_success(result.to_dict(), updatedNodes=updated)

        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error computing metrics: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def bottlenecks(self, threshold=None):
        """
        GET /api/analytics/bottlenecks

        Nodes whose normalized betweenness meets the threshold, highest first.

        Query params:
            threshold: Override bottleneck threshold (0-1)
        """
        try:
            threshold_val = validate_threshold(threshold, "threshold")
            result = compute_graph_metrics(self._load_graph(), bottleneck_threshold=threshold_val)
            items = [b.to_dict() for b in result.bottlenecks]
            return api_success(items, count=len(items))

        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error getting bottlenecks: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def critical_nodes(self, threshold=None):
        """
        GET /api/analytics/critical_nodes

        Nodes whose combined degree/betweenness criticality meets the threshold.

        Query params:
            threshold: Override critical threshold (0-1)
        """
        try:
            threshold_val = validate_threshold(threshold, "threshold")
            result = compute_graph_metrics(self._load_graph(), critical_threshold=threshold_val)
            items = [c.to_dict() for c in result.critical_nodes]
            return api_success(items, count=len(items))

        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error getting critical nodes: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def simulate_disruption(self, nodeId=None, edgeSource=None, edgeTarget=None, maxPaths=None):
        """
        GET /api/analytics/simulate_disruption

        Simulate removing a facility or a route.

        Query params:
            nodeId: Facility to remove
            edgeSource, edgeTarget: Route to remove (both required)
            maxPaths: Max alternative paths for a removed route (default: 5)

        Returns:
            Impact summary, alternative paths and a recommendation
        """
        try:
            node_id = validate_node_param(nodeId, "nodeId", required=False)
            source = validate_node_param(edgeSource, "edgeSource", required=False)
            target = validate_node_param(edgeTarget, "edgeTarget", required=False)
            max_paths = validate_max_paths(maxPaths)

            disruption = disruption_target(node_id, source, target)
            assessment = assess_disruption(self._load_graph(), disruption, max_paths=max_paths)
            return api_success(assessment.to_dict())

        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error simulating disruption: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def reachability(self, nodeId=None, edgeSource=None, edgeTarget=None):
        """
        GET /api/analytics/reachability

        Which surviving nodes lose reach to which others after a removal.

        Query params:
            nodeId: Facility to remove
            edgeSource, edgeTarget: Route to remove (both required)
        """
        try:
            node_id = validate_node_param(nodeId, "nodeId", required=False)
            source = validate_node_param(edgeSource, "edgeSource", required=False)
            target = validate_node_param(edgeTarget, "edgeTarget", required=False)

            disruption = disruption_target(node_id, source, target)
            delta = reachability_delta(self._load_graph(), disruption)
            return api_success(delta.to_dict())

        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error computing reachability delta: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def find_paths(self, source=None, target=None, maxPaths=None, rankBy="cost"):
        """
        GET /api/analytics/find_paths

        Alternative paths between two facilities, costed and sorted.

        Query params:
            source: Start node id (required)
            target: End node id (required)
            maxPaths: Maximum paths to return (default: 5, max: 50)
            rankBy: cost, distance, time or hops (default: cost)
        """
        try:
            source_id = validate_node_param(source, "source")
            target_id = validate_node_param(target, "target")
            max_paths = validate_max_paths(maxPaths)
            rank_key = validate_string_choice(rankBy, "rankBy", list(RANK_KEYS), default="cost")

            graph = self._load_graph()
            paths = find_alternative_paths(graph, source_id, target_id, max_paths)
            ranked = [p.to_dict() for p in rank_paths(graph, paths, key=rank_key)]

            return api_success({
                "source": source_id,
                "target": target_id,
                "paths": ranked,
                "count": len(ranked),
            })

        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error finding paths: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def network_health(self):
        """
        GET /api/analytics/network_health

        Overall health score (0-100), status label and recommendations.
        """
        try:
            nodes, routes = self._load_snapshot()
            report = assess_network_health(nodes, routes)
            return api_success(report.to_dict())

        except Exception as e:
            logger.error(f"Error getting network health: {e}")
            return api_error_from_exception(e)
