"""
Network Data API - CherryPy endpoints for facilities and routes
===============================================================

Provides REST endpoints for:
    - Listing nodes and routes with exact-match filters
    - Per-node lookup and routes touching a node
    - Summary counts grouped by type, status, region, mode and risk
    - JSON bulk upload (nodes first, then routes)
    - Clearing the store

The analytics endpoints read whatever this API has written; an empty
store makes them answer EMPTY_GRAPH.

Upload Body
-----------
    POST /api/data/upload
    {
        "nodes":  [{"nodeId": "W1", "name": "Central", "type": "warehouse"}, ...],
        "routes": [{"source": "S1", "target": "W1", "cost": 120}, ...]
    }

Either list may be omitted. Records that fail to parse are reported in
errorDetails and skipped; the rest are written. Routes whose endpoints
are not stored nodes are skipped and listed in missingNodes. Within one
upload the first route for a (source, target) pair wins.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import cherrypy

from supplynet.analytics.db import SupplyChainDB, unique_routes
from supplynet.analytics.errors import (
    InvalidRequestError,
    api_error_from_exception,
    api_success,
    invalid_param,
    not_found,
)
from supplynet.analytics.models import (
    NodeRecord,
    NodeStatus,
    NodeType,
    RiskLevel,
    RouteRecord,
    RouteStatus,
    TransportMode,
)
from supplynet.analytics.validation import (
    ValidationError,
    validate_node_param,
    validate_string_choice,
)

logger = logging.getLogger("NetworkDataAPI")


def _optional_choice(value, name: str, enum_cls) -> Optional[str]:
    if value is None or value == "":
        return None
    return validate_string_choice(value, name, [e.value for e in enum_cls])


def _parse_records(items: List[Any], parser) -> Tuple[list, List[Dict[str, Any]]]:
    """Parse each item, collecting failures by index instead of aborting."""
    records = []
    errors = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append({"index": index, "error": "record must be an object"})
            continue
        try:
            records.append(parser(item))
        except InvalidRequestError as e:
            errors.append({"index": index, "error": e.message})
    return records, errors


class NetworkDataAPI:
    """
    CherryPy-mounted API for network data.

    Mount at /api/data for URLs like:
        GET    /api/data/nodes?type=supplier&region=EU
        GET    /api/data/node?nodeId=W1
        GET    /api/data/routes?transportMode=sea
        GET    /api/data/node_stats
        POST   /api/data/upload
        DELETE /api/data/clear_all
    """

    def __init__(self, db_path):
        self.db_path = db_path
        self._db = SupplyChainDB(db_path)

    def _require_method(self, *methods: str):
        if cherrypy.request.method not in methods:
            cherrypy.response.headers['Allow'] = ', '.join(methods)
            raise cherrypy.HTTPError(405, f"Method not allowed. This endpoint requires {' or '.join(methods)}.")

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def nodes(self, type=None, status=None, region=None):
        """
        GET /api/data/nodes

        Query params:
            type: Facility type (supplier, warehouse, ...)
            status: active, inactive or disrupted
            region: Exact region name
        """
        try:
            nodes = self._db.load_nodes(
                type=_optional_choice(type, "type", NodeType),
                status=_optional_choice(status, "status", NodeStatus),
                region=region or None,
            )
            return api_success([n.to_dict() for n in nodes], count=len(nodes))
        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error listing nodes: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def node(self, nodeId=None):
        """GET /api/data/node?nodeId=W1"""
        try:
            node_id = validate_node_param(nodeId, "nodeId")
            node = self._db.load_node(node_id)
            if node is None:
                return not_found("Node", node_id)
            return api_success(node.to_dict())
        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error loading node {nodeId}: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def routes(self, status=None, transportMode=None, riskLevel=None, nodeId=None):
        """
        GET /api/data/routes

        Query params:
            status: active, inactive, disrupted or congested
            transportMode: road, rail, air, sea, multimodal or other
            riskLevel: low, medium, high or critical
            nodeId: Only routes starting or ending at this facility
        """
        try:
            routes = self._db.load_routes(
                status=_optional_choice(status, "status", RouteStatus),
                transport_mode=_optional_choice(transportMode, "transportMode", TransportMode),
                risk_level=_optional_choice(riskLevel, "riskLevel", RiskLevel),
                node_id=validate_node_param(nodeId, "nodeId", required=False),
            )
            return api_success([r.to_dict() for r in routes], count=len(routes))
        except ValidationError as e:
            return e.to_response()
        except Exception as e:
            logger.error(f"Error listing routes: {e}")
            return api_error_from_exception(e)

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def node_stats(self):
        """GET /api/data/node_stats - node counts by type, status and region."""
        try:
            by_type = self._db.count_by("nodes", "type")
            return api_success({
                "totalNodes": sum(by_type.values()),
                "byType": by_type,
                "byStatus": self._db.count_by("nodes", "status"),
                "byRegion": self._db.count_by("nodes", "region"),
            })
        except Exception as e:
            logger.error(f"Error summarizing nodes: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def route_stats(self):
        """GET /api/data/route_stats - route counts by status, mode and risk."""
        try:
            by_status = self._db.count_by("routes", "status")
            return api_success({
                "totalRoutes": sum(by_status.values()),
                "byStatus": by_status,
                "byTransportMode": self._db.count_by("routes", "transport_mode"),
                "byRiskLevel": self._db.count_by("routes", "risk_level"),
            })
        except Exception as e:
            logger.error(f"Error summarizing routes: {e}")
            return api_error_from_exception(e)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @cherrypy.expose
    @cherrypy.tools.json_out()
    @cherrypy.tools.json_in()
    def upload(self):
        """
        POST /api/data/upload

        Upsert nodes, then routes, from a JSON body. See module docstring.
        """
        try:
            self._require_method("POST")
            body = getattr(cherrypy.request, "json", None)
            if not isinstance(body, dict):
                return invalid_param("body", "must be a JSON object with 'nodes' and/or 'routes'")

            node_items = body.get("nodes") or []
            route_items = body.get("routes") or []
            if not isinstance(node_items, list):
                return invalid_param("nodes", "must be a list", type(node_items).__name__)
            if not isinstance(route_items, list):
                return invalid_param("routes", "must be a list", type(route_items).__name__)

            nodes, node_errors = _parse_records(node_items, NodeRecord.from_dict)
            inserted_nodes = self._db.upsert_nodes(nodes) if nodes else 0

            routes, route_errors = _parse_records(route_items, RouteRecord.from_dict)
            known = {n.node_id for n in self._db.load_nodes()}
            missing = []
            linked = []
            for route in routes:
                absent = [n for n in (route.source, route.target) if n not in known]
                if absent:
                    missing.extend(n for n in absent if n not in missing)
                    continue
                linked.append(route)
            linked, duplicates = unique_routes(linked)
            inserted_routes = self._db.upsert_routes(linked) if linked else 0

            logger.info(
                f"Upload: {inserted_nodes} node(s), {inserted_routes} route(s), "
                f"{len(node_errors) + len(route_errors)} invalid record(s)"
            )
            return api_success(
                {
                    "nodes": {
                        "total": len(node_items),
                        "inserted": inserted_nodes,
                        "errors": len(node_errors),
                        "errorDetails": node_errors,
                    },
                    "routes": {
                        "total": len(route_items),
                        "inserted": inserted_routes,
                        "errors": len(route_errors),
                        "errorDetails": route_errors,
                        "duplicates": len(duplicates),
                        "duplicateDetails": [
                            {"source": r.source, "target": r.target} for r in duplicates
                        ],
                        "skipped": len(routes) - len(linked) - len(duplicates),
                        "missingNodes": missing,
                    },
                },
                message="Upload complete",
            )
        except cherrypy.HTTPError:
            raise
        except Exception as e:
            logger.error(f"Error uploading network data: {e}")
            return api_error_from_exception(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def clear_all(self):
        """DELETE /api/data/clear_all - remove every node and route."""
        try:
            self._require_method("DELETE", "POST")
            nodes_deleted, routes_deleted = self._db.clear()
            return api_success(
                {"nodesDeleted": nodes_deleted, "routesDeleted": routes_deleted},
                message="All data cleared successfully",
            )
        except cherrypy.HTTPError:
            raise
        except Exception as e:
            logger.error(f"Error clearing data: {e}")
            return api_error_from_exception(e)
