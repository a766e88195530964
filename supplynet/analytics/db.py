"""
Node and Route Store
====================

SQLite persistence for facilities and routes, plus write-back of the
metrics computed by the analysis engine.

The analysis core never touches the database: callers load a snapshot
with load_nodes()/load_routes(), run the engine, and optionally persist
per-node metrics with save_node_metrics().

Tables
------
    nodes:  one row per facility, metric columns filled by write-back
    routes: one row per directed route, unique on (source, target)

Usage
-----
    from supplynet.analytics.db import SupplyChainDB

    db = SupplyChainDB("/var/lib/supplynet/supplynet.db")
    db.upsert_nodes(nodes)
    db.upsert_routes(routes)

    result = compute_metrics(db.load_nodes(), db.load_routes())
    db.save_node_metrics(result)

Thread Safety Notes
-------------------
    - Each call opens its own connection (via connection() context)
    - Don't pass connection objects between threads
    - The SupplyChainDB instance itself is thread-safe to share
"""

import json
import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import DatabaseError
from .graph import NodeInput, RouteInput, as_node_record, as_route_record
from .metrics import MetricsResult, metrics_for_write_back
from .models import NodeRecord, RouteRecord

logger = logging.getLogger("Analytics.DB")

# SQLite configuration for a read-heavy analysis workload
SQLITE_PRAGMAS = {
    "journal_mode": "WAL",          # Write-Ahead Logging for concurrency
    "synchronous": "NORMAL",        # Balance safety and speed
    "temp_store": "MEMORY",         # Temp tables in memory
    "busy_timeout": 30000,          # 30s timeout for locked DB
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS nodes (
    node_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    latitude REAL,
    longitude REAL,
    capacity REAL DEFAULT 0,
    region TEXT,
    country TEXT,
    city TEXT,
    status TEXT DEFAULT 'active',
    metadata TEXT,
    degree_centrality REAL DEFAULT 0,
    betweenness_centrality REAL DEFAULT 0,
    closeness_centrality REAL DEFAULT 0,
    clustering_coefficient REAL DEFAULT 0,
    is_bottleneck INTEGER DEFAULT 0,
    is_critical INTEGER DEFAULT 0,
    metrics_updated_at REAL
);

CREATE TABLE IF NOT EXISTS routes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source TEXT NOT NULL,
    target TEXT NOT NULL,
    distance REAL DEFAULT 0,
    cost REAL DEFAULT 0,
    time REAL DEFAULT 0,
    capacity REAL DEFAULT 0,
    status TEXT DEFAULT 'active',
    transport_mode TEXT DEFAULT 'road',
    risk_level TEXT DEFAULT 'low',
    metadata TEXT,
    UNIQUE (source, target)
);

CREATE INDEX IF NOT EXISTS idx_nodes_type ON nodes(type);
CREATE INDEX IF NOT EXISTS idx_nodes_status ON nodes(status);
CREATE INDEX IF NOT EXISTS idx_routes_status ON routes(status);
CREATE INDEX IF NOT EXISTS idx_routes_source ON routes(source);
CREATE INDEX IF NOT EXISTS idx_routes_target ON routes(target);
"""

# Columns added after the first schema; older files get them on open
ADDED_NODE_COLUMNS = [
    ("country", "TEXT"),
    ("city", "TEXT"),
]

# (table, column) pairs exposed through count_by()
GROUPABLE_COLUMNS = {
    ("nodes", "type"),
    ("nodes", "status"),
    ("nodes", "region"),
    ("routes", "status"),
    ("routes", "transport_mode"),
    ("routes", "risk_level"),
}


def _where(filters: Dict[str, Optional[str]]) -> Tuple[str, list]:
    """WHERE clause matching every non-None filter exactly."""
    clauses = []
    params = []
    for column, value in filters.items():
        if value is not None:
            clauses.append(f"{column} = ?")
            params.append(value)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def unique_routes(records: Iterable[RouteRecord]) -> Tuple[List[RouteRecord], List[RouteRecord]]:
    """
    Split routes into first-seen per (source, target) and the later
    duplicates, both in input order.
    """
    seen = set()
    unique = []
    duplicates = []
    for record in records:
        key = (record.source, record.target)
        if key in seen:
            duplicates.append(record)
            continue
        seen.add(key)
        unique.append(record)
    return unique, duplicates


class SupplyChainDB:
    """
    SQLite-backed store for nodes and routes.

    Attributes:
        db_path: Path to the SQLite database file

    Example:
        >>> db = SupplyChainDB(tmp_path / "net.db")
        >>> db.upsert_nodes([{"nodeId": "N1", "name": "Plant", "type": "manufacturer"}])
        1
        >>> [n.node_id for n in db.load_nodes()]
        ['N1']
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.init_tables()

        logger.info(f"SupplyChainDB initialized: {self.db_path}")

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        """Apply standard pragmas to a new connection."""
        for pragma, value in SQLITE_PRAGMAS.items():
            try:
                conn.execute(f"PRAGMA {pragma} = {value}")
            except sqlite3.Error as e:
                logger.warning(f"Failed to set PRAGMA {pragma}: {e}")

        conn.row_factory = sqlite3.Row

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for database connections.

        Commits on success, rolls back on error, always closes.
        sqlite3 errors are re-raised as DatabaseError.
        """
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        except sqlite3.Error as e:
            logger.error(f"Failed to connect to database: {e}")
            raise DatabaseError(f"Cannot connect to {self.db_path}: {e}") from e

        self._configure_connection(conn)
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database operation failed: {e}")
            raise DatabaseError(f"Database operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_tables(self) -> None:
        """Create tables and indexes if missing, adding columns newer than the file."""
        with self.connection() as conn:
            conn.executescript(SCHEMA)
            existing = {row["name"] for row in conn.execute("PRAGMA table_info(nodes)")}
            for column, sql_type in ADDED_NODE_COLUMNS:
                if column not in existing:
                    conn.execute(f"ALTER TABLE nodes ADD COLUMN {column} {sql_type}")
                    logger.info(f"Added nodes.{column} column")

    def upsert_nodes(self, nodes: Iterable[NodeInput]) -> int:
        """Insert or replace facility rows. Computed metrics are preserved."""
        records = [as_node_record(n) for n in nodes]
        with self.connection() as conn:
            conn.executemany("""
                INSERT INTO nodes (node_id, name, type, latitude, longitude,
                                   capacity, region, country, city, status, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(node_id) DO UPDATE SET
                    name = excluded.name,
                    type = excluded.type,
                    latitude = excluded.latitude,
                    longitude = excluded.longitude,
                    capacity = excluded.capacity,
                    region = excluded.region,
                    country = excluded.country,
                    city = excluded.city,
                    status = excluded.status,
                    metadata = excluded.metadata
            """, [
                (
                    n.node_id, n.name, n.type.value, n.latitude, n.longitude,
                    n.capacity, n.region, n.country, n.city, n.status.value,
                    json.dumps(n.metadata),
                )
                for n in records
            ])
        logger.debug(f"Upserted {len(records)} node(s)")
        return len(records)

    def upsert_routes(self, routes: Iterable[RouteInput]) -> int:
        """
        Insert or replace route rows keyed by (source, target).

        Within one batch the first route for a pair wins; later ones are
        dropped before writing. A pair already stored from an earlier
        batch is updated in place.

        Returns:
            Number of routes written
        """
        records, duplicates = unique_routes(as_route_record(r) for r in routes)
        if duplicates:
            logger.debug(f"Dropped {len(duplicates)} duplicate route(s) from batch")

        with self.connection() as conn:
            conn.executemany("""
                INSERT INTO routes (source, target, distance, cost, time, capacity,
                                    status, transport_mode, risk_level, metadata)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(source, target) DO UPDATE SET
                    distance = excluded.distance,
                    cost = excluded.cost,
                    time = excluded.time,
                    capacity = excluded.capacity,
                    status = excluded.status,
                    transport_mode = excluded.transport_mode,
                    risk_level = excluded.risk_level,
                    metadata = excluded.metadata
            """, [
                (
                    r.source, r.target, r.distance, r.cost, r.time, r.capacity,
                    r.status.value, r.transport_mode.value, r.risk_level.value,
                    json.dumps(r.metadata),
                )
                for r in records
            ])
        logger.debug(f"Upserted {len(records)} route(s)")
        return len(records)

    @staticmethod
    def _node_from_row(row: sqlite3.Row) -> NodeRecord:
        return NodeRecord.from_dict({
            "nodeId": row["node_id"],
            "name": row["name"],
            "type": row["type"],
            "latitude": row["latitude"],
            "longitude": row["longitude"],
            "capacity": row["capacity"],
            "region": row["region"],
            "country": row["country"],
            "city": row["city"],
            "status": row["status"],
            "metadata": json.loads(row["metadata"]) if row["metadata"] else {},
        })

    @staticmethod
    def _route_from_row(row: sqlite3.Row) -> RouteRecord:
        return RouteRecord.from_dict({
            "source": row["source"],
            "target": row["target"],
            "distance": row["distance"],
            "cost": row["cost"],
            "time": row["time"],
            "capacity": row["capacity"],
            "status": row["status"],
            "transportMode": row["transport_mode"],
            "riskLevel": row["risk_level"],
            "metadata": json.loads(row["metadata"]) if row["metadata"] else {},
        })

    def load_nodes(
        self,
        type: Optional[str] = None,
        status: Optional[str] = None,
        region: Optional[str] = None,
    ) -> List[NodeRecord]:
        """Facilities in insertion order, optionally filtered by exact column value."""
        where, params = _where({"type": type, "status": status, "region": region})
        with self.connection() as conn:
            rows = conn.execute(f"SELECT * FROM nodes{where} ORDER BY rowid", params).fetchall()

        return [self._node_from_row(row) for row in rows]

    def load_node(self, node_id: str) -> Optional[NodeRecord]:
        """A single facility, or None if unknown."""
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM nodes WHERE node_id = ?", (node_id,)).fetchone()

        return self._node_from_row(row) if row is not None else None

    def load_routes(
        self,
        status: Optional[str] = None,
        transport_mode: Optional[str] = None,
        risk_level: Optional[str] = None,
        node_id: Optional[str] = None,
    ) -> List[RouteRecord]:
        """
        Routes in insertion order.

        Column filters match exactly; node_id keeps routes that start or
        end at that facility.
        """
        where, params = _where({
            "status": status,
            "transport_mode": transport_mode,
            "risk_level": risk_level,
        })
        if node_id is not None:
            where += " AND" if where else " WHERE"
            where += " (source = ? OR target = ?)"
            params.extend([node_id, node_id])

        with self.connection() as conn:
            rows = conn.execute(f"SELECT * FROM routes{where} ORDER BY id", params).fetchall()

        return [self._route_from_row(row) for row in rows]

    def count_by(self, table: str, column: str) -> Dict[str, int]:
        """Row counts grouped by one column, e.g. nodes by type."""
        if (table, column) not in GROUPABLE_COLUMNS:
            raise ValueError(f"Cannot group {table} by {column}")

        with self.connection() as conn:
            rows = conn.execute(
                f"SELECT {column} AS value, COUNT(*) AS n FROM {table} "
                f"GROUP BY {column} ORDER BY n DESC, {column}"
            ).fetchall()

        return {str(row["value"]) if row["value"] is not None else "unknown": row["n"] for row in rows}

    def save_node_metrics(self, result: MetricsResult) -> int:
        """
        Write computed per-node metrics back onto facility rows.

        Returns:
            Number of rows updated
        """
        now = time.time()
        values = metrics_for_write_back(result)

        with self.connection() as conn:
            cursor = conn.executemany("""
                UPDATE nodes SET
                    degree_centrality = ?,
                    betweenness_centrality = ?,
                    closeness_centrality = ?,
                    clustering_coefficient = ?,
                    is_bottleneck = ?,
                    is_critical = ?,
                    metrics_updated_at = ?
                WHERE node_id = ?
            """, [
                (
                    m["degreeCentrality"],
                    m["betweennessCentrality"],
                    m["closenessCentrality"],
                    m["clusteringCoefficient"],
                    int(m["isBottleneck"]),
                    int(m["isCritical"]),
                    now,
                    node_id,
                )
                for node_id, m in values.items()
            ])
            updated = cursor.rowcount

        logger.debug(f"Wrote metrics back to {updated} node(s)")
        return updated

    def load_node_metrics(self) -> dict:
        """Persisted metrics keyed by node id."""
        with self.connection() as conn:
            rows = conn.execute("""
                SELECT node_id, degree_centrality, betweenness_centrality,
                       closeness_centrality, clustering_coefficient,
                       is_bottleneck, is_critical, metrics_updated_at
                FROM nodes ORDER BY rowid
            """).fetchall()

        return {
            row["node_id"]: {
                "degreeCentrality": row["degree_centrality"],
                "betweennessCentrality": row["betweenness_centrality"],
                "closenessCentrality": row["closeness_centrality"],
                "clusteringCoefficient": row["clustering_coefficient"],
                "isBottleneck": bool(row["is_bottleneck"]),
                "isCritical": bool(row["is_critical"]),
                "updatedAt": row["metrics_updated_at"],
            }
            for row in rows
        }

    def clear(self) -> Tuple[int, int]:
        """
        Delete every node and route.

        Returns:
            (nodes deleted, routes deleted)
        """
        with self.connection() as conn:
            routes_deleted = conn.execute("DELETE FROM routes").rowcount
            nodes_deleted = conn.execute("DELETE FROM nodes").rowcount
        logger.info(f"Cleared {nodes_deleted} node(s) and {routes_deleted} route(s)")
        return nodes_deleted, routes_deleted

    @property
    def path(self) -> str:
        """Get database path as string."""
        return str(self.db_path)
