"""
Node and route records consumed by the analysis engine.

Records arrive from the persistence layer already typed; ``from_dict``
accepts the camelCase shape used by the API and upload paths as well as
snake_case keys.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .errors import InvalidRequestError


class NodeType(str, Enum):
    SUPPLIER = "supplier"
    WAREHOUSE = "warehouse"
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"
    MANUFACTURER = "manufacturer"
    OTHER = "other"


class NodeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISRUPTED = "disrupted"


class RouteStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISRUPTED = "disrupted"
    CONGESTED = "congested"


class TransportMode(str, Enum):
    ROAD = "road"
    RAIL = "rail"
    AIR = "air"
    SEA = "sea"
    MULTIMODAL = "multimodal"
    OTHER = "other"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _enum_value(enum_cls, value: Any, default, field_name: str):
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise InvalidRequestError(
            f"Invalid {field_name} '{value}'",
            details={"field": field_name, "allowed": [e.value for e in enum_cls]},
        )


def _non_negative(value: Any, field_name: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(
            f"'{field_name}' must be a number, got '{value}'",
            details={"field": field_name},
        )
    if number < 0:
        raise InvalidRequestError(
            f"'{field_name}' must be >= 0, got {number}",
            details={"field": field_name},
        )
    return number


def _coordinate(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(
            f"'{field_name}' must be a number, got '{value}'",
            details={"field": field_name},
        )


@dataclass
class NodeRecord:
    """A facility in the supply network."""
    node_id: str
    name: str
    type: NodeType = NodeType.OTHER
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capacity: float = 0.0
    region: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    status: NodeStatus = NodeStatus.ACTIVE
    metadata: Dict[str, str] = field(default_factory=dict)

    def attributes(self) -> Dict[str, Any]:
        """Attributes carried onto the graph node."""
        return {
            "name": self.name,
            "type": self.type.value,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "capacity": self.capacity,
            "region": self.region,
            "country": self.country,
            "city": self.city,
            "status": self.status.value,
            "metadata": dict(self.metadata),
        }

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "name": self.name,
            "type": self.type.value,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "capacity": self.capacity,
            "region": self.region,
            "country": self.country,
            "city": self.city,
            "status": self.status.value,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeRecord":
        node_id = _pick(data, "nodeId", "node_id", "id")
        if node_id is None or str(node_id).strip() == "":
            raise InvalidRequestError("Node record is missing 'nodeId'", details={"record": data})
        node_id = str(node_id).strip()

        latitude = _pick(data, "latitude", "lat")
        longitude = _pick(data, "longitude", "lng", "lon")

        return cls(
            node_id=node_id,
            name=str(_pick(data, "name", default=node_id)).strip(),
            type=_enum_value(NodeType, _pick(data, "type"), NodeType.OTHER, "type"),
            latitude=_coordinate(latitude, "latitude"),
            longitude=_coordinate(longitude, "longitude"),
            capacity=_non_negative(_pick(data, "capacity", default=0), "capacity"),
            region=_pick(data, "region"),
            country=_pick(data, "country"),
            city=_pick(data, "city"),
            status=_enum_value(NodeStatus, _pick(data, "status"), NodeStatus.ACTIVE, "status"),
            metadata={str(k): str(v) for k, v in (_pick(data, "metadata", default={}) or {}).items()},
        )


@dataclass
class RouteRecord:
    """A directed transport route between two facilities."""
    source: str
    target: str
    distance: float = 0.0
    cost: float = 0.0
    time: float = 0.0  # hours
    capacity: float = 0.0
    status: RouteStatus = RouteStatus.ACTIVE
    transport_mode: TransportMode = TransportMode.ROAD
    risk_level: RiskLevel = RiskLevel.LOW
    metadata: Dict[str, str] = field(default_factory=dict)

    def attributes(self) -> Dict[str, Any]:
        """Attributes carried onto the graph edge."""
        return {
            "distance": self.distance,
            "cost": self.cost,
            "time": self.time,
            "capacity": self.capacity,
            "status": self.status.value,
            "transport_mode": self.transport_mode.value,
            "risk_level": self.risk_level.value,
            "metadata": dict(self.metadata),
        }

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "distance": self.distance,
            "cost": self.cost,
            "time": self.time,
            "capacity": self.capacity,
            "status": self.status.value,
            "transportMode": self.transport_mode.value,
            "riskLevel": self.risk_level.value,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouteRecord":
        source = _pick(data, "source", "from")
        target = _pick(data, "target", "to")
        if source is None or target is None:
            raise InvalidRequestError(
                "Route record needs both 'source' and 'target'",
                details={"record": data},
            )

        return cls(
            source=str(source).strip(),
            target=str(target).strip(),
            distance=_non_negative(_pick(data, "distance"), "distance"),
            cost=_non_negative(_pick(data, "cost"), "cost"),
            time=_non_negative(_pick(data, "time"), "time"),
            capacity=_non_negative(_pick(data, "capacity"), "capacity"),
            status=_enum_value(RouteStatus, _pick(data, "status"), RouteStatus.ACTIVE, "status"),
            transport_mode=_enum_value(
                TransportMode,
                _pick(data, "transportMode", "transport_mode"),
                TransportMode.ROAD,
                "transportMode",
            ),
            risk_level=_enum_value(
                RiskLevel,
                _pick(data, "riskLevel", "risk_level"),
                RiskLevel.LOW,
                "riskLevel",
            ),
            metadata={str(k): str(v) for k, v in (_pick(data, "metadata", default={}) or {}).items()},
        )
