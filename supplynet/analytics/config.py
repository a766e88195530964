"""
Analytics Configuration Module
==============================

Centralized configuration for the network analysis engine. Thresholds,
path-search bounds and leniency policies are defined here so callers
never have to hardcode them.

Usage
-----
    from supplynet.analytics.config import Config

    # Use values directly
    threshold = Config.CLASSIFIER.BOTTLENECK_THRESHOLD

    # Or get entire config group
    path_config = Config.PATHS

Environment Override
-------------------
Configuration values can be overridden via environment variables using
the pattern: SUPPLYNET_{GROUP}_{NAME}

For example:
    SUPPLYNET_CLASSIFIER_BOTTLENECK_THRESHOLD=0.2
    SUPPLYNET_GRAPH_ON_DANGLING_EDGE=error

Hot Reload
----------
Configuration can be reloaded at runtime without restarting:

    from supplynet.analytics.config import reload_config, Config

    # After changing environment variables
    reload_config()

    print(Config.CLASSIFIER.CRITICAL_THRESHOLD)

Thread Safety
-------------
Configuration reads are thread-safe. Reloads are atomic - readers will
see either the old or new config, never a partial state.
"""

import logging
import os
import threading
from dataclasses import dataclass, asdict
from typing import Dict, Any, Tuple

logger = logging.getLogger("Analytics.Config")

# Lock for thread-safe config reload
_config_lock = threading.RLock()


def _env_int(key: str, default: int) -> int:
    """Get integer from environment or use default."""
    val = os.environ.get(key)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            logger.warning(f"Invalid int value for {key}: {val}, using default {default}")
    return default


def _env_float(key: str, default: float) -> float:
    """Get float from environment or use default."""
    val = os.environ.get(key)
    if val is not None:
        try:
            return float(val)
        except ValueError:
            logger.warning(f"Invalid float value for {key}: {val}, using default {default}")
    return default


def _env_choice(key: str, default: str, choices: Tuple[str, ...]) -> str:
    """Get one of a fixed set of strings from environment or use default."""
    val = os.environ.get(key)
    if val is not None:
        val = val.strip().lower()
        if val in choices:
            return val
        logger.warning(f"Invalid value for {key}: {val} (expected one of {choices}), using default {default}")
    return default


def _env_str(key: str, default: str) -> str:
    """Get string from environment or use default."""
    val = os.environ.get(key)
    return val if val else default


@dataclass(frozen=True)
class GraphConfig:
    """Graph construction configuration."""

    # What to do with a route whose source or target is not a known node
    ON_DANGLING_EDGE: str = _env_choice(
        "SUPPLYNET_GRAPH_ON_DANGLING_EDGE", "skip", ("skip", "error")
    )


@dataclass(frozen=True)
class ClassifierConfig:
    """Bottleneck / critical node thresholds."""

    # Betweenness relative to the graph maximum (5%)
    BOTTLENECK_THRESHOLD: float = _env_float(
        "SUPPLYNET_CLASSIFIER_BOTTLENECK_THRESHOLD", 0.05
    )

    # Mean of relative degree and relative betweenness (10%)
    CRITICAL_THRESHOLD: float = _env_float(
        "SUPPLYNET_CLASSIFIER_CRITICAL_THRESHOLD", 0.10
    )


@dataclass(frozen=True)
class DisruptionConfig:
    """Disruption simulation configuration."""

    # What to do when the node/edge to remove is not in the graph
    ON_MISSING_TARGET: str = _env_choice(
        "SUPPLYNET_DISRUPTION_ON_MISSING_TARGET", "noop", ("noop", "error")
    )


@dataclass(frozen=True)
class PathConfig:
    """Alternative path search configuration."""

    # Paths returned when the caller does not ask for a count
    DEFAULT_MAX_PATHS: int = _env_int(
        "SUPPLYNET_PATHS_DEFAULT_MAX_PATHS", 5
    )

    # Partial paths longer than this are not expanded further
    MAX_PATH_NODES: int = _env_int(
        "SUPPLYNET_PATHS_MAX_PATH_NODES", 10
    )

    # Upper bound accepted from API callers
    MAX_PATHS_LIMIT: int = _env_int(
        "SUPPLYNET_PATHS_MAX_PATHS_LIMIT", 50
    )


@dataclass(frozen=True)
class NetworkHealthConfig:
    """Network health assessment thresholds."""

    # Density below 10% triggers a low-density recommendation
    LOW_DENSITY_THRESHOLD: float = _env_float(
        "SUPPLYNET_HEALTH_LOW_DENSITY_THRESHOLD", 0.1
    )


@dataclass(frozen=True)
class APIConfig:
    """API and storage defaults."""

    DEFAULT_DB_PATH: str = _env_str(
        "SUPPLYNET_API_DEFAULT_DB_PATH", "/var/lib/supplynet/supplynet.db"
    )


class Config:
    """
    Main configuration container with all config groups.

    Access via Config.GROUP.CONSTANT, e.g.:
        Config.CLASSIFIER.BOTTLENECK_THRESHOLD
        Config.PATHS.MAX_PATH_NODES

    Thread Safety:
        All reads are thread-safe. Use reload_config() to update
        configuration at runtime.
    """

    GRAPH = GraphConfig()
    CLASSIFIER = ClassifierConfig()
    DISRUPTION = DisruptionConfig()
    PATHS = PathConfig()
    HEALTH = NetworkHealthConfig()
    API = APIConfig()

    # Version counter, bumped on every reload
    _version: int = 0

    @classmethod
    def to_dict(cls) -> Dict[str, Dict[str, Any]]:
        """Export all config as dict (useful for debugging)."""
        return {
            "graph": asdict(cls.GRAPH),
            "classifier": asdict(cls.CLASSIFIER),
            "disruption": asdict(cls.DISRUPTION),
            "paths": asdict(cls.PATHS),
            "health": asdict(cls.HEALTH),
            "api": asdict(cls.API),
            "_version": cls._version,
        }

    @classmethod
    def get_version(cls) -> int:
        """Get current config version (increments on reload)."""
        return cls._version


def reload_config() -> None:
    """
    Reload configuration from environment variables.

    Dataclass defaults are evaluated once at import time, so each group
    is rebuilt with freshly read values passed explicitly.

    Example:
        >>> import os
        >>> os.environ['SUPPLYNET_PATHS_DEFAULT_MAX_PATHS'] = '3'
        >>> reload_config()
        >>> Config.PATHS.DEFAULT_MAX_PATHS
        3
    """
    with _config_lock:
        Config.GRAPH = GraphConfig(
            ON_DANGLING_EDGE=_env_choice(
                "SUPPLYNET_GRAPH_ON_DANGLING_EDGE", "skip", ("skip", "error")
            ),
        )
        Config.CLASSIFIER = ClassifierConfig(
            BOTTLENECK_THRESHOLD=_env_float("SUPPLYNET_CLASSIFIER_BOTTLENECK_THRESHOLD", 0.05),
            CRITICAL_THRESHOLD=_env_float("SUPPLYNET_CLASSIFIER_CRITICAL_THRESHOLD", 0.10),
        )
        Config.DISRUPTION = DisruptionConfig(
            ON_MISSING_TARGET=_env_choice(
                "SUPPLYNET_DISRUPTION_ON_MISSING_TARGET", "noop", ("noop", "error")
            ),
        )
        Config.PATHS = PathConfig(
            DEFAULT_MAX_PATHS=_env_int("SUPPLYNET_PATHS_DEFAULT_MAX_PATHS", 5),
            MAX_PATH_NODES=_env_int("SUPPLYNET_PATHS_MAX_PATH_NODES", 10),
            MAX_PATHS_LIMIT=_env_int("SUPPLYNET_PATHS_MAX_PATHS_LIMIT", 50),
        )
        Config.HEALTH = NetworkHealthConfig(
            LOW_DENSITY_THRESHOLD=_env_float("SUPPLYNET_HEALTH_LOW_DENSITY_THRESHOLD", 0.1),
        )
        Config.API = APIConfig(
            DEFAULT_DB_PATH=_env_str(
                "SUPPLYNET_API_DEFAULT_DB_PATH", "/var/lib/supplynet/supplynet.db"
            ),
        )
        Config._version += 1

        logger.info(f"Configuration reloaded (version {Config._version})")
