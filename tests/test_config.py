"""
Configuration tests.

Tests verify:
- Defaults
- Environment overrides picked up by reload_config()
- Invalid environment values fall back to defaults
"""

import pytest

from supplynet.analytics.config import Config


class TestDefaults:

    def test_values(self):
        assert Config.GRAPH.ON_DANGLING_EDGE == "skip"
        assert Config.CLASSIFIER.BOTTLENECK_THRESHOLD == pytest.approx(0.05)
        assert Config.CLASSIFIER.CRITICAL_THRESHOLD == pytest.approx(0.10)
        assert Config.DISRUPTION.ON_MISSING_TARGET == "noop"
        assert Config.PATHS.DEFAULT_MAX_PATHS == 5
        assert Config.PATHS.MAX_PATH_NODES == 10
        assert Config.PATHS.MAX_PATHS_LIMIT == 50
        assert Config.HEALTH.LOW_DENSITY_THRESHOLD == pytest.approx(0.1)

    def test_to_dict(self):
        data = Config.to_dict()

        assert set(data) == {"graph", "classifier", "disruption", "paths", "health", "api", "_version"}
        assert data["paths"]["DEFAULT_MAX_PATHS"] == 5

    def test_groups_are_frozen(self):
        with pytest.raises(Exception):
            Config.PATHS.DEFAULT_MAX_PATHS = 99


class TestReload:

    def test_env_override(self, env_config):
        version = Config.get_version()
        env_config(
            SUPPLYNET_PATHS_DEFAULT_MAX_PATHS="3",
            SUPPLYNET_CLASSIFIER_CRITICAL_THRESHOLD="0.25",
            SUPPLYNET_GRAPH_ON_DANGLING_EDGE="ERROR",
        )

        assert Config.PATHS.DEFAULT_MAX_PATHS == 3
        assert Config.CLASSIFIER.CRITICAL_THRESHOLD == pytest.approx(0.25)
        assert Config.GRAPH.ON_DANGLING_EDGE == "error"
        assert Config.get_version() > version

    def test_invalid_values_use_defaults(self, env_config):
        env_config(
            SUPPLYNET_PATHS_MAX_PATH_NODES="many",
            SUPPLYNET_HEALTH_LOW_DENSITY_THRESHOLD="low",
            SUPPLYNET_DISRUPTION_ON_MISSING_TARGET="explode",
        )

        assert Config.PATHS.MAX_PATH_NODES == 10
        assert Config.HEALTH.LOW_DENSITY_THRESHOLD == pytest.approx(0.1)
        assert Config.DISRUPTION.ON_MISSING_TARGET == "noop"
