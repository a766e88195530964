import logging
import os
import sys

import cherrypy
import yaml

from supplynet.analytics.config import Config
from supplynet.web.analytics_api import AnalyticsAPI
from supplynet.web.network_data_api import NetworkDataAPI

logger = logging.getLogger("SupplyNetDaemon")

DEFAULT_CONFIG_PATH = "/etc/supplynet/config.yaml"

DEFAULT_CONFIG = {
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "http": {
        "host": "0.0.0.0",
        "port": 8000,
    },
    "storage": {
        "db_path": Config.API.DEFAULT_DB_PATH,
    },
}


def load_config(config_path=None) -> dict:
    """
    Load daemon config from YAML, layered over DEFAULT_CONFIG.

    A missing file is not an error; the defaults are used.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}

    if not os.path.exists(path):
        if config_path:
            logger.warning(f"Config file {path} not found, using defaults")
        return config

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values

    return config


class SupplyNetDaemon:

    def __init__(self, config: dict):

        self.config = config
        self.api = None
        self.data_api = None

        log_level = config.get("logging", {}).get("level", "INFO")
        logging.basicConfig(
            level=getattr(logging, log_level),
            format=config.get("logging", {}).get("format"),
        )

    def initialize(self):

        db_path = self.config.get("storage", {}).get("db_path", Config.API.DEFAULT_DB_PATH)
        logger.info(f"Opening node/route store at {db_path}")
        self.api = AnalyticsAPI(db_path)
        self.data_api = NetworkDataAPI(db_path)

        http_config = self.config.get("http", {})
        cherrypy.config.update({
            "server.socket_host": http_config.get("host", "0.0.0.0"),
            "server.socket_port": int(http_config.get("port", 8000)),
            "log.screen": False,
            "engine.autoreload.on": False,
        })
        cherrypy.tree.mount(self.api, "/api/analytics")
        cherrypy.tree.mount(self.data_api, "/api/data")

        base = f"http://{http_config.get('host', '0.0.0.0')}:{http_config.get('port', 8000)}"
        logger.info(f"Analytics API mounted at {base}/api/analytics, data API at {base}/api/data")

    def run(self):

        self.initialize()
        cherrypy.engine.start()
        try:
            cherrypy.engine.block()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
            cherrypy.engine.exit()


def main():

    import argparse

    parser = argparse.ArgumentParser(description="Supply network analysis daemon")
    parser.add_argument(
        "--config",
        help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    config = load_config(args.config)

    if args.log_level:
        config.setdefault("logging", {})["level"] = args.log_level

    daemon = SupplyNetDaemon(config)

    try:
        daemon.run()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
