"""Command-line entry point: load configuration and serve the API."""

import argparse
import logging
import sys

from .api import create_app
from .config import ConfigError, load_config, validate_config
from .logger import setup_logger
from .orchestrator import AggregationOrchestrator


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Serve the HackEM News API")
    parser.add_argument("--config", default="config/config.yaml", help="Path to config YAML")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        validate_config(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logger = setup_logger(config.log_file, level=logging.DEBUG if args.debug else logging.INFO)

    orchestrator = AggregationOrchestrator.from_config(config)
    app = create_app(orchestrator)

    logger.info(f"Server running on http://{config.server.host}:{config.server.port}")
    app.run(host=config.server.host, port=config.server.port, debug=args.debug, use_reloader=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
