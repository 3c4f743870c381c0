"""
Command-line interface for the fleetmon monitoring server.

Loads the configuration, registers the configured inventory in an in-memory
store, starts the server and runs until SIGINT or SIGTERM is received.
"""

import argparse
import logging
import signal
import sys
import threading
import tomllib
from pathlib import Path
from typing import List, Optional

from ..agentcomm import HttpForwarder
from ..config import get_config, set_config_path
from ..config.validators import LOG_LEVELS
from ..server import FleetServer, seed_inventory
from ..storage import InMemoryStore
from ..validation import ValidationError, handle_cli_error, validate_enum_choice

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Pull lease statistics and host reservations from Kea servers and publish events."
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("conf") / "config.toml",
        help="Path to the main configuration file (default: conf/config.toml).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override the log level from the configuration (e.g. DEBUG).",
    )
    return parser.parse_args(argv)


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point of the ``fleetmon`` command.

    Raises:
        SystemExit: On configuration errors
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    set_config_path(args.config)
    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    log_level = app_config.server.log_level
    if args.log_level:
        try:
            log_level = validate_enum_choice(
                args.log_level, choices=LOG_LEVELS, field_name="--log-level argument", case_sensitive=False
            )
        except ValidationError as e:
            handle_cli_error(error=e, context="log level validation", exit_code=2, logger=logger)
    logging.getLogger().setLevel(log_level.upper())

    shutdown_requested = threading.Event()

    def signal_handler(signum, frame):
        if shutdown_requested.is_set():
            logger.warning("Shutdown already in progress. Please be patient.")
            return
        logger.info(f"Signal {signal.strsignal(signum)} received. Initiating graceful shutdown...")
        shutdown_requested.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    store = InMemoryStore()
    seed_inventory(store, app_config.machines)
    forwarder = HttpForwarder(
        timeout=app_config.agents.forward_timeout,
        forward_path=app_config.agents.forward_path,
    )

    try:
        server = FleetServer(app_config, store, forwarder)
    except Exception as e:
        forwarder.close()
        handle_cli_error(error=e, context="server startup", exit_code=1, logger=logger)

    try:
        while not shutdown_requested.wait(1.0):
            pass
    finally:
        server.shutdown()


if __name__ == "__main__":
    main_cli()
