"""Command-line entry point for modserve."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from .common.logging_utils import configure_logging
from .config import ServerConfig
from .constants import Constants
from .errors import ModserveError
from .frontend.decision import decide, decide_error
from .frontend.urls import parse_request_path
from .resolution import ResolutionEngine
from .store import SQLiteStore

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="modserve",
        description="modserve - path/version resolution for a module documentation site",
        add_help=True,
    )
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file",
                        action="store", type=str)
    parser.add_argument("--db",
                        dest="DB_PATH",
                        help=f"SQLite database path (default: {Constants.DEFAULT_DB_PATH})",
                        action="store", type=str)
    parser.add_argument("--experiment",
                        dest="EXPERIMENTS",
                        help=f"Enable an experiment for every request, e.g. {Constants.EXPERIMENT_NOT_AT_V1}",
                        action="append", type=str, default=[])
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Also write logs to this file",
                        action="store", type=str)

    sub = parser.add_subparsers(dest="COMMAND", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", dest="HOST", action="store", type=str,
                       help=f"Bind address (default: {Constants.DEFAULT_HOST})")
    serve.add_argument("--port", dest="PORT", action="store", type=int,
                       help=f"Listen port (default: {Constants.DEFAULT_PORT})")

    resolve = sub.add_parser("resolve", help="Resolve one path and print the directive as JSON")
    resolve.add_argument("TARGET", help="path or path@version")

    return parser.parse_args(argv)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = args.LOG_LEVEL
    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


async def resolve_target(config: ServerConfig, target: str) -> dict:
    """Resolve a single path[@version] against the configured store."""
    full_path, version = parse_request_path(target)
    store = SQLiteStore(config.db_path)
    try:
        engine = ResolutionEngine(store)
        ctx = config.experiment_set.context_for()
        try:
            directive = decide(await engine.resolve(full_path, version, ctx))
        except ModserveError as exc:
            logger.error("Resolving %s@%s failed: %s", full_path, version, exc)
            directive = decide_error(exc, full_path, version)
    finally:
        await store.close()
    return {"directive": type(directive).__name__, **dataclasses.asdict(directive)}


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the modserve command."""
    args = parse_args(argv)
    _setup_logging(args)
    config = ServerConfig.from_args(args)

    if args.COMMAND == "serve":
        try:
            from .frontend.server import run_server_sync  # pylint: disable=import-outside-toplevel
        except ImportError as e:
            sys.stderr.write(
                f"Server not available: {e}\n"
                "Make sure 'aiohttp' is installed: pip install aiohttp\n"
            )
            return 1
        run_server_sync(config)
        return 0

    result = asyncio.run(resolve_target(config, args.TARGET))
    print(json.dumps(result, indent=2, default=_json_default))
    return 0


if __name__ == "__main__":
    sys.exit(main())
