"""Entry point for the MCP Multi-Backend Database Gateway.

Runs one STDIO MCP server for a single backend family: ``sql`` (SQL Server
or PostgreSQL) or ``cosmos`` (Azure Cosmos DB).

Usage:
    # SQL family (default), databases.config.json from cwd or project root
    python main.py

    # Cosmos DB family with an explicit config file
    python main.py --family cosmos --config /etc/mcp/cosmos.config.json

    # Diagnostics on stderr
    DEBUG_MCP=true python main.py
"""

import argparse
import asyncio
import logging
import sys

from core.config import AppConfig, BACKEND_FAMILIES
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def configure_logging(debug: bool):
    """Send all logging to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def build_app_config(args: argparse.Namespace) -> AppConfig:
    """Environment settings overridden by command-line arguments."""
    app_config = AppConfig.from_env()
    overrides = {}
    if args.family:
        overrides["family"] = args.family
    if args.config:
        overrides["config_path"] = args.config
    if args.debug:
        overrides["debug"] = True
    return app_config.model_copy(update=overrides)


async def run_stdio_mode(app_config: AppConfig):
    """Run MCP server in STDIO mode.

    Typically used when the server is spawned as a subprocess by an MCP client.
    """
    from protocol.stdio_server import run_stdio_server

    logger.info(f"Starting MCP Database Gateway ({app_config.family}) in STDIO mode")
    await run_stdio_server(app_config)


def main():
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="MCP Multi-Backend Database Gateway"
    )
    parser.add_argument(
        "--family",
        choices=BACKEND_FAMILIES,
        default=None,
        help="Backend family to serve (default: from MCP_BACKEND_FAMILY env or sql)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to databases config JSON (default: from DATABASES_CONFIG_PATH env or databases.config.json)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write diagnostic logging to stderr (same as DEBUG_MCP=true)"
    )

    args = parser.parse_args()

    try:
        app_config = build_app_config(args)
    except ConfigurationError as e:
        configure_logging(False)
        logger.error(f"Invalid configuration: {e.message}")
        sys.exit(1)

    configure_logging(app_config.debug)

    try:
        asyncio.run(run_stdio_mode(app_config))
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e.message}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"STDIO server error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
