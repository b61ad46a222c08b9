"""CLI entry point for baton-server.

This module provides the command-line interface for starting the server.
It can be invoked as `baton-server` (via the script entry point) or
`python -m baton_server`.
"""

import argparse
import logging
import os
import sys

import uvicorn

from baton_server import __version__, create_app
from baton_server.config import BatonServerSettings


def main() -> None:
    """Main entry point for the baton-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="baton-server",
        description="Orchestration service that drives multi-step workflows across remote agents",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"baton-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via BATON_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 9000, can be set via BATON_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via BATON_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--no-seed-agents",
        action="store_true",
        help="Start with an empty agent directory instead of the default agents",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via BATON_LOG_LEVEL)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.no_seed_agents:
        settings_kwargs["seed_default_agents"] = False
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = BatonServerSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.reload:
        # The reloader re-imports the app in a subprocess, so overrides
        # travel through the environment instead of the settings object
        for key, value in settings_kwargs.items():
            os.environ[f"BATON_{key.upper()}"] = str(value)
        uvicorn.run(
            "baton_server.app:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            reload=True,
        )
        return

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
