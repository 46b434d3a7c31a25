"""Command-line interface for nanobot."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import NanobotApp, build_pipeline
from .config import NanobotConfig, load_config, save_config
from .errors import ConfigurationError
from .pipeline import PipelineOutcome

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nanobot", description="Command and telemetry service for a single robot"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Start the HTTP command service")
    subparsers.add_parser("history", help="Print the logged command history as JSON")
    subparsers.add_parser("position", help="Print the last known robot position")
    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )
    init_parser = subparsers.add_parser(
        "init-config", help="Write the resolved configuration to the config path"
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing configuration file"
    )

    return parser


def _run_read(config: NanobotConfig, action: str) -> PipelineOutcome:
    pipeline = build_pipeline(config)
    return asyncio.run(pipeline.dispatch("GET", action=action))


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "serve":
        NanobotApp.start(config)
        return 0

    if args.command in ("history", "position"):
        outcome = _run_read(config, args.command)
        print(json.dumps(outcome.body, indent=2))
        return 0 if outcome.ok else 1

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    if args.command == "init-config":
        if config.path.exists() and not args.force:
            LOGGER.error(
                "Configuration already exists at %s. Use --force to overwrite.",
                config.path,
            )
            return 1
        save_config(config)
        print(f"Configuration written to {config.path!s}")
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
