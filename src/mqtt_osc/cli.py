"""Command line interface: ``mqtt-osc config`` and ``mqtt-osc run``."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence

from mqtt_osc.config.loader import load_settings, write_default_config
from mqtt_osc.domain.errors import RelayError
from mqtt_osc.relay import Relay
from mqtt_osc.runtime.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mqtt-osc", description="relaying updates on MQTT topics to OSC")
    commands = parser.add_subparsers(dest="command")

    cfg = commands.add_parser("config", aliases=["cfg"], help="generate a new configuration file")
    cfg.add_argument("path", help="path of the configuration file to write")
    cfg.add_argument("--force", action="store_true", help="overwrite an existing file")
    cfg.set_defaults(func=_cmd_config)

    run = commands.add_parser("run", aliases=["serve"], help="run the relay")
    run.add_argument("path", help="path to the configuration file")
    run.add_argument("-d", "--debug", action="store_true", help="enable debug mode")
    run.add_argument(
        "--log-format",
        choices=("json", "text"),
        default="json",
        help="log output format (default: json)",
    )
    run.set_defaults(func=_cmd_run)
    return parser


def _cmd_config(args: argparse.Namespace) -> int:
    logger = configure_logging("INFO", json_format=False)
    try:
        path = write_default_config(args.path, force=args.force)
    except RelayError as exc:
        logger.critical("%s", exc)
        return 1
    logger.info("wrote default configuration to %s", path)
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    logger = configure_logging(
        logging.DEBUG if args.debug else logging.INFO,
        json_format=args.log_format == "json",
    )
    try:
        settings = load_settings(args.path)
        relay = Relay(settings, logger=logger)
        logger.info(
            "relay.start",
            extra={"host": settings.mqtt_host, "port": settings.mqtt_port, "handlers": len(settings.handlers)},
        )
        asyncio.run(relay.run())
    except RelayError as exc:
        logger.critical("relay.fatal", extra={"error": str(exc)})
        return 1
    except KeyboardInterrupt:
        logger.info("relay.stopped")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


__all__ = ["build_parser", "main"]
