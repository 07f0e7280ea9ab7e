#!/usr/bin/env python3
"""
Local profile server emulator.

Usage:
    python3 run_server.py --token 0123456789 --profile /mnt/profile
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from profile_server import create_app
from profile_server.config import ConfigError, ServerConfig, load_yaml_config, resolve_log_level

logger = logging.getLogger("profile_server.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Emulate the device-facing API of a local profile server",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with server settings (optional)",
    )
    parser.add_argument("--profile", type=Path, default=None, help="File with current profile")
    parser.add_argument(
        "--radio-silence",
        type=Path,
        default=None,
        help="File with the requested radio-silence state ('OFF'/'ON' or '0'/'1')",
    )
    parser.add_argument(
        "--radio-silence-counter",
        type=Path,
        default=None,
        help="File with the number of radio-silence state changes already performed",
    )
    parser.add_argument(
        "--radio-status",
        type=Path,
        default=None,
        help="JSON file updated with the radio status reported by the device",
    )
    parser.add_argument(
        "--app-info-status",
        type=Path,
        default=None,
        help="JSON file updated with the app info reported by the device",
    )
    parser.add_argument("--token", type=str, default=None, help="Token of profile server")
    parser.add_argument("--host", type=str, default=None, help="Hostname or IP to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    config = ServerConfig.from_env()
    if args.config is not None:
        config = load_yaml_config(args.config, base=config)
    overrides: Dict[str, Any] = {
        "profile_file": args.profile,
        "radio_silence_file": args.radio_silence,
        "radio_silence_counter_file": args.radio_silence_counter,
        "radio_status_file": args.radio_status,
        "app_info_file": args.app_info_status,
        "token": args.token,
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
    }
    return config.with_overrides(overrides)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        config = build_config(args)
    except ConfigError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.critical("Config error: %s", exc)
        raise SystemExit(2) from exc

    level = resolve_log_level(config.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if level > logging.DEBUG:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    app = create_app(config)
    logger.info("Listening on %s:%d", config.host, config.port)
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == "__main__":
    main()
