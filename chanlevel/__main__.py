from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

import uvicorn

from .app import create_app
from .config import default_config_path, load_config


_UVICORN_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def _uvicorn_log_level(level: str) -> str:
    name = level.strip().lower()
    return name if name in _UVICORN_LEVELS else "info"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="chanlevel Hamming(15,11) channel service")
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=os.environ.get("CHANLEVEL_CONFIG", default_config_path()),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--bind",
        type=str,
        default=None,
        help="Override bind address (e.g., 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Override port (e.g., 8090)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    cfg = load_config(args.config)
    if args.bind is not None:
        cfg.server.bind_address = args.bind
    if args.port is not None:
        cfg.server.port = args.port

    app = create_app(cfg)

    # SIGINT/SIGTERM stop accepting connections; the app lifespan then waits
    # out in-flight transfers within the same grace period.
    uvicorn.run(
        app,
        host=cfg.server.bind_address,
        port=cfg.server.port,
        log_level=_uvicorn_log_level(cfg.logging.level),
        timeout_graceful_shutdown=int(cfg.server.shutdown_grace_seconds),
    )


if __name__ == "__main__":
    main(sys.argv[1:])
