"""pydev-server CLI entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import IO, Any, List, Optional

from pydevkit.transport import LineProtocol

from .config import ServerConfig
from .server import DevServer

LOG = logging.getLogger("pydev_server.cli")

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _configure_logging(level: str, log_file: Optional[str] = None) -> None:
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )


def build_arg_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="pydev editor bridge (JSON lines over stdio)")
    parser.add_argument("--log-level", default=defaults.log_level, help="Logging level (default %(default)s)")
    parser.add_argument("--log-file", default=defaults.log_file, help="Write logs to this file instead of stderr")
    parser.add_argument(
        "--close-timeout",
        type=float,
        default=defaults.close_timeout,
        help="Seconds to wait for a stopped console session to unwind",
    )
    parser.add_argument("--no-banner", action="store_true", help="Do not print a banner when a console starts")
    return parser


def main(
    argv: List[str] | None = None,
    *,
    stdin: Optional[IO[Any]] = None,
    stdout: Optional[IO[Any]] = None,
) -> int:
    config = ServerConfig.from_env()
    args = build_arg_parser(config).parse_args(argv)
    config.log_level = args.log_level
    config.log_file = args.log_file
    config.close_timeout = max(0.0, args.close_timeout)
    if args.no_banner:
        config.banner = False
    _configure_logging(config.log_level, config.log_file)
    protocol = LineProtocol(
        stdin if stdin is not None else sys.stdin.buffer,
        stdout if stdout is not None else sys.stdout.buffer,
    )
    server = DevServer(protocol, config)
    LOG.info("pydev server starting (close timeout %.2fs)", config.close_timeout)
    try:
        server.serve()
    except KeyboardInterrupt:
        LOG.info("interrupted")
        server.shutdown()
        return 130
    except Exception:
        LOG.exception("pydev server crashed")
        raise
    LOG.info("pydev server exiting normally")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
