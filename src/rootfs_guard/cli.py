"""Command line entry point.

Exit codes:
    0: Not in a container, or the container root is read-only
       (or writable with enforcement disabled)
    1: Writable container root with ENFORCE_READ_ONLY enabled
    2: The check itself failed (unreadable mount table, no root mount)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import structlog

from rootfs_guard.config import get_settings
from rootfs_guard.errors import WritableRootFilesystemError
from rootfs_guard.inspector import RootFilesystemInspector
from rootfs_guard.logging import setup_logging
from rootfs_guard.startup import validate_container_security

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_VIOLATION = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rootfs-guard",
        description="Verify that a containerised process runs on a read-only root filesystem",
    )
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        help="Override the configured log format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    status = subparsers.add_parser("status", help="Print container and root filesystem state")
    status.add_argument("--json", action="store_true", help="Print JSON")

    subparsers.add_parser(
        "check",
        help="Run the startup check (fails only when ENFORCE_READ_ONLY is enabled)",
    )
    return parser


async def _status(inspector: RootFilesystemInspector, as_json: bool) -> int:
    state = await inspector.is_container_root_filesystem_read_only()
    if as_json:
        print(json.dumps({"is_container": state.is_container, "is_read_only": state.is_read_only}))
    else:
        print(f"container: {'yes' if state.is_container else 'no'}")
        print(f"read-only root: {'yes' if state.is_read_only else 'no'}")
    return EXIT_OK


async def _check(inspector: RootFilesystemInspector) -> int:
    try:
        await validate_container_security(inspector=inspector)
    except WritableRootFilesystemError:
        return EXIT_VIOLATION
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    log_config = settings.logging.model_copy(
        update={
            k: v
            for k, v in (("level", args.log_level), ("format", args.log_format))
            if v is not None
        }
    )
    setup_logging(log_config)

    inspector = RootFilesystemInspector.from_settings(settings)
    try:
        if args.command == "status":
            return asyncio.run(_status(inspector, args.json))
        return asyncio.run(_check(inspector))
    except Exception as e:
        # check failures were already logged by validate_container_security
        if args.command == "status":
            logger.error(
                "container_security.status_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
