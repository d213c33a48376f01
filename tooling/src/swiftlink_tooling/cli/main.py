"""Main CLI entry point for swiftlink tooling.

stdout is reserved for cargo directives; logs and errors go to stderr.
"""

import logging
import os
import sys

from swiftlink_tooling.cli import bridge as bridge_cli
from swiftlink_tooling.cli import build as build_cli
from swiftlink_tooling.errors import SwiftLinkError

LOG_LEVEL_ENV = "SWIFTLINK_LOG"


def _usage() -> None:
    print("Usage: swiftlink <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print(
        "  build           - Build the Swift library for the cargo target and print link directives",
        file=sys.stderr,
    )
    print("  resolve         - Print the Swift triple and SDK for --os/--arch/--abi", file=sys.stderr)
    print("  bridge          - Generate bridge headers/Swift from Rust bridge modules", file=sys.stderr)
    print(
        "  check-manifest  - Check Package.swift platforms against deployment targets",
        file=sys.stderr,
    )


def _configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        _usage()
        sys.exit(1)

    _configure_logging()
    command = sys.argv[1]
    try:
        if command == "build":
            build_cli.run_build_argv()
        elif command == "resolve":
            build_cli.run_resolve_argv()
        elif command == "bridge":
            bridge_cli.run_bridge_argv()
        elif command == "check-manifest":
            build_cli.run_check_manifest_argv()
        else:
            print(f"Error: Unknown command: {command}", file=sys.stderr)
            _usage()
            sys.exit(1)
    except SwiftLinkError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
