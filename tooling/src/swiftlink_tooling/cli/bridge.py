"""`swiftlink bridge` — generate bridge headers/Swift without building."""

from __future__ import annotations

import sys
from pathlib import Path

from swiftlink_tooling.bridge import generate_bridges
from swiftlink_tooling.cli.build import path_resolver


def run_bridge_argv(argv: list[str] | None = None) -> None:
    """swiftlink bridge --package-name NAME [--out-dir DIR] FILE..."""
    import argparse

    if argv is None:
        argv = sys.argv[2:]
    ap = argparse.ArgumentParser(description="Generate Swift bridge glue and bridging header")
    ap.add_argument("files", nargs="+", type=path_resolver, help="Rust files with bridge modules")
    ap.add_argument("--package-name", required=True, help="Cargo package name")
    ap.add_argument(
        "--out-dir",
        type=path_resolver,
        default=Path.cwd() / "generated",
        help="Output directory (default: ./generated)",
    )
    args = ap.parse_args(argv)
    artifacts = generate_bridges(args.files, args.out_dir, args.package_name)
    print(f"✅ Wrote {artifacts.bridging_header}")
