"""`swiftlink build | resolve | check-manifest` — Swift build for cargo build scripts."""

import os
import sys
from pathlib import Path

from swiftlink_tooling.build.manifest import check_package_manifest
from swiftlink_tooling.build.pipeline import run as run_pipeline
from swiftlink_tooling.build.target import resolve_target
from swiftlink_tooling.config import SETTINGS_FILE_NAME, load_settings


def path_resolver(s: str) -> Path:
    """Resolve a path argument to absolute Path (e.g. --project-root, --config)."""
    return Path(s).resolve()


def run_build_argv(argv: list[str] | None = None) -> None:
    """Parse argv and run the full pipeline from the cargo build-script environment."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'swiftlink build'
    ap = argparse.ArgumentParser(description="Build the Swift library and print cargo directives")
    ap.add_argument(
        "--project-root",
        type=path_resolver,
        default=Path.cwd(),
        help="Crate root containing Package.swift (default: cwd)",
    )
    ap.add_argument(
        "--config",
        type=path_resolver,
        default=None,
        help=f"Settings file (default: <project-root>/{SETTINGS_FILE_NAME})",
    )
    args = ap.parse_args(argv)
    rc = run_pipeline(project_root=args.project_root, settings_path=args.config)
    sys.exit(rc)


def run_resolve_argv(argv: list[str] | None = None) -> None:
    """Print the Swift triple and SDK id for a cargo target cfg."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    ap = argparse.ArgumentParser(description="Resolve Swift triple and SDK for a target")
    ap.add_argument("--os", required=True, help="macos or ios")
    ap.add_argument("--arch", required=True, help="x86_64, aarch64, ...")
    ap.add_argument("--vendor", default="apple")
    ap.add_argument("--abi", default="", help="'sim' for the iOS simulator")
    ap.add_argument("--config", type=path_resolver, default=None, help="Settings file")
    args = ap.parse_args(argv)
    settings = load_settings(args.config or Path.cwd() / SETTINGS_FILE_NAME)
    target = resolve_target(
        args.arch, args.vendor, args.os, args.abi, settings.deployment_targets
    )
    print(f"triple: {target.triple}")
    print(f"sdk: {target.sdk}")


def run_check_manifest_argv(argv: list[str] | None = None) -> None:
    """Compare Package.swift platforms and products with swiftlink settings."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    ap = argparse.ArgumentParser(description="Check Package.swift against deployment targets")
    ap.add_argument(
        "package_name",
        nargs="?",
        default=os.environ.get("CARGO_PKG_NAME"),
        help="Cargo package name, the static library product (default: $CARGO_PKG_NAME)",
    )
    ap.add_argument("--project-root", type=path_resolver, default=Path.cwd())
    ap.add_argument("--config", type=path_resolver, default=None)
    args = ap.parse_args(argv)
    if not args.package_name:
        ap.error("package name required (pass PACKAGE or set CARGO_PKG_NAME)")
    settings = load_settings(args.config or args.project_root / SETTINGS_FILE_NAME)
    warnings = check_package_manifest(
        args.project_root, args.package_name, settings.deployment_targets
    )
    for w in warnings:
        print(f"⚠️  {w}", file=sys.stderr)
    if warnings:
        sys.exit(1)
    print("✅ Package.swift matches deployment targets")
