"""Run `swift build` for the resolved triple with the generated bridging header.

The triple is passed twice: --triple for SwiftPM and -Xswiftc -target for swiftc.
SDKROOT is removed from the environment; leaving it set breaks swift on the host
when cross-compiling, so it can't evaluate Package.swift.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from swiftlink_tooling.build.toolchain import Toolchain
from swiftlink_tooling.errors import SecondaryBuildFailed

log = logging.getLogger(__name__)

SUPPRESSED_ENV = ("SDKROOT",)


def swift_build_command(swift: str, profile: str, triple: str, bridging_header: Path) -> list[str]:
    return [
        swift,
        "build",
        "-c",
        profile,
        "--triple",
        triple,
        "-Xswiftc",
        "-target",
        "-Xswiftc",
        triple,
        "-Xswiftc",
        "-import-objc-header",
        "-Xswiftc",
        str(bridging_header),
    ]


def build_environment(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Copy of base (default os.environ) without SDKROOT."""
    env = dict(os.environ if base is None else base)
    for name in SUPPRESSED_ENV:
        env.pop(name, None)
    return env


def run_swift_build(
    swift: str,
    profile: str,
    triple: str,
    bridging_header: Path,
    project_root: Path,
    toolchain: Toolchain,
    base_env: Mapping[str, str] | None = None,
) -> None:
    """Build the Swift package. Raises SecondaryBuildFailed (fatal) on non-zero exit."""
    if not bridging_header.is_file():
        msg = f"Bridging header not found: {bridging_header}"
        raise SecondaryBuildFailed(msg)
    cmd = swift_build_command(swift, profile, triple, bridging_header)
    rc = toolchain.run_build(cmd, project_root, build_environment(base_env))
    if rc != 0:
        msg = f"Swift library compilation failed (exit {rc})"
        raise SecondaryBuildFailed(msg)
    log.info("Swift library built for %s (%s)", triple, profile)
