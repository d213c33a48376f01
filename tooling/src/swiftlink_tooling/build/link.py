"""Cargo link directives for the built Swift static library."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from swiftlink_tooling.build.toolchain import TargetInfo
from swiftlink_tooling.config import BuildConfig, DeploymentTargets


def deployment_target_env(os_name: str, targets: DeploymentTargets) -> str | None:
    """NAME=VERSION for rustc-env, or None for OSes outside macos/ios."""
    if os_name == "macos":
        return f"MACOSX_DEPLOYMENT_TARGET={targets.macos}"
    if os_name == "ios":
        return f"IPHONEOS_DEPLOYMENT_TARGET={targets.ios}"
    return None


def swift_output_dir(info: TargetInfo, config: BuildConfig) -> Path:
    """Where swift build (run in project_root) puts the static library; absolute build_dir wins."""
    return config.project_root / config.settings.build_dir / info.unversioned_triple / config.profile


def iter_link_directives(info: TargetInfo, config: BuildConfig) -> Iterator[str]:
    """Yield cargo: directives in the order cargo should see them."""
    for path in info.runtime_library_paths:
        yield f"cargo:rustc-link-search=native={path}"
    yield f"cargo:rustc-link-search=native={swift_output_dir(info, config)}"
    yield f"cargo:rustc-link-lib=static={config.package_name}"
    yield f"cargo:rerun-if-changed={config.settings.swift_sources}"
    env = deployment_target_env(config.os, config.settings.deployment_targets)
    if env is not None:
        yield f"cargo:rustc-env={env}"


def emit_link_directives(info: TargetInfo, config: BuildConfig, stream: TextIO | None = None) -> None:
    out = stream if stream is not None else sys.stdout
    for line in iter_link_directives(info, config):
        print(line, file=out)
    out.flush()
