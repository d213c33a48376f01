"""resolve -> locate -> query -> generate -> build -> emit, once per cargo build."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

from swiftlink_tooling.bridge import generate_bridges
from swiftlink_tooling.build.link import emit_link_directives
from swiftlink_tooling.build.manifest import check_package_manifest
from swiftlink_tooling.build.swift_build import run_swift_build
from swiftlink_tooling.build.target import is_supported_os, resolve_target
from swiftlink_tooling.build.toolchain import (
    ProcessToolchain,
    Toolchain,
    locate_swift,
    query_target_info,
)
from swiftlink_tooling.config import SETTINGS_FILE_NAME, BuildConfig, load_settings
from swiftlink_tooling.errors import ConfigurationError

log = logging.getLogger(__name__)

OS_ENV_VAR = "CARGO_CFG_TARGET_OS"


def build_swift(
    config: BuildConfig,
    toolchain: Toolchain,
    stream: TextIO | None = None,
    base_env: Mapping[str, str] | None = None,
) -> None:
    """Build the Swift library for config's target and emit cargo link directives."""
    targets = config.settings.deployment_targets
    target = resolve_target(config.arch, config.vendor, config.os, config.abi, targets)
    log.info("target_os: %s, sdk: %s, triple: %s", target.os, target.sdk, target.triple)

    swift = locate_swift(target.sdk, toolchain)
    info = query_target_info(swift, target.triple, toolchain)

    artifacts = generate_bridges(config.bridge_files, config.generated_dir, config.package_name)

    for warning in check_package_manifest(config.project_root, config.package_name, targets):
        log.warning("%s", warning)

    run_swift_build(
        swift,
        config.profile,
        target.triple,
        artifacts.bridging_header,
        config.project_root,
        toolchain,
        base_env=base_env,
    )
    emit_link_directives(info, config, stream)


def run(
    env: Mapping[str, str] | None = None,
    project_root: Path | None = None,
    settings_path: Path | None = None,
    toolchain: Toolchain | None = None,
    stream: TextIO | None = None,
) -> int:
    """Entry point for build scripts. No-op (returns 0) unless the target OS is macos or ios."""
    env = os.environ if env is None else env
    root = project_root if project_root is not None else Path.cwd()
    if OS_ENV_VAR not in env:
        msg = f"Missing build environment variable(s): {OS_ENV_VAR}"
        raise ConfigurationError(msg, hint="run from a cargo build script (build.rs)")
    target_os = env[OS_ENV_VAR]
    if not is_supported_os(target_os):
        log.info("Target OS %r is not an Apple platform; skipping Swift build", target_os)
        return 0
    settings = load_settings(settings_path or root / SETTINGS_FILE_NAME)
    config = BuildConfig.from_env(env, root, settings)
    build_swift(config, toolchain or ProcessToolchain(), stream, base_env=env)
    return 0
