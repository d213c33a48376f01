"""Write generated bridge sources and the bridging header into the generated dir."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from swiftlink_tooling.bridge.codegen import CORE_HEADER, CORE_SWIFT, render_c_header, render_swift
from swiftlink_tooling.bridge.model import BridgeModule
from swiftlink_tooling.bridge.parse import parse_bridges

log = logging.getLogger(__name__)

CORE_NAME = "SwiftBridgeCore"
BRIDGING_HEADER_NAME = "bridging_header.h"
INCLUDE_GUARD = "BRIDGING_HEADER_H"


@dataclass(frozen=True)
class BridgeArtifacts:
    core_header: Path
    core_swift: Path
    package_header: Path
    package_swift: Path
    bridging_header: Path


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
    return path


def bridging_header_text(package_name: str) -> str:
    return (
        f"#ifndef {INCLUDE_GUARD}\n"
        f"#define {INCLUDE_GUARD}\n"
        f'#import "{CORE_NAME}.h"\n'
        f'#import "{package_name}/{package_name}.h"\n'
        "#endif\n"
    )


def write_bridging_header(out_dir: Path, package_name: str) -> Path:
    return _write(out_dir / BRIDGING_HEADER_NAME, bridging_header_text(package_name))


def write_all_concatenated(
    modules: Sequence[BridgeModule], out_dir: Path, package_name: str
) -> tuple[Path, Path, Path, Path]:
    """Write core + per-package header/Swift files. Returns (core_h, core_swift, pkg_h, pkg_swift)."""
    pkg_dir = out_dir / package_name
    return (
        _write(out_dir / f"{CORE_NAME}.h", CORE_HEADER),
        _write(out_dir / f"{CORE_NAME}.swift", CORE_SWIFT),
        _write(pkg_dir / f"{package_name}.h", render_c_header(modules)),
        _write(pkg_dir / f"{package_name}.swift", render_swift(modules)),
    )


def generate_bridges(bridge_files: Sequence[Path], out_dir: Path, package_name: str) -> BridgeArtifacts:
    """Parse bridge_files and (re)write every generated file. Raises BridgeParseError."""
    modules = parse_bridges(bridge_files)
    log.info(
        "Generating bridges for %s: %d module(s) from %d file(s) into %s",
        package_name,
        len(modules),
        len(bridge_files),
        out_dir,
    )
    core_h, core_swift, pkg_h, pkg_swift = write_all_concatenated(modules, out_dir, package_name)
    header = write_bridging_header(out_dir, package_name)
    return BridgeArtifacts(
        core_header=core_h,
        core_swift=core_swift,
        package_header=pkg_h,
        package_swift=pkg_swift,
        bridging_header=header,
    )
