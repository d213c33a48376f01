"""Swift static library build for cargo (macOS, iOS device, iOS simulator)."""

from .link import emit_link_directives, iter_link_directives
from .pipeline import build_swift
from .pipeline import run as run_build
from .swift_build import run_swift_build, swift_build_command
from .target import TargetDescriptor, resolve_target
from .toolchain import (
    ProcessToolchain,
    TargetInfo,
    locate_swift,
    parse_target_info,
    query_target_info,
)

__all__ = [
    "ProcessToolchain",
    "TargetDescriptor",
    "TargetInfo",
    "build_swift",
    "emit_link_directives",
    "iter_link_directives",
    "locate_swift",
    "parse_target_info",
    "query_target_info",
    "resolve_target",
    "run_build",
    "run_swift_build",
    "swift_build_command",
]
