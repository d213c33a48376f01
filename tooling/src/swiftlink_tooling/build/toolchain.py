"""Swift toolchain access: locate swift via xcrun and query -print-target-info.

ProcessToolchain is the only place that spawns processes; tests pass a fake with
the same three methods (find_tool, print_target_info, run_build).
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from swiftlink_tooling.errors import (
    PolicyViolation,
    SecondaryBuildFailed,
    ToolchainQueryFailed,
    ToolNotFound,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetInfo:
    triple: str
    unversioned_triple: str
    module_triple: str
    requires_rpath: bool
    runtime_library_paths: tuple[str, ...]
    runtime_library_import_paths: tuple[str, ...]
    runtime_resource_path: str


class Toolchain(Protocol):
    def find_tool(self, sdk: str, tool: str) -> bytes: ...

    def print_target_info(self, swift: str, triple: str) -> bytes: ...

    def run_build(self, cmd: Sequence[str], cwd: Path, env: Mapping[str, str]) -> int: ...


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


class ProcessToolchain:
    """Toolchain backed by xcrun and the swift driver."""

    def __init__(self, xcrun: str = "xcrun") -> None:
        self.xcrun = xcrun

    def find_tool(self, sdk: str, tool: str) -> bytes:
        cmd = [self.xcrun, "-f", "-sdk", sdk, tool]
        log.debug("Running %s", " ".join(cmd))
        try:
            r = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as e:
            msg = f"Could not run {self.xcrun}: {e}"
            raise ToolNotFound(msg, hint="install Xcode or the command line tools") from e
        if r.returncode != 0:
            msg = f"{self.xcrun} could not find {tool} for SDK {sdk} (exit {r.returncode})"
            raise ToolNotFound(msg, output=_decode(r.stderr) or _decode(r.stdout))
        return r.stdout

    def print_target_info(self, swift: str, triple: str) -> bytes:
        cmd = [swift, "-target", triple, "-print-target-info"]
        log.debug("Running %s", " ".join(cmd))
        try:
            r = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as e:
            msg = f"Could not run {swift}: {e}"
            raise ToolchainQueryFailed(msg) from e
        if r.returncode != 0:
            msg = f"{swift} -print-target-info failed for {triple} (exit {r.returncode})"
            raise ToolchainQueryFailed(msg, output=_decode(r.stderr) or _decode(r.stdout))
        return r.stdout

    def run_build(self, cmd: Sequence[str], cwd: Path, env: Mapping[str, str]) -> int:
        log.info("Running %s", " ".join(cmd))
        try:
            r = subprocess.run(list(cmd), cwd=str(cwd), env=dict(env), check=False)
        except OSError as e:
            msg = f"Could not run {cmd[0]}: {e}"
            raise SecondaryBuildFailed(msg) from e
        return r.returncode


def locate_swift(sdk: str, toolchain: Toolchain) -> str:
    """Absolute path of swift for the SDK. Raises ToolNotFound."""
    raw = toolchain.find_tool(sdk, "swift")
    try:
        swift = raw.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        msg = f"xcrun printed a non UTF-8 path for SDK {sdk}"
        raise ToolNotFound(msg, output=repr(raw)) from e
    if not swift:
        msg = f"xcrun printed no path for swift (SDK {sdk})"
        raise ToolNotFound(msg)
    log.info("swift: [%s]", swift)
    return swift


def _field(section: dict[str, Any], name: str, kind: type, raw: str) -> Any:
    if name not in section:
        msg = f"target info is missing {name!r}"
        raise ToolchainQueryFailed(msg, output=raw)
    value = section[name]
    if not isinstance(value, kind):
        msg = f"target info field {name!r} must be {kind.__name__}, got {type(value).__name__}"
        raise ToolchainQueryFailed(msg, output=raw)
    return value


def _str_list(section: dict[str, Any], name: str, raw: str) -> tuple[str, ...]:
    value = _field(section, name, list, raw)
    if not all(isinstance(p, str) for p in value):
        msg = f"target info field {name!r} must be a list of strings"
        raise ToolchainQueryFailed(msg, output=raw)
    return tuple(value)


def parse_target_info(data: bytes | str) -> TargetInfo:
    """Parse swift -print-target-info JSON. Raises ToolchainQueryFailed on any schema mismatch."""
    raw = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as e:
        msg = f"target info is not valid JSON: {e}"
        raise ToolchainQueryFailed(msg, output=raw) from e
    if not isinstance(doc, dict):
        msg = "target info must be a JSON object"
        raise ToolchainQueryFailed(msg, output=raw)
    target = _field(doc, "target", dict, raw)
    paths = _field(doc, "paths", dict, raw)
    return TargetInfo(
        triple=_field(target, "triple", str, raw),
        unversioned_triple=_field(target, "unversionedTriple", str, raw),
        module_triple=_field(target, "moduleTriple", str, raw),
        requires_rpath=_field(target, "librariesRequireRPath", bool, raw),
        runtime_library_paths=_str_list(paths, "runtimeLibraryPaths", raw),
        runtime_library_import_paths=_str_list(paths, "runtimeLibraryImportPaths", raw),
        runtime_resource_path=_field(paths, "runtimeResourcePath", str, raw),
    )


def query_target_info(swift: str, triple: str, toolchain: Toolchain) -> TargetInfo:
    """Run swift -print-target-info for triple. Aborts the build if libraries require an rpath."""
    info = parse_target_info(toolchain.print_target_info(swift, triple))
    if info.requires_rpath:
        msg = (
            f"Libraries require RPath for {triple}! "
            "Raise the minimum macOS/iOS deployment target to fix."
        )
        raise PolicyViolation(msg)
    log.debug("target info: %s", info)
    return info
