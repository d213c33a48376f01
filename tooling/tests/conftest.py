"""Pytest fixtures for swiftlink tooling tests."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

SWIFT_PATH = "/Applications/Xcode.app/Contents/Developer/Toolchains/XcodeDefault.xctoolchain/usr/bin/swift"

BRIDGE_SRC = """\
use std::env;

#[swift_bridge::bridge]
mod ffi {
    extern "Rust" {
        type Counter;

        #[swift_bridge(init)]
        fn new(start: i32) -> Counter;
        fn increment(&mut self, by: i32);
        fn value(&self) -> i32;
    }

    extern "Rust" {
        fn add(a: i32, b: i32) -> i32;
    }

    extern "Swift" {
        fn swift_multiply_by_4(num: u8) -> u8;
    }
}

fn main() {
    // not a bridge: fn ignored(x: String);
    println!("{}", ffi::add(1, 2));
}
"""


def target_info_doc(
    unversioned: str = "x86_64-apple-macosx",
    triple: str = "x86_64-apple-macosx15.5",
    requires_rpath: bool = False,
    runtime_library_paths: Sequence[str] = ("/usr/lib/swift",),
) -> dict[str, Any]:
    return {
        "compilerVersion": "Apple Swift version 6.1",
        "target": {
            "triple": triple,
            "unversionedTriple": unversioned,
            "moduleTriple": unversioned,
            "swiftRuntimeCompatibilityVersion": "5.0",
            "librariesRequireRPath": requires_rpath,
        },
        "paths": {
            "runtimeLibraryPaths": list(runtime_library_paths),
            "runtimeLibraryImportPaths": ["/usr/lib/swift", "/sdk/usr/lib/swift"],
            "runtimeResourcePath": "/toolchain/usr/lib/swift",
        },
    }


class FakeToolchain:
    """Records calls; returns canned xcrun/target-info output and build exit code."""

    def __init__(
        self,
        swift: bytes = SWIFT_PATH.encode() + b"\n",
        target_info: dict[str, Any] | bytes | None = None,
        build_rc: int = 0,
    ) -> None:
        self.swift = swift
        self.target_info = target_info if target_info is not None else target_info_doc()
        self.build_rc = build_rc
        self.calls: list[tuple[str, Any]] = []

    def find_tool(self, sdk: str, tool: str) -> bytes:
        self.calls.append(("find_tool", (sdk, tool)))
        return self.swift

    def print_target_info(self, swift: str, triple: str) -> bytes:
        self.calls.append(("print_target_info", (swift, triple)))
        if isinstance(self.target_info, bytes):
            return self.target_info
        return json.dumps(self.target_info).encode()

    def run_build(self, cmd: Sequence[str], cwd: Path, env: Mapping[str, str]) -> int:
        self.calls.append(("run_build", (list(cmd), cwd, dict(env))))
        return self.build_rc

    def called(self, name: str) -> bool:
        return any(c[0] == name for c in self.calls)


@pytest.fixture
def fake_toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def crate_dir(tmp_path: Path) -> Path:
    """Minimal crate: src/main.rs with a bridge module and a matching Package.swift."""
    (tmp_path / "src" / "swift").mkdir(parents=True)
    (tmp_path / "src" / "main.rs").write_text(BRIDGE_SRC)
    (tmp_path / "Package.swift").write_text(
        "// swift-tools-version: 6.1\n"
        "import PackageDescription\n\n"
        "let package = Package(\n"
        '    name: "rust_swift",\n'
        "    platforms: [\n"
        "      .macOS(.v15),\n"
        "      .iOS(.v18),\n"
        "    ],\n"
        "    products: [\n"
        '      .library(name: "rust_swift", type: .static, targets: ["rust_swift"])\n'
        "    ],\n"
        ")\n"
    )
    return tmp_path


@pytest.fixture
def cargo_env() -> dict[str, str]:
    return {
        "CARGO_PKG_NAME": "rust_swift",
        "PROFILE": "debug",
        "CARGO_CFG_TARGET_ARCH": "x86_64",
        "CARGO_CFG_TARGET_VENDOR": "apple",
        "CARGO_CFG_TARGET_OS": "macos",
        "CARGO_CFG_TARGET_ABI": "",
        "SDKROOT": "/Applications/Xcode.app/Contents/Developer/Platforms/MacOSX.platform",
        "PATH": "/usr/bin:/bin",
    }
