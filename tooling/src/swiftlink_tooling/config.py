"""Build configuration: cargo environment inputs plus project settings (swiftlink.yaml).

All inputs are read once, validated here, and passed by value through the pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from swiftlink_tooling.errors import ConfigurationError

# Should match platforms in Package.swift.
MACOS_TARGET_VERSION = "15.5"
IOS_TARGET_VERSION = "18.5"

SETTINGS_FILE_NAME = "swiftlink.yaml"

DEFAULT_SETTINGS: dict[str, Any] = {
    "macos_deployment_target": MACOS_TARGET_VERSION,
    "ios_deployment_target": IOS_TARGET_VERSION,
    "generated_dir": "generated",
    "bridge_files": ["src/main.rs"],
    "swift_sources": "src/swift/*.swift",
    "build_dir": ".build",
}

STRING_SETTINGS = (
    "macos_deployment_target",
    "ios_deployment_target",
    "generated_dir",
    "swift_sources",
    "build_dir",
)

# (field, env var). ABI may be empty but must be set.
ENV_VARS = (
    ("package_name", "CARGO_PKG_NAME"),
    ("profile", "PROFILE"),
    ("arch", "CARGO_CFG_TARGET_ARCH"),
    ("vendor", "CARGO_CFG_TARGET_VENDOR"),
    ("os", "CARGO_CFG_TARGET_OS"),
    ("abi", "CARGO_CFG_TARGET_ABI"),
)
EMPTY_ALLOWED = frozenset({"CARGO_CFG_TARGET_ABI"})


@dataclass(frozen=True)
class DeploymentTargets:
    """Minimum OS versions; used for the target triple and the *_DEPLOYMENT_TARGET env."""

    macos: str = MACOS_TARGET_VERSION
    ios: str = IOS_TARGET_VERSION


@dataclass(frozen=True)
class Settings:
    deployment_targets: DeploymentTargets = field(default_factory=DeploymentTargets)
    generated_dir: str = "generated"
    bridge_files: tuple[str, ...] = ("src/main.rs",)
    swift_sources: str = "src/swift/*.swift"
    build_dir: str = ".build"


@dataclass(frozen=True)
class BuildConfig:
    package_name: str
    profile: str
    arch: str
    vendor: str
    os: str
    abi: str
    project_root: Path
    settings: Settings = field(default_factory=Settings)

    @property
    def generated_dir(self) -> Path:
        return self.project_root / self.settings.generated_dir

    @property
    def bridge_files(self) -> list[Path]:
        return [self.project_root / p for p in self.settings.bridge_files]

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str],
        project_root: Path,
        settings: Settings | None = None,
    ) -> BuildConfig:
        """Read cargo build-script variables from env. Raises ConfigurationError on any missing one."""
        values: dict[str, str] = {}
        missing: list[str] = []
        for key, var in ENV_VARS:
            value = env.get(var)
            if value is None or (not value and var not in EMPTY_ALLOWED):
                missing.append(var)
                continue
            values[key] = value
        if missing:
            msg = f"Missing build environment variable(s): {', '.join(missing)}"
            raise ConfigurationError(msg, hint="run from a cargo build script (build.rs)")
        return cls(project_root=project_root, settings=settings or Settings(), **values)


def resolve_settings(overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return settings dict with defaults filled. Unknown keys are ignored."""
    out = dict(DEFAULT_SETTINGS)
    if overrides:
        out.update({k: v for k, v in overrides.items() if k in out})
    return out


def settings_from_mapping(data: Mapping[str, Any] | None) -> Settings:
    """Build Settings from a raw mapping (e.g. parsed swiftlink.yaml)."""
    s = resolve_settings(data)
    bridge_files = s["bridge_files"]
    if isinstance(bridge_files, str):
        bridge_files = [bridge_files]
    if not isinstance(bridge_files, list) or not all(isinstance(p, str) for p in bridge_files):
        msg = "bridge_files must be a list of paths"
        raise ConfigurationError(msg)
    for key in STRING_SETTINGS:
        value = s[key]
        if not isinstance(value, str):
            # YAML reads 10.10 as the float 10.1; versions must be quoted.
            msg = f"{key} must be a quoted string, got {type(value).__name__} {value!r}"
            raise ConfigurationError(msg)
        if not value.strip():
            msg = f"{key} must not be empty"
            raise ConfigurationError(msg)
    return Settings(
        deployment_targets=DeploymentTargets(
            macos=s["macos_deployment_target"],
            ios=s["ios_deployment_target"],
        ),
        generated_dir=s["generated_dir"],
        bridge_files=tuple(bridge_files),
        swift_sources=s["swift_sources"],
        build_dir=s["build_dir"],
    )


def load_settings(path: Path) -> Settings:
    """Load swiftlink.yaml if it exists, else defaults."""
    if not path.is_file():
        return Settings()
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        msg = f"Could not read {path}: {e}"
        raise ConfigurationError(msg) from e
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping"
        raise ConfigurationError(msg)
    return settings_from_mapping(data)
