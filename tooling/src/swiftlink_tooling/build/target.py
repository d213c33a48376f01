"""Resolve the Swift target triple and SDK id from cargo's target cfg values."""

from __future__ import annotations

from dataclasses import dataclass

from swiftlink_tooling.config import DeploymentTargets
from swiftlink_tooling.errors import UnsupportedPlatform

ARCH_ALIASES = {
    "aarch64": "arm64",
}

OS_SDKS = {
    "macos": "macosx",
    "ios": "iphoneos",
}

SIMULATOR_ABI = "sim"


@dataclass(frozen=True)
class TargetDescriptor:
    architecture: str
    vendor: str
    os: str
    abi: str
    versioned_os: str
    sdk: str
    triple: str


def is_supported_os(os_name: str) -> bool:
    return os_name in OS_SDKS


def normalize_arch(arch: str) -> str:
    """Rust arch name -> Apple arch name (aarch64 -> arm64)."""
    return ARCH_ALIASES.get(arch, arch)


def versioned_os(os_name: str, abi: str, targets: DeploymentTargets) -> str:
    """OS component of the triple, e.g. macosx15.5 or ios18.5-simulator."""
    if os_name == "macos":
        return f"macosx{targets.macos}"
    if os_name == "ios":
        if abi == SIMULATOR_ABI:
            return f"ios{targets.ios}-simulator"
        return f"ios{targets.ios}"
    msg = f"Unsupported target OS: {os_name!r}"
    raise UnsupportedPlatform(msg, hint=f"supported: {', '.join(sorted(OS_SDKS))}")


def resolve_target(
    arch: str,
    vendor: str,
    os_name: str,
    abi: str,
    targets: DeploymentTargets | None = None,
) -> TargetDescriptor:
    """Build the TargetDescriptor. Raises UnsupportedPlatform for non-Apple OSes."""
    targets = targets or DeploymentTargets()
    os_part = versioned_os(os_name, abi, targets)
    architecture = normalize_arch(arch)
    return TargetDescriptor(
        architecture=architecture,
        vendor=vendor,
        os=os_name,
        abi=abi,
        versioned_os=os_part,
        sdk=OS_SDKS[os_name],
        triple=f"{architecture}-{vendor}-{os_part}",
    )
