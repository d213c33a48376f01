"""Check Package.swift against the configured deployment targets and package name.

Returns warnings only; the build continues either way.
"""

from __future__ import annotations

import re
from pathlib import Path

from swiftlink_tooling.config import DeploymentTargets

MANIFEST_NAME = "Package.swift"

# .macOS(.v15), .macOS(.v10_15), .macOS("15.5")
_PLATFORM_RE = r"\.{name}\(\s*(?:\.v(\d+)(?:_\d+)*|\"(\d+)[^\"]*\")\s*\)"
_STATIC_LIB_RE = re.compile(r'\.library\(\s*name:\s*"([^"]+)"\s*,\s*type:\s*\.static\b')


def declared_platform_major(manifest: str, platform: str) -> int | None:
    """Major version declared for platform (macOS, iOS) in the manifest, or None."""
    m = re.search(_PLATFORM_RE.format(name=platform), manifest)
    if not m:
        return None
    return int(m.group(1) or m.group(2))


def static_library_products(manifest: str) -> list[str]:
    return _STATIC_LIB_RE.findall(manifest)


def _major(version: str) -> int | None:
    m = re.match(r"^\s*(\d+)", version)
    return int(m.group(1)) if m else None


def check_package_manifest(
    project_root: Path,
    package_name: str,
    targets: DeploymentTargets,
) -> list[str]:
    """Return human-readable warnings; empty list when the manifest is consistent."""
    path = project_root / MANIFEST_NAME
    if not path.is_file():
        return [f"{path} not found"]
    manifest = path.read_text()
    warnings: list[str] = []
    for platform, configured in (("macOS", targets.macos), ("iOS", targets.ios)):
        declared = declared_platform_major(manifest, platform)
        if declared is None:
            warnings.append(f"{MANIFEST_NAME} declares no .{platform} platform")
            continue
        want = _major(configured)
        if want is not None and declared != want:
            warnings.append(
                f"{MANIFEST_NAME} declares .{platform} v{declared} "
                f"but the deployment target is {configured}"
            )
    products = static_library_products(manifest)
    if package_name not in products:
        warnings.append(
            f"{MANIFEST_NAME} has no static library product named {package_name!r}"
            + (f" (found: {', '.join(products)})" if products else "")
        )
    return warnings
