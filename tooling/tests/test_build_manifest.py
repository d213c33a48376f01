"""Tests for swiftlink_tooling.build.manifest (Package.swift consistency)."""

from pathlib import Path

import pytest


class TestDeclaredPlatformMajor:
    @pytest.mark.parametrize(
        ("manifest", "expected"),
        [
            (".macOS(.v15)", 15),
            (".macOS(.v10_15)", 10),
            ('.macOS("15.5")', 15),
            (".iOS(.v18)", None),
        ],
    )
    def test_macos_forms(self, manifest: str, expected: int | None) -> None:
        from swiftlink_tooling.build.manifest import declared_platform_major

        assert declared_platform_major(manifest, "macOS") == expected


class TestCheckPackageManifest:
    def test_consistent_manifest_has_no_warnings(self, crate_dir: Path) -> None:
        from swiftlink_tooling.build.manifest import check_package_manifest
        from swiftlink_tooling.config import DeploymentTargets

        assert check_package_manifest(crate_dir, "rust_swift", DeploymentTargets()) == []

    def test_version_mismatch_warns(self, crate_dir: Path) -> None:
        from swiftlink_tooling.build.manifest import check_package_manifest
        from swiftlink_tooling.config import DeploymentTargets

        warnings = check_package_manifest(
            crate_dir, "rust_swift", DeploymentTargets(macos="14.0", ios="18.5")
        )
        assert len(warnings) == 1
        assert ".macOS v15" in warnings[0] and "14.0" in warnings[0]

    def test_wrong_product_name_warns(self, crate_dir: Path) -> None:
        from swiftlink_tooling.build.manifest import check_package_manifest
        from swiftlink_tooling.config import DeploymentTargets

        warnings = check_package_manifest(crate_dir, "other_crate", DeploymentTargets())
        assert warnings == [
            "Package.swift has no static library product named 'other_crate' (found: rust_swift)"
        ]

    def test_missing_platform_and_manifest(self, tmp_path: Path) -> None:
        from swiftlink_tooling.build.manifest import check_package_manifest
        from swiftlink_tooling.config import DeploymentTargets

        assert "not found" in check_package_manifest(tmp_path, "x", DeploymentTargets())[0]
        (tmp_path / "Package.swift").write_text(
            'platforms: [.macOS(.v15)], products: [.library(name: "x", type: .static, targets: [])]'
        )
        assert check_package_manifest(tmp_path, "x", DeploymentTargets()) == [
            "Package.swift declares no .iOS platform"
        ]
