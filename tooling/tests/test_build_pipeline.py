"""End-to-end tests for swiftlink_tooling.build.pipeline with a fake toolchain."""

import io
import logging
from pathlib import Path

import pytest
from conftest import SWIFT_PATH, FakeToolchain, target_info_doc


def _run(env, crate_dir: Path, tc: FakeToolchain) -> list[str]:
    from swiftlink_tooling.build.pipeline import run

    out = io.StringIO()
    assert run(env=env, project_root=crate_dir, toolchain=tc, stream=out) == 0
    return out.getvalue().splitlines()


class TestScenarios:
    def test_a_macos_debug(self, cargo_env, crate_dir: Path) -> None:
        tc = FakeToolchain()
        lines = _run(cargo_env, crate_dir, tc)

        assert tc.calls[0] == ("find_tool", ("macosx", "swift"))
        assert tc.calls[1] == ("print_target_info", (SWIFT_PATH, "x86_64-apple-macosx15.5"))
        name, (cmd, cwd, env) = tc.calls[2]
        assert name == "run_build"
        assert cmd[:6] == [SWIFT_PATH, "build", "-c", "debug", "--triple", "x86_64-apple-macosx15.5"]
        assert cmd[-1] == str(crate_dir / "generated" / "bridging_header.h")
        assert cwd == crate_dir
        assert "SDKROOT" not in env
        assert lines[-1] == "cargo:rustc-env=MACOSX_DEPLOYMENT_TARGET=15.5"
        build_out = crate_dir / ".build" / "x86_64-apple-macosx" / "debug"
        assert f"cargo:rustc-link-search=native={build_out}" in lines
        assert "cargo:rustc-link-lib=static=rust_swift" in lines

    def test_b_ios_simulator_release(self, cargo_env, crate_dir: Path) -> None:
        cargo_env.update(
            {
                "CARGO_CFG_TARGET_OS": "ios",
                "CARGO_CFG_TARGET_ARCH": "aarch64",
                "CARGO_CFG_TARGET_ABI": "sim",
                "PROFILE": "release",
            }
        )
        tc = FakeToolchain(
            target_info=target_info_doc(
                unversioned="arm64-apple-ios-simulator",
                triple="arm64-apple-ios18.5-simulator",
            )
        )
        lines = _run(cargo_env, crate_dir, tc)

        assert tc.calls[0] == ("find_tool", ("iphoneos", "swift"))
        assert tc.calls[1][1][1] == "arm64-apple-ios18.5-simulator"
        build_out = crate_dir / ".build" / "arm64-apple-ios-simulator" / "release"
        assert f"cargo:rustc-link-search=native={build_out}" in lines
        assert lines[-1] == "cargo:rustc-env=IPHONEOS_DEPLOYMENT_TARGET=18.5"
        assert not any("aarch64" in l for l in lines)

    def test_c_linux_fails_before_any_process(self, cargo_env, crate_dir: Path) -> None:
        from swiftlink_tooling.build.pipeline import build_swift
        from swiftlink_tooling.config import BuildConfig
        from swiftlink_tooling.errors import UnsupportedPlatform

        cargo_env["CARGO_CFG_TARGET_OS"] = "linux"
        config = BuildConfig.from_env(cargo_env, crate_dir)
        tc = FakeToolchain()
        with pytest.raises(UnsupportedPlatform):
            build_swift(config, tc, io.StringIO())
        assert tc.calls == []
        assert not (crate_dir / "generated").exists()

    def test_d_rpath_required_aborts_before_build(self, cargo_env, crate_dir: Path) -> None:
        from swiftlink_tooling.build.pipeline import run
        from swiftlink_tooling.errors import PolicyViolation

        tc = FakeToolchain(target_info=target_info_doc(requires_rpath=True))
        out = io.StringIO()
        with pytest.raises(PolicyViolation):
            run(env=cargo_env, project_root=crate_dir, toolchain=tc, stream=out)
        assert not tc.called("run_build")
        assert out.getvalue() == ""


class TestRunGate:
    def test_non_apple_os_is_noop(self, crate_dir: Path) -> None:
        from swiftlink_tooling.build.pipeline import run

        tc = FakeToolchain()
        out = io.StringIO()
        rc = run(env={"CARGO_CFG_TARGET_OS": "linux"}, project_root=crate_dir, toolchain=tc, stream=out)
        assert rc == 0
        assert tc.calls == []
        assert out.getvalue() == ""

    def test_missing_os_variable_raises(self, crate_dir: Path) -> None:
        from swiftlink_tooling.build.pipeline import run
        from swiftlink_tooling.errors import ConfigurationError

        with pytest.raises(ConfigurationError, match="CARGO_CFG_TARGET_OS"):
            run(env={}, project_root=crate_dir, toolchain=FakeToolchain())

    def test_missing_other_variable_raises_before_any_process(
        self, cargo_env, crate_dir: Path
    ) -> None:
        from swiftlink_tooling.build.pipeline import run
        from swiftlink_tooling.errors import ConfigurationError

        del cargo_env["CARGO_PKG_NAME"]
        tc = FakeToolchain()
        with pytest.raises(ConfigurationError):
            run(env=cargo_env, project_root=crate_dir, toolchain=tc)
        assert tc.calls == []


class TestPipelineDetails:
    def test_link_search_follows_project_root_not_cwd(
        self, cargo_env, crate_dir: Path, tmp_path_factory, monkeypatch
    ) -> None:
        monkeypatch.chdir(tmp_path_factory.mktemp("elsewhere"))
        tc = FakeToolchain()
        lines = _run(cargo_env, crate_dir, tc)
        _, (_, cwd, _) = tc.calls[2]
        build_out = cwd / ".build" / "x86_64-apple-macosx" / "debug"
        assert cwd == crate_dir
        assert f"cargo:rustc-link-search=native={build_out}" in lines
        assert not any("native=./" in l for l in lines)

    def test_build_failure_emits_nothing(self, cargo_env, crate_dir: Path) -> None:
        from swiftlink_tooling.build.pipeline import run
        from swiftlink_tooling.errors import SecondaryBuildFailed

        out = io.StringIO()
        with pytest.raises(SecondaryBuildFailed):
            run(env=cargo_env, project_root=crate_dir, toolchain=FakeToolchain(build_rc=1), stream=out)
        assert out.getvalue() == ""

    def test_bridges_generated_before_build(self, cargo_env, crate_dir: Path) -> None:
        _run(cargo_env, crate_dir, FakeToolchain())
        gen = crate_dir / "generated"
        assert (gen / "bridging_header.h").is_file()
        assert (gen / "rust_swift" / "rust_swift.h").is_file()
        assert "__swift_bridge__$add" in (gen / "rust_swift" / "rust_swift.swift").read_text()

    def test_settings_file_is_honoured(self, cargo_env, crate_dir: Path) -> None:
        (crate_dir / "swiftlink.yaml").write_text("macos_deployment_target: '15.0'\n")
        tc = FakeToolchain()
        lines = _run(cargo_env, crate_dir, tc)
        assert tc.calls[1][1][1] == "x86_64-apple-macosx15.0"
        assert lines[-1] == "cargo:rustc-env=MACOSX_DEPLOYMENT_TARGET=15.0"

    def test_manifest_mismatch_is_logged(self, cargo_env, crate_dir: Path, caplog) -> None:
        (crate_dir / "swiftlink.yaml").write_text("ios_deployment_target: '17.0'\n")
        with caplog.at_level(logging.WARNING, logger="swiftlink_tooling"):
            _run(cargo_env, crate_dir, FakeToolchain())
        assert any(".iOS v18" in r.getMessage() for r in caplog.records)
