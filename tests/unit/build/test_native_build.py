"""
Unit tests for the native avr-libc build driver.

Tests:
- Build guard (existing archive, documentation builds)
- Stage order, working directories and environment
- Failure propagation per stage
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from avrlibc.build.native_build import BuildArtifacts, BuildStage, NativeBuildDriver
from avrlibc.build.process_runner import CommandResult, ProcessRunner
from avrlibc.config.target import TargetContext
from avrlibc.errors import (
    BootstrapFailedError,
    CompileFailedError,
    ConfigureFailedError,
)

HOST = "x86_64-unknown-linux-gnu"

AVR = TargetContext(is_embedded_arch=True, mcu_name="atmega328", is_documentation_build=False)
AVR_DOCS = TargetContext(is_embedded_arch=True, mcu_name="atmega328", is_documentation_build=True)
HOST_BUILD = TargetContext(is_embedded_arch=False, mcu_name=None, is_documentation_build=True)


def make_runner(*returncodes):
    """Create a runner mock that returns the given exit codes in order."""
    runner = Mock(spec=ProcessRunner)
    codes = list(returncodes)

    def run(command, cwd, env=None, capture_output=False):
        code = codes.pop(0) if codes else 0
        return CommandResult(command=list(command), cwd=Path(cwd), returncode=code)

    runner.run = Mock(side_effect=run)
    return runner


@pytest.fixture
def driver_factory(libc_tree):
    def factory(runner):
        return NativeBuildDriver(libc_tree, arch="avr6", host=HOST, runner=runner)
    return factory


class TestBuildArtifacts:
    """Test archive location."""

    def test_for_arch(self, tmp_path):
        artifacts = BuildArtifacts.for_arch(tmp_path, "avr6")

        assert artifacts.arch_lib_dir == tmp_path / "avr" / "lib" / "avr6"
        assert artifacts.static_lib_path == tmp_path / "avr" / "lib" / "avr6" / "libc.a"
        assert not artifacts.is_built

    def test_is_built(self, tmp_path):
        artifacts = BuildArtifacts.for_arch(tmp_path, "avr5")
        artifacts.arch_lib_dir.mkdir(parents=True)
        artifacts.static_lib_path.write_bytes(b"!<arch>\n")

        assert artifacts.is_built


class TestBuildGuard:
    """Test conditions that skip the native build."""

    def test_archive_exists(self, driver_factory):
        runner = make_runner()
        driver = driver_factory(runner)
        driver.artifacts.arch_lib_dir.mkdir(parents=True)
        driver.artifacts.static_lib_path.write_bytes(b"!<arch>\n")

        assert driver.ensure_built(AVR) is False
        runner.run.assert_not_called()
        assert driver.stage is BuildStage.COMPILED

    def test_documentation_build_without_archive(self, driver_factory):
        runner = make_runner()
        driver = driver_factory(runner)

        assert not driver.artifacts.is_built
        assert driver.ensure_built(AVR_DOCS) is False
        runner.run.assert_not_called()

    def test_host_build_without_archive(self, driver_factory):
        runner = make_runner()
        driver = driver_factory(runner)

        assert driver.ensure_built(HOST_BUILD) is False
        runner.run.assert_not_called()

    def test_needs_build_reason(self, driver_factory):
        driver = driver_factory(make_runner())

        needed, reason = driver.needs_build(AVR)
        assert needed is True
        assert "avr6" in reason

        needed, reason = driver.needs_build(HOST_BUILD)
        assert needed is False
        assert "documentation" in reason


class TestBuildStages:
    """Test the full build sequence."""

    def test_stage_order(self, driver_factory, libc_tree):
        runner = make_runner(0, 0, 0, 0)
        driver = driver_factory(runner)

        assert driver.ensure_built(AVR) is True
        assert driver.stage is BuildStage.COMPILED

        calls = runner.run.call_args_list
        assert len(calls) == 4

        assert calls[0].args[0] == ["sh", "bootstrap"]
        assert calls[0].kwargs["cwd"] == libc_tree

        assert calls[1].args[0] == ["sh", "configure", f"--build={HOST}", "--host=avr"]
        assert calls[1].kwargs["cwd"] == libc_tree
        assert calls[1].kwargs["env"] == {"CC": "avr-gcc"}

        assert calls[2].args[0] == ["make"]
        assert calls[2].kwargs["cwd"] == libc_tree / "include"

        assert calls[3].args[0] == ["make"]
        assert calls[3].kwargs["cwd"] == libc_tree / "avr" / "lib" / "avr6"

    def test_custom_compiler(self, libc_tree):
        runner = make_runner()
        driver = NativeBuildDriver(libc_tree, arch="avr5", host=HOST, cc="/opt/avr/bin/avr-gcc", runner=runner)

        driver.ensure_built(AVR)

        configure_call = runner.run.call_args_list[1]
        assert configure_call.kwargs["env"] == {"CC": "/opt/avr/bin/avr-gcc"}
        assert runner.run.call_args_list[3].kwargs["cwd"] == libc_tree / "avr" / "lib" / "avr5"

    def test_bootstrap_failure(self, driver_factory, libc_tree):
        runner = make_runner(1)
        driver = driver_factory(runner)

        with pytest.raises(BootstrapFailedError) as exc_info:
            driver.ensure_built(AVR)

        assert runner.run.call_count == 1
        assert driver.stage is BuildStage.NOT_BUILT
        assert exc_info.value.returncode == 1
        assert exc_info.value.command == ["sh", "bootstrap"]
        assert "sh bootstrap" in str(exc_info.value)
        assert str(libc_tree) in str(exc_info.value)

    def test_configure_failure(self, driver_factory):
        runner = make_runner(0, 2)
        driver = driver_factory(runner)

        with pytest.raises(ConfigureFailedError) as exc_info:
            driver.ensure_built(AVR)

        assert runner.run.call_count == 2
        assert driver.stage is BuildStage.BOOTSTRAPPED
        assert "--host=avr" in str(exc_info.value)

    def test_first_make_failure(self, driver_factory):
        runner = make_runner(0, 0, 2)
        driver = driver_factory(runner)

        with pytest.raises(CompileFailedError):
            driver.ensure_built(AVR)

        assert runner.run.call_count == 3
        assert driver.stage is BuildStage.CONFIGURED

    def test_second_make_failure(self, driver_factory):
        runner = make_runner(0, 0, 0, 2)
        driver = driver_factory(runner)

        with pytest.raises(CompileFailedError) as exc_info:
            driver.ensure_built(AVR)

        assert runner.run.call_count == 4
        assert exc_info.value.cwd == driver.artifacts.arch_lib_dir

    def test_process_not_started(self, driver_factory):
        runner = Mock(spec=ProcessRunner)
        runner.run = Mock(
            return_value=CommandResult(
                command=["sh", "bootstrap"],
                cwd=Path("."),
                returncode=None,
                error="No such file or directory: 'sh'",
            )
        )
        driver = driver_factory(runner)

        with pytest.raises(BootstrapFailedError, match="No such file or directory"):
            driver.ensure_built(AVR)

    def test_stages_out_of_order(self, driver_factory):
        driver = driver_factory(make_runner())

        with pytest.raises(RuntimeError, match="expected 'configured'"):
            driver.compile()
