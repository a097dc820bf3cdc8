"""Tests for the process runner."""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from avrlibc.build.process_runner import ProcessRunner, get_subprocess_creation_flags


def test_get_subprocess_creation_flags_windows():
    """Test that Windows returns CREATE_NO_WINDOW flag."""
    with patch("sys.platform", "win32"):
        with patch.object(subprocess, "CREATE_NO_WINDOW", 0x08000000, create=True):
            assert get_subprocess_creation_flags() == 0x08000000


def test_get_subprocess_creation_flags_linux():
    """Test that Linux returns 0."""
    with patch("sys.platform", "linux"):
        assert get_subprocess_creation_flags() == 0


@patch("subprocess.run")
def test_run_success(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(args=["make"], returncode=0)

    result = ProcessRunner().run(["make"], cwd=tmp_path)

    assert result.success
    assert result.command == ["make"]
    assert result.cwd == tmp_path


@patch("subprocess.run")
def test_run_inherits_output_and_detaches_stdin(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(args=["make"], returncode=0)

    ProcessRunner().run(["make"], cwd=tmp_path)

    call_kwargs = mock_run.call_args[1]
    assert call_kwargs["cwd"] == tmp_path
    assert call_kwargs["stdin"] == subprocess.DEVNULL
    assert call_kwargs["capture_output"] is False
    assert call_kwargs["env"] is None


@patch("subprocess.run")
def test_run_merges_environment(mock_run, tmp_path, monkeypatch):
    monkeypatch.setenv("PATH_MARKER", "kept")
    mock_run.return_value = subprocess.CompletedProcess(args=["sh"], returncode=0)

    ProcessRunner().run(["sh", "configure"], cwd=tmp_path, env={"CC": "avr-gcc"})

    env = mock_run.call_args[1]["env"]
    assert env["CC"] == "avr-gcc"
    assert env["PATH_MARKER"] == "kept"


@patch("subprocess.run")
def test_run_failure_is_returned(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(
        args=["bindgen"], returncode=101, stdout="", stderr="panicked"
    )

    result = ProcessRunner().run(["bindgen"], cwd=tmp_path, capture_output=True)

    assert not result.success
    assert result.returncode == 101
    assert result.stderr == "panicked"


@patch("subprocess.run", side_effect=FileNotFoundError("No such file or directory: 'make'"))
def test_run_missing_executable(mock_run, tmp_path):
    result = ProcessRunner().run(["make"], cwd=tmp_path)

    assert not result.success
    assert result.returncode is None
    assert "make" in result.error


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_run_real_process(tmp_path):
    """Run an actual command to check the wiring end to end."""
    result = ProcessRunner().run(["sh", "-c", "pwd"], cwd=tmp_path, capture_output=True)

    assert result.success
    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()
