"""Tests for Runner."""

import time

import pytest

from sysroot_matrix.core.errors import StepFailed
from sysroot_matrix.core.runner import Runner, combined_output


def test_successful_command(tmp_path):
    """Successful commands return their output."""
    result = Runner().execute("echo 'Hello World'", cwd=tmp_path)

    assert result.exited == 0
    assert "Hello World" in result.stdout
    assert result.duration >= 0


def test_failed_command_raises_step_failed(tmp_path):
    """A failing command raises StepFailed when checked."""
    with pytest.raises(StepFailed) as excinfo:
        Runner().execute("echo broken >&2; exit 3", cwd=tmp_path)

    assert excinfo.value.returncode == 3
    assert excinfo.value.exit_code == 3
    assert "broken" in excinfo.value.output
    assert "exit 3" in excinfo.value.command


def test_failed_command_unchecked(tmp_path):
    """check=False returns the failing result instead of raising."""
    result = Runner().execute("false", cwd=tmp_path, check=False)

    assert result.exited != 0


def test_runs_in_cwd(tmp_path):
    """Commands run inside the requested directory."""
    (tmp_path / "marker.txt").write_text("here")

    result = Runner().execute("cat marker.txt", cwd=tmp_path)

    assert result.stdout == "here"


def test_merge_streams_keeps_order(tmp_path):
    """Merged streams capture stderr in stdout, in order."""
    result = Runner().execute(
        "echo one; echo two >&2; echo three",
        cwd=tmp_path,
        merge_streams=True,
    )

    assert result.stdout.splitlines() == ["one", "two", "three"]
    assert combined_output(result) == "one\ntwo\nthree\n"


def test_output_with_braces_is_logged(tmp_path):
    """Output lines that look like templates do not break logging."""
    result = Runner().execute(
        "echo 'fn main() { {x} }'", cwd=tmp_path, log_level="debug"
    )

    assert "{x}" in result.stdout


def test_timeout_handling(tmp_path):
    """Timeouts come back as exit code -1."""
    result = Runner().execute("sleep 10", cwd=tmp_path, timeout=1, check=False)

    assert result.exited == -1


def test_timeout_is_step_failure_when_checked(tmp_path):
    """A checked command that times out is a step failure."""
    with pytest.raises(StepFailed) as excinfo:
        Runner().execute("sleep 10", cwd=tmp_path, timeout=1)

    assert excinfo.value.exit_code == 1


def test_timeout_kills_grandchildren(tmp_path):
    """A timeout kills what the command started, not just the shell."""
    started = time.monotonic()
    result = Runner().execute(
        "sh -c 'sleep 3; echo late >> orphan.log'; echo done",
        cwd=tmp_path,
        timeout=1,
        check=False,
        merge_streams=True,
    )
    elapsed = time.monotonic() - started

    assert result.exited == -1
    assert elapsed < 2.5

    time.sleep(3)
    assert not (tmp_path / "orphan.log").exists()
