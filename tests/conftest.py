"""Pytest configuration and fixtures for sysroot-matrix tests."""

import sys
import tempfile
from pathlib import Path

import pytest

from sysroot_matrix.core.log import ConsoleSink, setup_logger

BUILD_SCRIPT = """\
#!/bin/sh
echo "building sysroot for $1"
case "$1" in
    *fail*)
        echo "error: could not compile core for $1" >&2
        exit 1
        ;;
esac
"""


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging at debug level for the whole session."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "sysroot-matrix-tests",
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Project directory with a fake build tool.

    build.sh fails for any target containing "fail"; clean appends
    a line to clean.log so tests can count the calls.
    """
    (tmp_path / "build.sh").write_text(BUILD_SCRIPT)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def load_state(workdir, monkeypatch):
    """Build a State the way the CLI does, minus argument parsing.

    Keyword arguments become the ``config`` section, merged over
    the packaged defaults.
    """
    from sysroot_matrix.core.config import State

    monkeypatch.setattr(sys, "argv", ["sysroot-matrix"])

    def _load(**config):
        build = {
            "workdir": str(workdir),
            "clean_command": "echo clean >> clean.log",
            "setup_command": "sh build.sh {target}",
        }
        build.update(config.pop("build", {}))
        return State(config={"build": build, **config})

    return _load
