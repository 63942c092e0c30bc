"""Tests for the reset command."""

import asyncio

from sysroot_matrix.command.reset import ResetCommand


def test_reset_removes_failures(load_state, workdir):
    (workdir / "failures").mkdir()
    (workdir / "failures" / "x86_64-fail-target").write_text("output")
    state = load_state()

    assert asyncio.run(ResetCommand().run_workflow(state)) == 0
    assert not (workdir / "failures").exists()
    assert state.runtime.reset.removed is True


def test_reset_without_failures(load_state, workdir):
    state = load_state()

    assert asyncio.run(ResetCommand().run_workflow(state)) == 0
    assert state.runtime.reset.removed is False
