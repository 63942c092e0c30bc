"""CLI command modules for sysroot-matrix."""

from sysroot_matrix.command.reset import ResetCommand
from sysroot_matrix.command.run import RunCommand
from sysroot_matrix.command.targets import TargetsCommand

__all__ = ["ResetCommand", "RunCommand", "TargetsCommand"]
