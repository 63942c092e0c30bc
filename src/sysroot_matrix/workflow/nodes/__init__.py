"""Workflow nodes for the matrix state machine."""

from sysroot_matrix.workflow.nodes.build_target import BuildTarget
from sysroot_matrix.workflow.nodes.initialize import Initialize
from sysroot_matrix.workflow.nodes.report import Report
from sysroot_matrix.workflow.nodes.reset import Reset

__all__ = [
    "Initialize",
    "BuildTarget",
    "Report",
    "Reset",
]
