"""Initialize node - reset failure records and discover targets."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from sysroot_matrix.core.config import State
from sysroot_matrix.core.log import logger
from sysroot_matrix.core.runner import Runner
from sysroot_matrix.matrix.records import FailureRecords
from sysroot_matrix.matrix.targets import discover_targets
from sysroot_matrix.workflow.paths import failures_dir


@dataclass
class Initialize(BaseNode[State]):
    """Start a matrix run from a clean slate."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "BuildTarget | Report":
        """Wipe the failures directory and load the target list.

        Returns:
            BuildTarget: For the first target
            Report: If there is nothing to build
        """
        config = ctx.state.config
        matrix = ctx.state.runtime.matrix

        # Destructive: results never accumulate across runs
        records = FailureRecords(failures_dir(config))
        if records.reset():
            logger.debug(
                "Removed previous failure records in {path}",
                path=str(records.directory),
            )

        matrix.targets = discover_targets(
            config.targets, Runner(), cwd=config.build.workdir
        )
        matrix.results = {}
        matrix.status = "running"
        logger.info(
            "Building sysroots for {count} targets",
            count=len(matrix.targets),
        )

        if not matrix.targets:
            from sysroot_matrix.workflow.nodes.report import Report
            return Report()

        from sysroot_matrix.workflow.nodes.build_target import BuildTarget
        return BuildTarget(index=0)
