"""BuildTarget node - clean the cache and build one sysroot."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from sysroot_matrix.core.config import State
from sysroot_matrix.core.log import logger
from sysroot_matrix.core.result import TargetResult
from sysroot_matrix.core.runner import Runner, combined_output
from sysroot_matrix.matrix.targets import fill_placeholders


@dataclass
class BuildTarget(BaseNode[State]):
    """Attempt the sysroot build for the target at ``index``."""

    index: int

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> "BuildTarget | Report":
        """Clean, build, record the outcome, move on.

        A failing build is recorded and the loop continues. A failing
        clean raises StepFailed and ends the run.

        Returns:
            BuildTarget: For the next target
            Report: After the last target
        """
        build = ctx.state.config.build
        matrix = ctx.state.runtime.matrix
        target = matrix.targets[self.index]
        runner = Runner()

        with logger.span(
            "Building sysroot for {target}",
            target=target,
            position=self.index + 1,
            total=len(matrix.targets),
        ):
            if build.clean_before_each:
                runner.execute(build.clean_command, cwd=build.workdir)

            result = runner.execute(
                fill_placeholders(build.setup_command, target=target),
                cwd=build.workdir,
                timeout=build.timeout,
                log_level="debug",
                check=False,
                merge_streams=True,
            )

        matrix.results[target] = TargetResult(
            target=target,
            success=result.exited == 0,
            returncode=result.exited,
            output=combined_output(result),
            duration=result.duration,
        )
        if result.exited == 0:
            logger.info("{target}: ok", target=target)
        else:
            logger.warn(
                "{target}: failed with return code {returncode}",
                target=target,
                returncode=result.exited,
            )

        if self.index + 1 < len(matrix.targets):
            return BuildTarget(index=self.index + 1)

        from sysroot_matrix.workflow.nodes.report import Report
        return Report()
