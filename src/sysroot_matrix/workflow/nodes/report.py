"""Report node - write failure records and summarize."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from sysroot_matrix.core.config import State
from sysroot_matrix.core.log import logger
from sysroot_matrix.core.result import MatrixReport
from sysroot_matrix.matrix.records import FailureRecords
from sysroot_matrix.workflow.paths import failures_dir

FAILURE_HEADER = "Sysroots for the following targets failed to build:"


@dataclass
class Report(BaseNode[State, None, MatrixReport]):
    """Materialize failure records and print the summary."""

    async def run(self, ctx: GraphRunContext[State]) -> End[MatrixReport]:
        matrix = ctx.state.runtime.matrix
        report = MatrixReport(results=list(matrix.results.values()))

        records = FailureRecords(failures_dir(ctx.state.config))
        records.write(report.results)

        failed = records.failed_targets()
        if failed:
            matrix.status = "failed"
            print(FAILURE_HEADER)
            for target in failed:
                print(target)
            logger.error(
                "{count} of {total} sysroots failed to build",
                count=len(failed),
                total=len(report.results),
            )
        else:
            matrix.status = "passed"
            if report.results:
                logger.info(
                    "All {total} sysroots built", total=len(report.results)
                )

        return End(report)
