"""Reset node - delete the failures directory."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from sysroot_matrix.core.config import State
from sysroot_matrix.core.log import logger
from sysroot_matrix.matrix.records import FailureRecords
from sysroot_matrix.workflow.paths import failures_dir


@dataclass
class Reset(BaseNode[State]):
    """Remove failure records left by a previous run."""

    async def run(self, ctx: GraphRunContext[State]) -> End[None]:
        records = FailureRecords(failures_dir(ctx.state.config))
        ctx.state.runtime.reset.removed = records.remove()
        if ctx.state.runtime.reset.removed:
            logger.info("Removed {path}", path=str(records.directory))
        else:
            logger.info("Nothing to remove at {path}", path=str(records.directory))
        return End(None)
