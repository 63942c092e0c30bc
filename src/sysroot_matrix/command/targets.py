"""Targets command - prints the discovered target list."""

import sys

from pydantic import BaseModel

from sysroot_matrix.core.errors import StepFailed
from sysroot_matrix.core.log import logger
from sysroot_matrix.core.runner import Runner
from sysroot_matrix.matrix.targets import discover_targets


class TargetsCommand(BaseModel):
    """Print the targets a run would build, one per line."""

    async def run_workflow(self, state: "State") -> int:
        config = state.config
        try:
            targets = discover_targets(
                config.targets, Runner(), cwd=config.build.workdir
            )
        except StepFailed as e:
            sys.stderr.write(e.output)
            logger.error("Aborted: {error}", error=str(e))
            return e.exit_code

        state.runtime.matrix.targets = targets
        for target in targets:
            print(target)
        return 0
