"""Run command - builds every target's sysroot."""

import sys

from pydantic import BaseModel, Field

from sysroot_matrix.core.errors import StepFailed
from sysroot_matrix.core.log import logger


class RunCommand(BaseModel):
    """Build the sysroot of every target and report the failures.

    Each target is built once, in order, after wiping the build
    cache. Failed targets keep their build output in the failures
    directory. Exits 1 if any target failed, or with the failing
    command's status if the tooling itself broke.
    """

    timeout: int | None = Field(
        default=None,
        description="Override config.build.timeout (seconds per target)",
    )

    async def run_workflow(self, state: "State") -> int:
        """Run the matrix workflow.

        Returns:
            Exit code (0 all built, 1 some failed, other: tooling error)
        """
        if self.timeout is not None:
            state.config.build.timeout = self.timeout

        from sysroot_matrix.workflow.graph import create_workflow
        from sysroot_matrix.workflow.nodes.initialize import Initialize

        workflow = create_workflow()
        try:
            result = await workflow.run(Initialize(), state=state)
        except StepFailed as e:
            if e.output:
                sys.stderr.write(e.output)
                if not e.output.endswith("\n"):
                    sys.stderr.write("\n")
            logger.error("Aborted: {error}", error=str(e))
            return e.exit_code

        return result.output.exit_code
