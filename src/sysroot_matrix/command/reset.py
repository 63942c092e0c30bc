"""Reset command - removes failure records."""

from pydantic import BaseModel


class ResetCommand(BaseModel):
    """Delete the failures directory left by a previous run."""

    async def run_workflow(self, state: "State") -> int:
        from pydantic_graph import Graph

        from sysroot_matrix.workflow.nodes.reset import Reset

        workflow = Graph(nodes=(Reset,), state_type=type(state))
        await workflow.run(Reset(), state=state)
        return 0
