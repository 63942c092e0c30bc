"""Graph workflow definition."""

from pydantic_graph import Graph

from sysroot_matrix.core.config import State
from sysroot_matrix.core.log import logger


def create_workflow():
    """Create the matrix workflow graph.

    Initialize -> BuildTarget (once per target, in order) -> Report

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    from sysroot_matrix.workflow.nodes.build_target import BuildTarget
    from sysroot_matrix.workflow.nodes.initialize import Initialize
    from sysroot_matrix.workflow.nodes.report import Report

    return Graph(
        nodes=(
            Initialize,
            BuildTarget,
            Report,
        ),
        state_type=State,
    )
