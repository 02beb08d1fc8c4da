"""Transition graph definition."""

from pydantic_graph import Graph

from gitrewrite.core.log import logger
from gitrewrite.workflow.state import Transition


def create_transition_graph():
    """Create the graph every controller transition runs through.

    InvokeEngine → ApplyOutcome → [RefreshDerivedState] →
        [ResetToIdle] → End

    Returns:
        Graph with Transition as state_type
    """
    logger.debug("Building transition graph")

    # Lazy so that the nodes' string return annotations resolve here
    from gitrewrite.workflow.nodes.apply_outcome import ApplyOutcome
    from gitrewrite.workflow.nodes.invoke_engine import InvokeEngine
    from gitrewrite.workflow.nodes.refresh_state import RefreshDerivedState
    from gitrewrite.workflow.nodes.reset_idle import ResetToIdle

    return Graph(
        nodes=(
            InvokeEngine,
            ApplyOutcome,
            RefreshDerivedState,
            ResetToIdle,
        ),
        state_type=Transition,
    )
