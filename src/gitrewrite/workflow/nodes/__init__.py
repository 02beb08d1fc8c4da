"""Nodes of the transition graph."""

from gitrewrite.workflow.nodes.apply_outcome import ApplyOutcome
from gitrewrite.workflow.nodes.invoke_engine import InvokeEngine
from gitrewrite.workflow.nodes.refresh_state import RefreshDerivedState
from gitrewrite.workflow.nodes.reset_idle import ResetToIdle

__all__ = [
    "InvokeEngine",
    "ApplyOutcome",
    "RefreshDerivedState",
    "ResetToIdle",
]
