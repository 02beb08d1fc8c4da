"""RefreshDerivedState node - reload caches after repository changes."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitrewrite.workflow.state import Action, Transition


@dataclass
class RefreshDerivedState(BaseNode[Transition, None, None]):
    """Hand the resulting status to the refresh coordinator.

    The coordinator schedules its reloads and returns at once; the
    transition does not wait for them.
    """

    async def run(
        self, ctx: GraphRunContext[Transition]
    ) -> "ResetToIdle | End[None]":
        transition = ctx.state
        refresh = transition.controller.refresh
        if refresh is not None:
            refresh.refresh_after(
                transition.kind, transition.resulting_status
            )

        if transition.action is Action.ABORT:
            from gitrewrite.workflow.nodes.reset_idle import ResetToIdle
            return ResetToIdle()
        return End(None)
