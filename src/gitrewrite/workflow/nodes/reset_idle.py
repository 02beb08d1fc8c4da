"""ResetToIdle node - drop an aborted session."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitrewrite.core.log import logger
from gitrewrite.workflow.state import Transition


@dataclass
class ResetToIdle(BaseNode[Transition, None, None]):
    async def run(self, ctx: GraphRunContext[Transition]) -> End[None]:
        controller = ctx.state.controller
        session = controller.current
        if session is not None and session.generation == ctx.state.generation:
            logger.info(f"{session.kind.label} aborted; session reset")
            controller.reset()
        return End(None)
