"""InvokeEngine node - issue the adapter call for a transition."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from gitrewrite.core.errors import AbortFailure, EngineError
from gitrewrite.core.log import logger
from gitrewrite.workflow.state import Action, Transition


@dataclass
class InvokeEngine(BaseNode[Transition, None, None]):
    """Call the adapter entry point for the transition's action.

    Engine errors are recorded on the transition rather than raised;
    ApplyOutcome turns them into a Failed session.
    """

    async def run(
        self, ctx: GraphRunContext[Transition]
    ) -> "ApplyOutcome":
        transition = ctx.state
        adapter = transition.controller.adapter
        kind = transition.kind

        logger.debug(
            f"Invoking engine: {transition.action.value} {kind.label}",
            generation=transition.generation,
        )

        try:
            match transition.action:
                case Action.START:
                    transition.outcome = await adapter.start(
                        transition.options
                    )
                case Action.CONTINUE:
                    transition.outcome = await adapter.continue_(
                        kind, message=transition.message
                    )
                case Action.SKIP:
                    transition.outcome = await adapter.skip(kind)
                case Action.ABORT:
                    await adapter.abort(kind)
        except AbortFailure as e:
            logger.warn(f"Abort of {kind.label} failed: {e}")
            transition.warning = str(e)
        except EngineError as e:
            logger.error(
                f"{transition.action.value.capitalize()} of {kind.label} "
                f"failed: {e}",
                command=e.command,
                returncode=e.returncode,
            )
            transition.error = str(e)

        from gitrewrite.workflow.nodes.apply_outcome import ApplyOutcome
        return ApplyOutcome()
