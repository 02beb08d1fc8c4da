"""ApplyOutcome node - fold an engine outcome into the session."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from gitrewrite.core.log import logger
from gitrewrite.model.outcome import OperationOutcome
from gitrewrite.model.types import SessionStatus
from gitrewrite.workflow.refresh import REFRESH_STATUSES
from gitrewrite.workflow.state import Action, Transition


def interpret(outcome: OperationOutcome) -> SessionStatus:
    """Map an outcome to the status it puts the session in.

    Conflicts win over everything: an outcome that lists conflicts
    is never Completed, whatever its success flag says.
    """
    if outcome.conflicts:
        return SessionStatus.CONFLICTED
    if outcome.requires_edit:
        return SessionStatus.PAUSED
    if outcome.success:
        return SessionStatus.COMPLETED
    return SessionStatus.FAILED


@dataclass
class ApplyOutcome(BaseNode[Transition, None, None]):
    """Apply the transition's result unless a newer call superseded it."""

    async def run(
        self, ctx: GraphRunContext[Transition]
    ) -> "RefreshDerivedState | End[None]":
        transition = ctx.state
        controller = transition.controller
        session = controller.current

        if session is None or session.generation != transition.generation:
            logger.debug(
                f"Discarding stale {transition.action.value} outcome",
                generation=transition.generation,
                current=session.generation if session else None,
            )
            return End(None)

        if transition.action is Action.ABORT:
            if transition.warning:
                session.warning = transition.warning
                controller.notify()
            transition.resulting_status = SessionStatus.ABORTED
            from gitrewrite.workflow.nodes.refresh_state import (
                RefreshDerivedState,
            )
            return RefreshDerivedState()

        if transition.error is not None:
            status = SessionStatus.FAILED
            session.conflicts = []
            session.last_message = transition.error
            session.last_outcome = None
        else:
            outcome = transition.outcome
            status = interpret(outcome)
            session.conflicts = (
                [conflict.model_copy() for conflict in outcome.conflicts]
                if status is SessionStatus.CONFLICTED else []
            )
            session.last_message = outcome.message
            session.last_outcome = outcome
            if outcome.progress is not None or status in REFRESH_STATUSES:
                session.progress = outcome.progress

        session.status = status
        transition.resulting_status = status
        logger.info(
            f"{session.kind.label} {transition.action.value} -> "
            f"{status.value}",
            conflicts=len(session.conflicts),
        )
        controller.notify()

        if status in REFRESH_STATUSES:
            from gitrewrite.workflow.nodes.refresh_state import (
                RefreshDerivedState,
            )
            return RefreshDerivedState()
        return End(None)
