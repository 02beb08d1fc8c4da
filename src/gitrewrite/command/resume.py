"""Commands acting on the operation already in progress."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import CliPositionalArg

from gitrewrite.command.base import (
    EXIT_FAILED,
    finish,
    open_controller,
)
from gitrewrite.core.errors import GitRewriteError
from gitrewrite.core.log import logger
from gitrewrite.model.conflict import ConflictResolution

if TYPE_CHECKING:
    from gitrewrite.core.config import State


class SessionCommand(BaseModel):
    """Base for commands that act on the live session."""

    model_config = ConfigDict(populate_by_name=True)

    async def apply(self, controller):
        raise NotImplementedError

    async def run_workflow(self, state: State) -> int:
        try:
            controller = await open_controller(state)
            session = await self.apply(controller)
        except GitRewriteError as e:
            logger.error(str(e))
            print(f"error: {e}")
            return EXIT_FAILED
        return await finish(state, session)


class ContinueCommand(SessionCommand):
    """Continue after resolving conflicts or at an edit stop."""

    message: str | None = Field(
        default=None,
        description="New commit message at a rebase reword/edit stop",
    )

    async def apply(self, controller):
        return await controller.continue_(message=self.message)


class SkipCommand(SessionCommand):
    """Skip the commit or patch that stopped the operation."""

    async def apply(self, controller):
        return await controller.skip()


class AbortCommand(SessionCommand):
    """Abandon the operation and restore the previous state."""

    async def apply(self, controller):
        warning = await controller.abort()
        if warning:
            print(f"warning: {warning}")
        return controller.get_session()


class ResolveCommand(SessionCommand):
    """Resolve a conflicted path by taking one side or marking it done."""

    path: CliPositionalArg[str] = Field(description="Conflicted path")
    side: Literal["ours", "theirs", "edited"] = Field(
        default="ours",
        description="Version to keep; edited stages the file as it is now",
    )

    async def apply(self, controller):
        if self.side == "edited":
            return await controller.mark_resolved(self.path)
        return await controller.resolve(
            self.path, ConflictResolution(self.side)
        )


class StatusCommand(SessionCommand):
    """Show the operation in progress, if any."""

    async def apply(self, controller):
        return controller.get_session()
