"""Commands that start an operation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import CliPositionalArg

from gitrewrite.command.base import (
    EXIT_FAILED,
    EXIT_OK,
    finish,
    open_controller,
    render_preview,
)
from gitrewrite.core.errors import GitRewriteError
from gitrewrite.core.log import logger
from gitrewrite.model.options import RebaseTodoEntry
from gitrewrite.model.types import OperationKind, RebaseAction

if TYPE_CHECKING:
    from gitrewrite.core.config import State


class OperationCommand(BaseModel):
    """Base for commands that start an operation."""

    kind: ClassVar[OperationKind]

    model_config = ConfigDict(populate_by_name=True)

    def target(self) -> str | list[str]:
        raise NotImplementedError

    def options(self) -> dict[str, Any]:
        return {}

    async def run_workflow(self, state: State) -> int:
        """Start the operation and report where it ended up.

        Returns:
            Exit code (0=completed, 1=failed, 2=needs attention)
        """
        try:
            target, options = self.target(), self.options()
        except (OSError, ValueError) as e:
            print(f"error: {e}")
            return EXIT_FAILED

        try:
            controller = await open_controller(state)
            session = await controller.start(self.kind, target, options)
        except GitRewriteError as e:
            logger.error(str(e))
            print(f"error: {e}")
            return EXIT_FAILED
        return await finish(state, session)


class MergeCommand(OperationCommand):
    """Merge a branch into the current branch."""

    kind: ClassVar[OperationKind] = OperationKind.MERGE

    branch: CliPositionalArg[str] = Field(description="Branch to merge")
    message: str | None = Field(
        default=None, description="Merge commit message"
    )
    no_ff: bool = Field(
        default=False, alias="no-ff",
        description="Always create a merge commit",
    )
    ff_only: bool = Field(
        default=False, alias="ff-only",
        description="Refuse anything but a fast-forward",
    )
    squash: bool = Field(
        default=False, description="Squash the branch into staged changes"
    )
    no_commit: bool = Field(
        default=False, alias="no-commit",
        description="Stage the merge result without committing",
    )

    def target(self):
        return self.branch

    def options(self):
        return {
            "message": self.message,
            "no_fast_forward": self.no_ff,
            "ff_only": self.ff_only,
            "squash": self.squash,
            "commit_immediately": not self.no_commit,
        }


def parse_todo(text: str) -> list[RebaseTodoEntry]:
    """Parse `action oid summary` lines; blanks and # comments skipped.

    Raises:
        ValueError: Unknown action or a line without an oid
    """
    aliases = {action.value[0]: action for action in RebaseAction}
    entries = []
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(maxsplit=2)
        if len(parts) < 2:
            raise ValueError(f"Todo line {number}: missing commit")
        action = aliases.get(parts[0]) if len(parts[0]) == 1 else None
        try:
            action = action or RebaseAction(parts[0])
        except ValueError:
            raise ValueError(
                f"Todo line {number}: unknown action {parts[0]!r}"
            ) from None
        entries.append(RebaseTodoEntry(
            action=action,
            oid=parts[1],
            summary=parts[2] if len(parts) > 2 else "",
        ))
    return entries


class RebaseCommand(OperationCommand):
    """Rebase the current branch onto a branch or commit."""

    kind: ClassVar[OperationKind] = OperationKind.REBASE

    onto: CliPositionalArg[str] = Field(
        description="Branch (or, with --commit, commit) to rebase onto"
    )
    commit: bool = Field(
        default=False, description="Treat ONTO as a commit id"
    )
    todo: Path | None = Field(
        default=None,
        description="Interactive todo file: one 'action oid summary' per line",
    )
    autosquash: bool = Field(
        default=False, description="Reorder fixup!/squash! commits"
    )
    preview: bool = Field(
        default=False,
        description="Print the commits to replay as a todo list and stop",
    )

    def target(self):
        # a commit target goes through options instead
        return None if self.commit else self.onto

    def options(self):
        options: dict[str, Any] = {"autosquash": self.autosquash}
        if self.commit:
            options["onto_commit"] = self.onto
        if self.todo is not None:
            options["entries"] = parse_todo(
                self.todo.read_text(encoding="utf-8")
            )
        return options

    async def run_workflow(self, state: State) -> int:
        if not self.preview:
            return await super().run_workflow(state)
        try:
            controller = await open_controller(state)
            preview = await controller.rebase_preview(self.onto)
        except GitRewriteError as e:
            logger.error(str(e))
            print(f"error: {e}")
            return EXIT_FAILED
        print(render_preview(preview))
        return EXIT_OK


class CherryPickCommand(OperationCommand):
    """Apply the changes of existing commits onto HEAD."""

    kind: ClassVar[OperationKind] = OperationKind.CHERRY_PICK

    commits: CliPositionalArg[list[str]] = Field(
        description="Commits to pick, in order"
    )
    no_commit: bool = Field(
        default=False, alias="no-commit",
        description="Apply changes without committing",
    )
    allow_empty: bool = Field(
        default=False, alias="allow-empty",
        description="Keep commits that become empty",
    )

    def target(self):
        return self.commits

    def options(self):
        return {"no_commit": self.no_commit, "allow_empty": self.allow_empty}


class RevertCommand(OperationCommand):
    """Create commits that undo existing commits."""

    kind: ClassVar[OperationKind] = OperationKind.REVERT

    commits: CliPositionalArg[list[str]] = Field(
        description="Commits to revert, in order"
    )
    no_commit: bool = Field(
        default=False, alias="no-commit",
        description="Apply the inverse changes without committing",
    )

    def target(self):
        return self.commits

    def options(self):
        return {"no_commit": self.no_commit}


class AmCommand(OperationCommand):
    """Apply a series of patches from mailbox files."""

    kind: ClassVar[OperationKind] = OperationKind.PATCH_APPLY

    patches: CliPositionalArg[list[str]] = Field(
        description="Mailbox or patch files"
    )
    three_way: bool = Field(
        default=True, alias="three-way",
        description="Fall back to a three-way merge",
    )

    def target(self):
        return self.patches

    def options(self):
        return {"three_way": self.three_way}
