"""The operation session: the one live rewrite per repository."""

from __future__ import annotations

from pydantic import Field

from gitrewrite.core.base import BaseState
from gitrewrite.model.conflict import ConflictFile, ConflictResolution
from gitrewrite.model.options import OperationOptions, describe_target
from gitrewrite.model.outcome import OperationOutcome, RebaseProgress
from gitrewrite.model.types import (
    BUSY_STATUSES,
    RESUMABLE_STATUSES,
    OperationKind,
    SessionStatus,
)


class OperationSession(BaseState):
    """State of one merge, rebase, cherry-pick, revert or patch apply.

    Only the controller mutates a session. Subscribers receive
    copies made with snapshot().
    """

    kind: OperationKind
    status: SessionStatus = SessionStatus.RUNNING
    options: OperationOptions | None = Field(
        default=None,
        description="Validated options; None for a restored session",
    )
    target: str = Field(
        default="",
        description="Branch, commit(s) or patches acted against",
    )
    conflicts: list[ConflictFile] = Field(default_factory=list)
    progress: RebaseProgress | None = None
    last_message: str = ""
    last_outcome: OperationOutcome | None = None
    warning: str | None = Field(
        default=None,
        description="Non-blocking problem, e.g. a failed abort",
    )
    generation: int = 0

    @classmethod
    def create(cls, options: OperationOptions, generation: int):
        return cls(
            kind=options.kind,
            options=options,
            target=describe_target(options),
            generation=generation,
        )

    @property
    def is_busy(self) -> bool:
        return self.status in BUSY_STATUSES

    @property
    def is_resumable(self) -> bool:
        return self.status in RESUMABLE_STATUSES

    @property
    def uncommitted(self) -> bool:
        """Completed, but the engine left the result staged only."""
        return (
            self.status is SessionStatus.COMPLETED
            and self.last_outcome is not None
            and not self.last_outcome.committed
        )

    @property
    def unresolved(self) -> list[ConflictFile]:
        return [
            conflict for conflict in self.conflicts
            if conflict.resolution is ConflictResolution.UNRESOLVED
        ]

    def conflict(self, path: str) -> ConflictFile | None:
        for conflict in self.conflicts:
            if conflict.path == path:
                return conflict
        return None

    def snapshot(self) -> OperationSession:
        return self.model_copy(deep=True)
