"""Engine results per operation kind and the normalized outcome."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from gitrewrite.model.conflict import ConflictFile
from gitrewrite.model.types import OperationKind, RebaseAction


class MergeType(StrEnum):
    UP_TO_DATE = "up_to_date"
    FAST_FORWARD = "fast_forward"
    NORMAL = "normal"
    CONFLICTED = "conflicted"


class RebaseProgress(BaseModel):
    """Where a stopped rebase (or mailbox apply) currently is."""

    current_step: int = 0
    total_steps: int = 0
    stopped_oid: str | None = None
    head_name: str | None = None
    onto: str | None = None
    paused_action: RebaseAction | None = None
    commit_message: str | None = None


class MergeResult(BaseModel):
    success: bool
    merge_type: MergeType = MergeType.NORMAL
    commit_oid: str | None = None
    conflicts: list[ConflictFile] = Field(default_factory=list)
    message: str = ""
    committed: bool = True


class RebaseResult(BaseModel):
    success: bool
    commits_rebased: int = 0
    current_commit: str | None = None
    total_commits: int | None = None
    conflicts: list[ConflictFile] = Field(default_factory=list)
    message: str = ""
    progress: RebaseProgress | None = Field(
        default=None,
        description="Set while the rebase is still in progress",
    )


class CherryPickResult(BaseModel):
    success: bool
    commit_oids: list[str] = Field(default_factory=list)
    conflicts: list[ConflictFile] = Field(default_factory=list)
    message: str = ""


class RevertResult(BaseModel):
    success: bool
    commit_oids: list[str] = Field(default_factory=list)
    conflicts: list[ConflictFile] = Field(default_factory=list)
    message: str = ""


class PatchResult(BaseModel):
    success: bool = True
    message: str = ""
    patches: list[str] = Field(default_factory=list)
    conflicts: list[ConflictFile] = Field(default_factory=list)


class OperationOutcome(BaseModel):
    """Normalized result of one adapter call.

    `requires_edit` marks a deliberate rebase stop as opposed to a
    conflict. `no_op` marks a success that changed nothing (merge
    already up to date). `committed` is False when the engine staged
    the result without committing it.
    """

    success: bool
    message: str = ""
    conflicts: list[ConflictFile] = Field(default_factory=list)
    requires_edit: bool = False
    no_op: bool = False
    committed: bool = True
    progress: RebaseProgress | None = None


class OperationState(BaseModel):
    """The operation the repository itself reports as in progress."""

    kind: OperationKind | None = None
    progress: RebaseProgress | None = None
    target: str | None = None

    @property
    def in_progress(self) -> bool:
        return self.kind is not None
