"""Interface of the git engine that performs the actual rewrites.

The engine does the mechanics (running git, reading its state
files) and reports per-kind results. It knows nothing about
sessions; the adapter and controller build on top of it.

Every method may raise EngineError for transport-level failures:
git not found, I/O errors, or a repository in a state the command
cannot work with.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from gitrewrite.model.conflict import (
    ConflictContent,
    ConflictFile,
    ConflictResolution,
)
from gitrewrite.model.options import RebaseTodoEntry
from gitrewrite.model.outcome import (
    CherryPickResult,
    MergeResult,
    OperationState,
    PatchResult,
    RebaseProgress,
    RebaseResult,
    RevertResult,
)
from gitrewrite.model.repository import (
    BranchInfo,
    CommitSummary,
    RebasePreview,
    StashEntry,
    StatusEntry,
)


class GitEngine(ABC):
    """Asynchronous command interface to the git engine."""

    # ---- merge ----

    @abstractmethod
    async def merge(
        self,
        branch: str,
        message: str | None = None,
        no_ff: bool = False,
        ff_only: bool = False,
        squash: bool = False,
        no_commit: bool = False,
    ) -> MergeResult:
        """Merge `branch` into HEAD."""

    @abstractmethod
    async def merge_abort(self) -> None: ...

    @abstractmethod
    async def merge_continue(self) -> MergeResult: ...

    # ---- rebase ----

    @abstractmethod
    async def rebase(
        self,
        onto: str,
        entries: Sequence[RebaseTodoEntry] | None = None,
        autosquash: bool = False,
    ) -> RebaseResult:
        """Rebase HEAD onto `onto`; interactive when entries are given."""

    @abstractmethod
    async def rebase_abort(self) -> None: ...

    @abstractmethod
    async def rebase_continue(self) -> RebaseResult: ...

    @abstractmethod
    async def rebase_continue_with_message(
        self, message: str
    ) -> RebaseResult:
        """Continue a reword stop using `message` for the commit."""

    @abstractmethod
    async def rebase_skip(self) -> RebaseResult: ...

    @abstractmethod
    async def rebase_progress(self) -> RebaseProgress | None:
        """Progress of the rebase in progress, or None."""

    @abstractmethod
    async def rebase_preview(self, onto: str) -> RebasePreview:
        """Commits a rebase of HEAD onto `onto` would replay."""

    # ---- cherry-pick ----

    @abstractmethod
    async def cherry_pick(
        self,
        oids: Sequence[str],
        no_commit: bool = False,
        allow_empty: bool = False,
    ) -> CherryPickResult: ...

    @abstractmethod
    async def cherry_pick_abort(self) -> None: ...

    @abstractmethod
    async def cherry_pick_continue(self) -> CherryPickResult: ...

    @abstractmethod
    async def cherry_pick_skip(self) -> CherryPickResult: ...

    # ---- revert ----

    @abstractmethod
    async def revert(
        self, oids: Sequence[str], no_commit: bool = False
    ) -> RevertResult: ...

    @abstractmethod
    async def revert_abort(self) -> None: ...

    @abstractmethod
    async def revert_continue(self) -> RevertResult: ...

    # ---- mailbox apply ----

    @abstractmethod
    async def apply_mailbox(
        self, patch_paths: Sequence[str], three_way: bool = True
    ) -> PatchResult: ...

    @abstractmethod
    async def am_abort(self) -> None: ...

    @abstractmethod
    async def am_continue(self) -> PatchResult: ...

    @abstractmethod
    async def am_skip(self) -> PatchResult: ...

    # ---- conflicts ----

    @abstractmethod
    async def conflicted_files(self) -> list[ConflictFile]:
        """Paths the index currently reports as unmerged."""

    @abstractmethod
    async def conflict_content(self, path: str) -> ConflictContent: ...

    @abstractmethod
    async def resolve_conflict(
        self,
        path: str,
        resolution: ConflictResolution,
        content: str | None = None,
    ) -> None:
        """Check out a side (or write `content`) and stage the path."""

    @abstractmethod
    async def mark_resolved(self, path: str) -> None:
        """Stage the working-tree file as it stands."""

    # ---- queries ----

    @abstractmethod
    async def operation_state(self) -> OperationState:
        """Which operation the repository reports as in progress."""

    @abstractmethod
    async def log(self, limit: int = 200) -> list[CommitSummary]: ...

    @abstractmethod
    async def branches(self) -> list[BranchInfo]: ...

    @abstractmethod
    async def status(self) -> list[StatusEntry]: ...

    @abstractmethod
    async def stashes(self) -> list[StashEntry]: ...
