"""Uniform entry points over the per-kind engine calls.

The controller only ever talks to EngineAdapter: one start,
continue, skip and abort per operation kind, each returning a
normalized OperationOutcome.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from gitrewrite.core.errors import AbortFailure, EngineError, GitRewriteError
from gitrewrite.core.log import logger
from gitrewrite.git.engine import GitEngine
from gitrewrite.model.conflict import (
    ConflictContent,
    ConflictFile,
    ConflictResolution,
)
from gitrewrite.model.options import (
    CherryPickOptions,
    MergeOptions,
    OperationOptions,
    PatchApplyOptions,
    RebaseOptions,
    RevertOptions,
)
from gitrewrite.model.outcome import (
    MergeResult,
    MergeType,
    OperationOutcome,
    OperationState,
    RebaseProgress,
    RebaseResult,
)
from gitrewrite.model.repository import RebasePreview
from gitrewrite.model.types import SKIPPABLE_KINDS, OperationKind


class EngineAdapter:
    """Maps (kind, action) onto GitEngine calls and normalizes results.

    Anything the engine raises that is not already a GitRewriteError
    (OSError from a missing binary, a bad decode) is wrapped into an
    EngineError, so callers only ever handle a single error type.
    """

    def __init__(self, engine: GitEngine):
        self.engine = engine
        self._continue: dict[OperationKind, Callable[[], Awaitable]] = {
            OperationKind.MERGE: engine.merge_continue,
            OperationKind.REBASE: engine.rebase_continue,
            OperationKind.CHERRY_PICK: engine.cherry_pick_continue,
            OperationKind.REVERT: engine.revert_continue,
            OperationKind.PATCH_APPLY: engine.am_continue,
        }
        self._skip: dict[OperationKind, Callable[[], Awaitable]] = {
            OperationKind.REBASE: engine.rebase_skip,
            OperationKind.CHERRY_PICK: engine.cherry_pick_skip,
            OperationKind.PATCH_APPLY: engine.am_skip,
        }
        self._abort: dict[OperationKind, Callable[[], Awaitable[None]]] = {
            OperationKind.MERGE: engine.merge_abort,
            OperationKind.REBASE: engine.rebase_abort,
            OperationKind.CHERRY_PICK: engine.cherry_pick_abort,
            OperationKind.REVERT: engine.revert_abort,
            OperationKind.PATCH_APPLY: engine.am_abort,
        }

    async def _call(self, what: str, call: Callable[[], Awaitable]):
        try:
            return await call()
        except GitRewriteError:
            raise
        except Exception as e:
            raise EngineError(f"{what} failed: {e}") from e

    async def start(self, options: OperationOptions) -> OperationOutcome:
        """Begin the operation described by `options`."""
        engine = self.engine
        match options:
            case MergeOptions():
                call = lambda: engine.merge(  # noqa: E731
                    options.branch,
                    message=options.message,
                    no_ff=options.no_fast_forward,
                    ff_only=options.ff_only,
                    squash=options.squash,
                    no_commit=not options.commit_immediately,
                )
            case RebaseOptions():
                call = lambda: engine.rebase(  # noqa: E731
                    options.onto,
                    entries=options.entries,
                    autosquash=options.autosquash,
                )
            case CherryPickOptions():
                call = lambda: engine.cherry_pick(  # noqa: E731
                    options.commits,
                    no_commit=options.no_commit,
                    allow_empty=options.allow_empty,
                )
            case RevertOptions():
                call = lambda: engine.revert(  # noqa: E731
                    options.commits, no_commit=options.no_commit
                )
            case PatchApplyOptions():
                call = lambda: engine.apply_mailbox(  # noqa: E731
                    options.patch_paths, three_way=options.three_way
                )
            case _:
                raise EngineError(f"Unsupported options: {options!r}")

        result = await self._call(f"Starting {options.kind.label}", call)
        return await self._normalize(options.kind, result)

    async def continue_(
        self, kind: OperationKind, message: str | None = None
    ) -> OperationOutcome:
        """Resume after conflicts were resolved or an edit stop.

        A message continues a rebase reword/edit stop with that
        commit message.
        """
        if message is not None and kind is OperationKind.REBASE:
            call = lambda: self.engine.rebase_continue_with_message(  # noqa: E731
                message
            )
        else:
            call = self._continue[kind]
        result = await self._call(f"Continuing {kind.label}", call)
        return await self._normalize(kind, result, resumed=True)

    async def skip(self, kind: OperationKind) -> OperationOutcome:
        if kind not in SKIPPABLE_KINDS:
            raise EngineError(f"{kind.label} has no skip")
        result = await self._call(f"Skipping in {kind.label}", self._skip[kind])
        return await self._normalize(kind, result, resumed=True)

    async def abort(self, kind: OperationKind) -> None:
        """Ask the engine to undo the operation.

        Raises:
            AbortFailure: The engine could not abort
        """
        try:
            await self._call(f"Aborting {kind.label}", self._abort[kind])
        except EngineError as e:
            raise AbortFailure(
                str(e), command=e.command, returncode=e.returncode
            ) from e

    async def progress(self, kind: OperationKind) -> RebaseProgress | None:
        if kind not in (OperationKind.REBASE, OperationKind.PATCH_APPLY):
            return None
        return await self._call("Reading progress", self.engine.rebase_progress)

    async def rebase_preview(self, onto: str) -> RebasePreview:
        return await self._call(
            f"Previewing rebase onto {onto}",
            lambda: self.engine.rebase_preview(onto),
        )

    async def state(self) -> OperationState:
        return await self._call(
            "Reading operation state", self.engine.operation_state
        )

    async def conflicted_files(self) -> list[ConflictFile]:
        return await self._call(
            "Listing conflicts", self.engine.conflicted_files
        )

    async def conflict_content(self, path: str) -> ConflictContent:
        return await self._call(
            f"Reading conflict {path}",
            lambda: self.engine.conflict_content(path),
        )

    async def resolve(
        self,
        path: str,
        resolution: ConflictResolution,
        content: str | None = None,
    ) -> None:
        await self._call(
            f"Resolving {path}",
            lambda: self.engine.resolve_conflict(path, resolution, content),
        )

    async def mark_resolved(self, path: str) -> None:
        await self._call(
            f"Marking {path} resolved",
            lambda: self.engine.mark_resolved(path),
        )

    async def _normalize(
        self, kind: OperationKind, result, resumed: bool = False
    ) -> OperationOutcome:
        conflicts = list(result.conflicts)

        # a failed resume that names no paths may still have left the
        # index unmerged; trust the index over the engine's summary
        if resumed and not result.success and not conflicts:
            conflicts = await self.conflicted_files()

        outcome = OperationOutcome(
            success=result.success and not conflicts,
            message=result.message,
            conflicts=conflicts,
        )

        if isinstance(result, MergeResult):
            outcome.no_op = (
                result.success and result.merge_type is MergeType.UP_TO_DATE
            )
            outcome.committed = result.committed

        if kind is OperationKind.REBASE:
            progress = await self.progress(kind)
            if progress is None and isinstance(result, RebaseResult):
                progress = result.progress
            outcome.progress = progress
            outcome.requires_edit = (
                result.success and not conflicts and progress is not None
            )

        logger.debug(
            "Engine outcome",
            kind=kind.value,
            success=outcome.success,
            conflicts=len(conflicts),
            requires_edit=outcome.requires_edit,
        )
        return outcome
