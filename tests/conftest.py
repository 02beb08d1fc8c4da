"""Pytest configuration and fixtures for gitrewrite tests."""

import asyncio
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from gitrewrite.core.log import ConsoleSink, setup_logger
from gitrewrite.git.adapter import EngineAdapter
from gitrewrite.git.engine import GitEngine
from gitrewrite.model.conflict import ConflictContent, ConflictFile
from gitrewrite.model.outcome import (
    CherryPickResult,
    MergeResult,
    OperationState,
    PatchResult,
    RebaseResult,
    RevertResult,
)
from gitrewrite.model.repository import (
    CommitSummary,
    RebasePreview,
    RebaseTarget,
)
from gitrewrite.workflow.controller import OperationController


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging for the whole test session."""
    test_log_root = Path(tempfile.gettempdir()) / "gitrewrite-tests"
    setup_logger(
        log_root=test_log_root,
        repo_name="test",
        console=ConsoleSink(level="debug"),
    )


class FakeEngine(GitEngine):
    """Scripted in-memory engine.

    script(name, *results) queues return values (or exceptions to
    raise) for a method; unscripted calls return a plain success.
    hold(name) makes calls to that method wait until release(name).
    """

    def __init__(self):
        self.calls: list[tuple[str, tuple, dict]] = []
        self.results: dict[str, list] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.progress = None
        self.state = OperationState()
        self.conflicts: list[ConflictFile] = []

    def script(self, name, *results):
        self.results.setdefault(name, []).extend(results)

    def hold(self, name):
        self.gates[name] = asyncio.Event()

    def release(self, name):
        self.gates.pop(name).set()

    def called(self, name) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]

    async def _call(self, name, default, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        queue = self.results.get(name)
        result = queue.pop(0) if queue else default
        if isinstance(result, BaseException):
            raise result
        return result

    async def merge(self, branch, message=None, no_ff=False, ff_only=False,
                    squash=False, no_commit=False):
        return await self._call(
            "merge", MergeResult(success=True), branch, message=message,
            no_ff=no_ff, ff_only=ff_only, squash=squash, no_commit=no_commit,
        )

    async def merge_abort(self):
        return await self._call("merge_abort", None)

    async def merge_continue(self):
        return await self._call("merge_continue", MergeResult(success=True))

    async def rebase(self, onto, entries=None, autosquash=False):
        return await self._call(
            "rebase", RebaseResult(success=True), onto,
            entries=entries, autosquash=autosquash,
        )

    async def rebase_abort(self):
        return await self._call("rebase_abort", None)

    async def rebase_continue(self):
        return await self._call("rebase_continue", RebaseResult(success=True))

    async def rebase_continue_with_message(self, message):
        return await self._call(
            "rebase_continue_with_message", RebaseResult(success=True),
            message,
        )

    async def rebase_skip(self):
        return await self._call("rebase_skip", RebaseResult(success=True))

    async def rebase_progress(self):
        return await self._call("rebase_progress", self.progress)

    async def rebase_preview(self, onto):
        preview = RebasePreview(
            commits=[],
            merge_base=CommitSummary(oid="0" * 40, summary="base"),
            target=RebaseTarget(name=onto, oid="1" * 40),
        )
        return await self._call("rebase_preview", preview, onto)

    async def cherry_pick(self, oids, no_commit=False, allow_empty=False):
        return await self._call(
            "cherry_pick", CherryPickResult(success=True), list(oids),
            no_commit=no_commit, allow_empty=allow_empty,
        )

    async def cherry_pick_abort(self):
        return await self._call("cherry_pick_abort", None)

    async def cherry_pick_continue(self):
        return await self._call(
            "cherry_pick_continue", CherryPickResult(success=True)
        )

    async def cherry_pick_skip(self):
        return await self._call(
            "cherry_pick_skip", CherryPickResult(success=True)
        )

    async def revert(self, oids, no_commit=False):
        return await self._call(
            "revert", RevertResult(success=True), list(oids),
            no_commit=no_commit,
        )

    async def revert_abort(self):
        return await self._call("revert_abort", None)

    async def revert_continue(self):
        return await self._call("revert_continue", RevertResult(success=True))

    async def apply_mailbox(self, patch_paths, three_way=True):
        return await self._call(
            "apply_mailbox", PatchResult(success=True), list(patch_paths),
            three_way=three_way,
        )

    async def am_abort(self):
        return await self._call("am_abort", None)

    async def am_continue(self):
        return await self._call("am_continue", PatchResult(success=True))

    async def am_skip(self):
        return await self._call("am_skip", PatchResult(success=True))

    async def conflicted_files(self):
        return await self._call("conflicted_files", list(self.conflicts))

    async def conflict_content(self, path):
        return await self._call(
            "conflict_content", ConflictContent(path=path), path
        )

    async def resolve_conflict(self, path, resolution, content=None):
        return await self._call(
            "resolve_conflict", None, path, resolution, content=content
        )

    async def mark_resolved(self, path):
        return await self._call("mark_resolved", None, path)

    async def operation_state(self):
        return await self._call("operation_state", self.state)

    async def log(self, limit=200):
        return await self._call("log", [], limit=limit)

    async def branches(self):
        return await self._call("branches", [])

    async def status(self):
        return await self._call("status", [])

    async def stashes(self):
        return await self._call("stashes", [])


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def refresh():
    """Stands in for the RefreshCoordinator; records refresh_after calls."""
    return Mock()


@pytest.fixture
def controller(engine, refresh):
    return OperationController(EngineAdapter(engine), refresh=refresh)
