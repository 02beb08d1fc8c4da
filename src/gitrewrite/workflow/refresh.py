"""Reloading of derived repository state after a transition."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from gitrewrite.core.log import logger
from gitrewrite.git.engine import GitEngine
from gitrewrite.model.repository import (
    BranchInfo,
    CommitSummary,
    StashEntry,
    StatusEntry,
)
from gitrewrite.model.types import OperationKind, SessionStatus

DEFAULT_STASH_KINDS = frozenset({OperationKind.MERGE, OperationKind.REBASE})

# Statuses after which history, branches or the index may have moved.
REFRESH_STATUSES = frozenset({
    SessionStatus.COMPLETED,
    SessionStatus.CONFLICTED,
    SessionStatus.ABORTED,
})


class RepositoryView:
    """Cached commit history, branches, status and stashes.

    Every reload replaces its cache wholesale from what the engine
    reports, so overlapping reloads (an operation refresh racing a
    watcher refresh) simply leave the last result in place.
    """

    def __init__(self, engine: GitEngine, history_limit: int = 200):
        self.engine = engine
        self.history_limit = history_limit
        self.commits: list[CommitSummary] = []
        self.branches: list[BranchInfo] = []
        self.status: list[StatusEntry] = []
        self.stashes: list[StashEntry] = []

    async def reload_history(self):
        self.commits = await self.engine.log(self.history_limit)

    async def reload_branches(self):
        self.branches = await self.engine.branches()

    async def reload_status(self):
        self.status = await self.engine.status()

    async def reload_stashes(self):
        self.stashes = await self.engine.stashes()

    async def reload_all(self):
        """Reload every cache; what a file-system watcher would call."""
        await asyncio.gather(
            self.reload_history(),
            self.reload_branches(),
            self.reload_status(),
            self.reload_stashes(),
        )

    @property
    def head_branch(self) -> str | None:
        for branch in self.branches:
            if branch.is_head:
                return branch.name
        return None


class RefreshCoordinator:
    """Schedules RepositoryView reloads for the controller.

    refresh_after() returns immediately; the reloads run as a
    background task and never report back to the controller.
    """

    def __init__(
        self,
        view: RepositoryView,
        stash_kinds: Iterable[OperationKind] = DEFAULT_STASH_KINDS,
    ):
        self.view = view
        self.stash_kinds = frozenset(OperationKind(k) for k in stash_kinds)
        self._tasks: set[asyncio.Task] = set()

    def loaders_for(
        self, kind: OperationKind
    ) -> list[Callable[[], Awaitable[None]]]:
        loaders = [
            self.view.reload_history,
            self.view.reload_branches,
            self.view.reload_status,
        ]
        if kind in self.stash_kinds:
            loaders.append(self.view.reload_stashes)
        return loaders

    def refresh_after(
        self, kind: OperationKind, status: SessionStatus
    ) -> asyncio.Task | None:
        """Reload the caches a `kind` transition to `status` may have changed.

        Args:
            kind: Kind of the operation that transitioned
            status: Status the session ended up in; only Completed,
                Conflicted and Aborted change repository data

        Returns:
            The scheduled task, or None when nothing needs reloading
        """
        if status not in REFRESH_STATUSES:
            logger.debug(f"No refresh needed after {status.value}")
            return None

        task = asyncio.get_running_loop().create_task(
            self._refresh(kind, status, self.loaders_for(kind))
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _refresh(self, kind, status, loaders):
        with logger.span(
            "refresh derived state", kind=kind.value, status=status.value
        ):
            results = await asyncio.gather(
                *(loader() for loader in loaders), return_exceptions=True
            )
        for loader, result in zip(loaders, results):
            if isinstance(result, Exception):
                logger.warn(f"{loader.__name__} failed: {result}")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self):
        """Wait for every scheduled refresh to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
