"""Lifecycle controller for history-rewriting operations.

The controller owns the single OperationSession of a repository. It
validates calls synchronously, stamps every engine-bound call with a
fresh generation token, and runs the transition graph to fold the
engine's outcome back into the session:

    Idle → Running → {Completed, Conflicted, Paused, Failed}
    {Conflicted, Paused} → Resuming → {Completed, Conflicted, Paused}
    any live status → Aborted → Idle

Subscribers are told about every change with a snapshot of the
session (or None once the controller is back to Idle).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from gitrewrite.core.errors import InvalidTransition, SessionBusy, ValidationError
from gitrewrite.core.log import logger
from gitrewrite.git.adapter import EngineAdapter
from gitrewrite.model.conflict import ConflictContent, ConflictResolution
from gitrewrite.model.options import build_options
from gitrewrite.model.outcome import RebaseProgress
from gitrewrite.model.repository import RebasePreview
from gitrewrite.model.session import OperationSession
from gitrewrite.model.types import (
    SKIPPABLE_KINDS,
    OperationKind,
    SessionStatus,
)
from gitrewrite.workflow.graph import create_transition_graph
from gitrewrite.workflow.nodes import InvokeEngine
from gitrewrite.workflow.refresh import RefreshCoordinator
from gitrewrite.workflow.state import Action, Transition

Listener = Callable[[OperationSession | None], Any]

_ABORTABLE = frozenset({
    SessionStatus.RUNNING,
    SessionStatus.RESUMING,
    SessionStatus.CONFLICTED,
    SessionStatus.PAUSED,
    SessionStatus.FAILED,
})

_DISMISSABLE = frozenset({SessionStatus.COMPLETED, SessionStatus.FAILED})


class OperationController:
    """State machine around one merge/rebase/cherry-pick/revert/am.

    Every mutating entry point checks the session status before its
    first await, so no lock is needed: a second call issued while the
    first is in flight sees the updated status and is rejected.
    """

    def __init__(
        self,
        adapter: EngineAdapter,
        refresh: RefreshCoordinator | None = None,
    ):
        self.adapter = adapter
        self.refresh = refresh
        self._session: OperationSession | None = None
        self._generation = 0
        self._listeners: list[Listener] = []
        self._graph = create_transition_graph()

    # ---- observation ----

    @property
    def current(self) -> OperationSession | None:
        """The live session object. Only transition nodes mutate it."""
        return self._session

    @property
    def status(self) -> SessionStatus:
        if self._session is None:
            return SessionStatus.IDLE
        return self._session.status

    @property
    def generation(self) -> int:
        return self._generation

    def get_session(self) -> OperationSession | None:
        """Snapshot of the session, or None when Idle."""
        return self._session.snapshot() if self._session else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self):
        snapshot = self.get_session()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")

    def reset(self):
        """Drop the session and return to Idle."""
        self._session = None
        self.notify()

    # ---- transitions ----

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _require_session(self, action: str) -> OperationSession:
        if self._session is None:
            raise InvalidTransition(action, "no operation in progress")
        return self._session

    async def _run(self, transition: Transition):
        with logger.span(
            f"{transition.action.value} {transition.kind.label}",
            generation=transition.generation,
        ):
            async with self._graph.iter(
                InvokeEngine(), state=transition
            ) as run:
                async for _node in run:
                    pass

    async def start(
        self,
        kind: OperationKind,
        target: str | Sequence[str] | None = None,
        options: Mapping[str, Any] | BaseModel | None = None,
    ) -> OperationSession | None:
        """Begin an operation.

        Args:
            kind: Operation to run
            target: Branch, commit list or patch list (see
                build_options)
            options: Per-kind options

        Returns:
            Snapshot of the session once the engine has answered

        Raises:
            ValidationError: Options are missing or contradictory
            SessionBusy: Another operation is still live
        """
        validated = build_options(kind, target, options)

        if self._session is not None and self._session.is_busy:
            raise SessionBusy(self._session.kind, self._session.status)

        generation = self._next_generation()
        self._session = OperationSession.create(validated, generation)
        logger.info(
            f"Starting {validated.kind.label} of {self._session.target}"
        )
        self.notify()

        await self._run(Transition(
            controller=self,
            action=Action.START,
            kind=validated.kind,
            generation=generation,
            options=validated,
        ))
        return self.get_session()

    async def continue_(
        self, message: str | None = None
    ) -> OperationSession | None:
        """Resume after conflicts were resolved or from an edit stop.

        Args:
            message: New commit message for a rebase reword/edit stop

        Raises:
            InvalidTransition: Not Conflicted or Paused
            ValidationError: A message was given for a non-rebase
        """
        session = self._require_session("continue")
        if not session.is_resumable:
            raise InvalidTransition(
                "continue", f"{session.kind.label} is {session.status.value}"
            )
        if message is not None and session.kind is not OperationKind.REBASE:
            raise ValidationError(
                "a commit message can only be supplied to a rebase"
            )
        generation = self._next_generation()

        session.status = SessionStatus.RESUMING
        session.generation = generation
        session.warning = None
        self.notify()

        await self._run(Transition(
            controller=self,
            action=Action.CONTINUE,
            kind=session.kind,
            generation=generation,
            message=message,
        ))
        return self.get_session()

    async def skip(self) -> OperationSession | None:
        """Drop the current step of a conflicted multi-step operation."""
        session = self._require_session("skip")
        if session.kind not in SKIPPABLE_KINDS:
            raise InvalidTransition(
                "skip", f"{session.kind.label} has no steps to skip"
            )
        if session.status is not SessionStatus.CONFLICTED:
            raise InvalidTransition(
                "skip", f"{session.kind.label} is {session.status.value}"
            )
        generation = self._next_generation()

        session.status = SessionStatus.RESUMING
        session.generation = generation
        session.warning = None
        self.notify()

        await self._run(Transition(
            controller=self,
            action=Action.SKIP,
            kind=session.kind,
            generation=generation,
        ))
        return self.get_session()

    async def abort(self) -> str | None:
        """Abandon the live operation and return to Idle.

        The session is marked Aborted before the engine is asked to
        clean up, so listeners are unblocked at once and any outcome
        still in flight is discarded. An engine failure is kept as a
        warning; it never keeps the controller out of Idle.

        Returns:
            The abort warning, if the engine failed to clean up
        """
        session = self._require_session("abort")
        if session.status not in _ABORTABLE:
            raise InvalidTransition(
                "abort", f"{session.kind.label} is {session.status.value}"
            )
        generation = self._next_generation()

        session.status = SessionStatus.ABORTED
        session.generation = generation
        session.conflicts = []
        self.notify()

        transition = Transition(
            controller=self,
            action=Action.ABORT,
            kind=session.kind,
            generation=generation,
        )
        try:
            await self._run(transition)
        finally:
            # the graph resets on its own; this covers a graph that raised
            if self._session is session:
                self.reset()
        return transition.warning

    def dismiss(self):
        """Acknowledge a Completed or Failed session."""
        session = self._require_session("dismiss")
        if session.status not in _DISMISSABLE:
            raise InvalidTransition(
                "dismiss", f"{session.kind.label} is {session.status.value}"
            )
        self.reset()

    # ---- conflict handling ----

    def _require_conflicted(self, action: str, path: str):
        session = self._require_session(action)
        if session.status is not SessionStatus.CONFLICTED:
            raise InvalidTransition(
                action, f"{session.kind.label} is {session.status.value}"
            )
        conflict = session.conflict(path)
        if conflict is None:
            raise ValidationError(f"{path} is not conflicted")
        return conflict

    async def conflict_content(self, path: str) -> ConflictContent:
        """Three-way content of a conflicted path."""
        self._require_conflicted("read conflict", path)
        return await self.adapter.conflict_content(path)

    async def resolve(
        self,
        path: str,
        resolution: ConflictResolution,
        content: str | None = None,
    ) -> OperationSession | None:
        """Resolve one path and record the choice on the session.

        The index, not this record, decides whether continue succeeds.

        Raises:
            InvalidTransition: Not Conflicted
            ValidationError: Unknown path or Merged without content
            EngineError: The engine could not apply the resolution
        """
        resolution = ConflictResolution(resolution)
        conflict = self._require_conflicted("resolve", path)
        if resolution is ConflictResolution.MERGED and content is None:
            raise ValidationError("merged resolution requires content")

        await self.adapter.resolve(path, resolution, content)
        return self._record(conflict, resolution)

    async def mark_resolved(self, path: str) -> OperationSession | None:
        """Stage a conflicted path as the user left it in the work tree.

        Recorded as a Merged resolution.
        """
        conflict = self._require_conflicted("mark resolved", path)
        await self.adapter.mark_resolved(path)
        return self._record(conflict, ConflictResolution.MERGED)

    def _record(self, conflict, resolution: ConflictResolution):
        # the session may have been aborted while the engine worked
        session = self._session
        if session is not None and any(
            c is conflict for c in session.conflicts
        ):
            conflict.resolution = resolution
            logger.debug(f"Recorded {resolution.value} for {conflict.path}")
            self.notify()
        return self.get_session()

    # ---- previews ----

    async def rebase_preview(self, onto: str) -> RebasePreview:
        """Commits a rebase onto `onto` would replay.

        Read-only; allowed in any status. `todo_entries()` on the
        result gives the default interactive todo list.

        Raises:
            ValidationError: No branch or commit given
            EngineError: `onto` does not resolve or shares no history
        """
        if not onto or not onto.strip():
            raise ValidationError("select a branch or commit to rebase onto")
        return await self.adapter.rebase_preview(onto.strip())

    # ---- out-of-band input ----

    async def restore(self) -> OperationSession | None:
        """Re-attach to an operation the repository reports in progress.

        Used when a dialog reopens or a new process starts while git
        is mid-operation. Does nothing unless the controller is Idle
        or holds a finished session.
        """
        if self._session is not None and self._session.is_busy:
            return self.get_session()

        state = await self.adapter.state()
        if not state.in_progress:
            return self.get_session()

        conflicts = await self.adapter.conflicted_files()
        if conflicts or state.kind is not OperationKind.REBASE:
            status = SessionStatus.CONFLICTED
        else:
            status = SessionStatus.PAUSED

        self._session = OperationSession(
            kind=state.kind,
            status=status,
            target=state.target or "",
            conflicts=conflicts,
            progress=state.progress,
            last_message=f"Restored {state.kind.label} in progress",
            generation=self._next_generation(),
        )
        logger.info(
            f"Restored {state.kind.label} session ({status.value})",
            conflicts=len(conflicts),
        )
        self.notify()
        return self.get_session()

    def report_progress(
        self, kind: OperationKind, progress: RebaseProgress
    ) -> bool:
        """Apply an external progress event to the live session.

        Returns:
            True if the session took the update
        """
        session = self._session
        if session is None or session.kind != kind or not session.is_busy:
            logger.debug(f"Ignoring {OperationKind(kind).label} progress")
            return False
        session.progress = progress
        self.notify()
        return True
