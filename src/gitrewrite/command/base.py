"""Wiring and rendering shared by all commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitrewrite.git.adapter import EngineAdapter
from gitrewrite.git.cli import GitCliEngine
from gitrewrite.model.repository import RebasePreview
from gitrewrite.model.session import OperationSession
from gitrewrite.model.types import SessionStatus
from gitrewrite.workflow.controller import OperationController
from gitrewrite.workflow.refresh import RefreshCoordinator, RepositoryView

if TYPE_CHECKING:
    from gitrewrite.core.config import State

# Exit codes
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ATTENTION = 2


async def open_controller(state: State) -> OperationController:
    """Build (once) the controller for the configured repository.

    The new controller re-attaches to whatever operation git reports
    in progress, so a fresh process can continue, skip or abort it.
    """
    runtime = state.runtime.operation
    if runtime.controller is None:
        config = state.config
        engine = GitCliEngine.from_config(
            config.git, config.commands.get("git")
        )
        runtime.view = RepositoryView(engine, config.refresh.history_limit)
        runtime.refresh = RefreshCoordinator(
            runtime.view, config.refresh.stash_kinds
        )
        runtime.controller = OperationController(
            EngineAdapter(engine), runtime.refresh
        )
        await runtime.controller.restore()
    return runtime.controller


def exit_code(session: OperationSession | None) -> int:
    """0 when done or idle, 1 on failure, 2 when the user must act."""
    if session is None:
        return EXIT_OK
    if session.status is SessionStatus.FAILED:
        return EXIT_FAILED
    if session.status in (SessionStatus.CONFLICTED, SessionStatus.PAUSED):
        return EXIT_ATTENTION
    return EXIT_OK


def render_session(session: OperationSession | None) -> str:
    if session is None:
        return "No operation in progress."

    lines = [f"{session.kind.label} {session.target}: {session.status.value}"]
    if session.last_message:
        lines.append(f"  {session.last_message}")
    if session.uncommitted:
        lines.append("  Result is staged but not committed.")

    progress = session.progress
    if progress is not None and progress.total_steps:
        step = f"  Step {progress.current_step}/{progress.total_steps}"
        if progress.stopped_oid:
            step += f", stopped at {progress.stopped_oid[:7]}"
        if progress.paused_action:
            step += f" ({progress.paused_action.value})"
        lines.append(step)

    for conflict in session.conflicts:
        lines.append(
            f"  CONFLICT ({conflict.conflict_type.value}): {conflict.path}"
            f" [{conflict.resolution.value}]"
        )
    if session.warning:
        lines.append(f"  Warning: {session.warning}")
    return "\n".join(lines)


def render_preview(preview: RebasePreview) -> str:
    """Rebase preview as a todo list that `rebase --todo` accepts."""
    target = preview.target
    lines = [
        f"# Rebase {len(preview.commits)} commit(s) onto {target.name} "
        f"({target.short_oid} {target.summary})",
        f"# {target.name} is {preview.target_ahead} commit(s) ahead of "
        f"merge base {preview.merge_base.short_oid}",
    ]
    for entry in preview.todo_entries():
        lines.append(f"{entry.action.value} {entry.oid[:7]} {entry.summary}")
    return "\n".join(lines)


async def finish(state: State, session: OperationSession | None) -> int:
    """Let pending refreshes land, print the session, pick an exit code."""
    refresh = state.runtime.operation.refresh
    if refresh is not None:
        await refresh.drain()
    print(render_session(session))
    return exit_code(session)
