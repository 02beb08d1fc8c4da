"""Git engine backed by the git command line."""

from __future__ import annotations

import asyncio
import contextlib
import os
import shlex
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from invoke import Result

from gitrewrite.core.errors import EngineError
from gitrewrite.core.log import logger
from gitrewrite.core.runner import Runner
from gitrewrite.git.engine import GitEngine
from gitrewrite.model.conflict import (
    ConflictContent,
    ConflictFile,
    ConflictResolution,
    ConflictType,
    conflict_type_from_status,
)
from gitrewrite.model.options import RebaseTodoEntry
from gitrewrite.model.outcome import (
    CherryPickResult,
    MergeResult,
    MergeType,
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
    RebaseTarget,
    StashEntry,
    StatusEntry,
)
from gitrewrite.model.types import OperationKind, RebaseAction

# Command templates (arguments after `git -C <workdir>`). Overridable
# through config.commands.git; {placeholders} are filled per token.
DEFAULT_COMMANDS = {
    "merge_abort": "merge --abort",
    "merge_continue": "merge --continue",
    "rebase_abort": "rebase --abort",
    "rebase_continue": "rebase --continue",
    "rebase_skip": "rebase --skip",
    "cherry_pick_abort": "cherry-pick --abort",
    "cherry_pick_continue": "cherry-pick --continue",
    "cherry_pick_skip": "cherry-pick --skip",
    "revert_abort": "revert --abort",
    "revert_continue": "revert --continue",
    "am_abort": "am --abort",
    "am_continue": "am --continue",
    "am_skip": "am --skip",
    "amend_message": "commit --amend --allow-empty -m {message}",
    "show_stage": "show :{stage}:{path}",
    "stage_path": "add -- {path}",
    "remove_path": "rm --quiet -- {path}",
    "checkout_side": "checkout --{side} -- {path}",
    "checkout_conflict": "checkout -m -- {path}",
    "status": "status --porcelain=v1 -z --untracked-files=all",
    "log": "log --format=%H%x1f%P%x1f%s -n {limit}",
    "show_commit": "log -1 --format=%H%x1f%P%x1f%s {rev}",
    "range_log": "log --reverse --topo-order --format=%H%x1f%P%x1f%s {range}",
    "count_commits": "rev-list --count {range}",
    "resolve_commit": "rev-parse --verify --quiet {rev}^{{commit}}",
    "merge_base": "merge-base HEAD {rev}",
    "ref_name": "rev-parse --symbolic-full-name {rev}",
    "branches": (
        "for-each-ref --format=%(HEAD)%1f%(refname:short)%1f"
        "%(upstream:short) refs/heads"
    ),
    "stashes": "stash list --format=%gd%x1f%s",
    "head": "rev-parse --verify --quiet HEAD",
    "git_dir": "rev-parse --absolute-git-dir",
}

# Editors must never block a non-interactive run; messages are
# kept as git proposes them and parsed output stays untranslated.
# Background status reads must not take index.lock from under a
# running operation.
_BASE_ENV = {
    "GIT_EDITOR": "true",
    "GIT_OPTIONAL_LOCKS": "0",
    "GIT_TERMINAL_PROMPT": "0",
    "LC_ALL": "C",
}

_NOT_FOUND_EXIT = 127

# Written next to git's own rebase state; lists commits to reword.
REWORD_MARKER = "gitrewrite-reword"


class GitCliEngine(GitEngine):
    """GitEngine that shells out to `git` via the invoke Runner.

    Every command runs in a worker thread so the event loop stays
    free while git works.
    """

    def __init__(
        self,
        workdir: Path,
        binary: str = "git",
        timeout: int | None = None,
        bypass_hooks: bool = False,
        commands: Mapping[str, str] | None = None,
    ):
        self.workdir = Path(workdir)
        self.binary = binary
        self.timeout = timeout
        self.bypass_hooks = bypass_hooks
        self.commands = {**DEFAULT_COMMANDS, **(commands or {})}
        self.runner = Runner()
        self._git_dir: Path | None = None

    @classmethod
    def from_config(cls, git_config, commands=None) -> GitCliEngine:
        return cls(
            workdir=git_config.workdir,
            binary=git_config.binary,
            timeout=git_config.timeout,
            bypass_hooks=git_config.bypass_hooks,
            commands=commands,
        )

    # ---- plumbing ----

    def _template(self, name: str, **values) -> list[str]:
        return [
            token.format(**values) if "{" in token and values else token
            for token in shlex.split(self.commands[name])
        ]

    async def _git(
        self,
        *args: str,
        env: Mapping[str, str] | None = None,
    ) -> Result:
        argv = [self.binary, "-C", str(self.workdir), *args]
        try:
            result = await asyncio.to_thread(
                self.runner.execute,
                argv,
                timeout=self.timeout,
                check=False,
                env={**_BASE_ENV, **(env or {})},
            )
        except OSError as e:
            raise EngineError(
                f"Could not run {self.binary}: {e}", command=shlex.join(argv)
            ) from e

        if result.exited == _NOT_FOUND_EXIT:
            raise EngineError(
                f"git executable not found: {self.binary}",
                command=shlex.join(argv),
                returncode=result.exited,
            )
        if result.exited == -1:
            raise EngineError(
                f"git timed out after {self.timeout}s: {args[0]}",
                command=shlex.join(argv),
                returncode=-1,
            )
        return result

    async def _run(self, name: str, **values) -> Result:
        return await self._git(*self._template(name, **values))

    async def _checked(self, name: str, what: str, **values) -> Result:
        result = await self._run(name, **values)
        if not result.ok:
            raise EngineError(
                f"{what} failed: {_output(result)}",
                command=result.command,
                returncode=result.exited,
            )
        return result

    async def git_dir(self) -> Path:
        if self._git_dir is None:
            result = await self._run("git_dir")
            if not result.ok:
                raise EngineError(
                    f"Not a git repository: {self.workdir}",
                    returncode=result.exited,
                )
            self._git_dir = Path(result.stdout.strip())
        return self._git_dir

    async def _head(self) -> str | None:
        result = await self._run("head")
        return result.stdout.strip() or None if result.ok else None

    async def _commit(self, rev: str) -> CommitSummary:
        result = await self._checked("show_commit", "Reading commit", rev=rev)
        return _parse_commits(result.stdout)[0]

    async def _failure(
        self, result: Result, what: str
    ) -> list[ConflictFile]:
        """Conflicts behind a failed command, or raise EngineError."""
        conflicts = await self.conflicted_files()
        if conflicts:
            return conflicts
        raise EngineError(
            f"{what} failed: {_output(result)}",
            command=result.command,
            returncode=result.exited,
        )

    # ---- merge ----

    async def merge(
        self,
        branch: str,
        message: str | None = None,
        no_ff: bool = False,
        ff_only: bool = False,
        squash: bool = False,
        no_commit: bool = False,
    ) -> MergeResult:
        args = ["merge"]
        # ff_only and no_ff are exclusive; ff_only takes precedence
        if ff_only:
            args.append("--ff-only")
        elif no_ff:
            args.append("--no-ff")
        if squash:
            args.append("--squash")
        if no_commit:
            args.append("--no-commit")
        if self.bypass_hooks:
            args.append("--no-verify")
        if message:
            args += ["-m", message]
        args.append(branch)

        result = await self._git(*args)
        if not result.ok:
            conflicts = await self._failure(result, "Merge")
            return MergeResult(
                success=False,
                merge_type=MergeType.CONFLICTED,
                conflicts=conflicts,
                message=(
                    "Merge conflicts detected. Please resolve conflicts "
                    "and commit."
                ),
            )

        output = result.stdout
        if "Already up to date" in output or "Already up-to-date" in output:
            merge_type = MergeType.UP_TO_DATE
        elif "Fast-forward" in output:
            merge_type = MergeType.FAST_FORWARD
        else:
            merge_type = MergeType.NORMAL

        # --squash never moves HEAD, even when the branch could fast-forward
        committed = merge_type is MergeType.UP_TO_DATE or (
            not squash
            and (merge_type is MergeType.FAST_FORWARD or not no_commit)
        )
        return MergeResult(
            success=True,
            merge_type=merge_type,
            commit_oid=await self._head() if committed else None,
            message=output.strip(),
            committed=committed,
        )

    async def merge_abort(self) -> None:
        await self._checked("merge_abort", "Merge abort")

    async def merge_continue(self) -> MergeResult:
        result = await self._run("merge_continue")
        if not result.ok:
            return MergeResult(
                success=False,
                merge_type=MergeType.CONFLICTED,
                conflicts=await self._failure(result, "Merge continue"),
                message="Conflicts remain. Please resolve and continue.",
            )
        return MergeResult(
            success=True,
            commit_oid=await self._head(),
            message="Merge completed successfully.",
        )

    # ---- rebase ----

    async def rebase(
        self,
        onto: str,
        entries: Sequence[RebaseTodoEntry] | None = None,
        autosquash: bool = False,
    ) -> RebaseResult:
        args = ["rebase"]
        if self.bypass_hooks:
            args.append("--no-verify")

        if entries is None:
            if autosquash:
                args.append("--autosquash")
            result = await self._git(*args, onto)
        else:
            result = await self._interactive_rebase(
                args, onto, entries, autosquash
            )

        total = None
        if entries is not None:
            total = sum(
                1 for entry in entries if entry.action is not RebaseAction.DROP
            )
        return await self._rebase_result(
            result,
            "Rebase",
            success_message=result.stdout.strip() or "Rebase completed.",
            total_commits=total,
        )

    async def _interactive_rebase(
        self,
        args: list[str],
        onto: str,
        entries: Sequence[RebaseTodoEntry],
        autosquash: bool,
    ) -> Result:
        lines = []
        rewords = []
        for entry in entries:
            if entry.action is RebaseAction.DROP:
                continue
            action = entry.action
            if action is RebaseAction.REWORD:
                # reword stops as an edit so the new message can be
                # supplied through continue
                action = RebaseAction.EDIT
                rewords.append(entry.oid)
            lines.append(f"{action.value} {entry.oid} {entry.summary}".rstrip())

        fd, todo_path = tempfile.mkstemp(prefix="gitrewrite-todo-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
            # git appends the path of its own todo file to this command
            editor = f"cp {shlex.quote(todo_path)}"
            extra = ["--autosquash"] if autosquash else []
            result = await self._git(
                *args, "-i", *extra, onto,
                env={"GIT_SEQUENCE_EDITOR": editor},
            )
        finally:
            with contextlib.suppress(OSError):
                os.unlink(todo_path)

        state_dir = await self.git_dir() / "rebase-merge"
        if rewords and state_dir.is_dir():
            # git removes the state directory, and this file with it,
            # when the rebase finishes or is aborted
            (state_dir / REWORD_MARKER).write_text(
                "\n".join(rewords) + "\n", encoding="utf-8"
            )
        return result

    async def _rebase_result(
        self,
        result: Result,
        what: str,
        success_message: str,
        total_commits: int | None = None,
    ) -> RebaseResult:
        if not result.ok:
            conflicts = await self._failure(result, what)
            progress = await self.rebase_progress()
            return RebaseResult(
                success=False,
                conflicts=conflicts,
                progress=progress,
                current_commit=progress.stopped_oid if progress else None,
                total_commits=(
                    progress.total_steps if progress else total_commits
                ),
                message=(
                    "Rebase conflicts detected. Please resolve conflicts "
                    "and continue."
                ),
            )

        progress = await self.rebase_progress()
        return RebaseResult(
            success=True,
            progress=progress,
            current_commit=progress.stopped_oid if progress else None,
            total_commits=(
                progress.total_steps if progress else total_commits
            ),
            commits_rebased=progress.current_step if progress else (
                total_commits or 0
            ),
            message=success_message,
        )

    async def rebase_abort(self) -> None:
        await self._checked("rebase_abort", "Rebase abort")

    async def rebase_continue(self) -> RebaseResult:
        result = await self._run("rebase_continue")
        return await self._rebase_result(
            result, "Rebase continue", "Rebase continued successfully."
        )

    async def rebase_continue_with_message(
        self, message: str
    ) -> RebaseResult:
        progress = await self.rebase_progress()
        if progress is None:
            raise EngineError("No rebase in progress")
        await self._checked(
            "amend_message", "Amending commit message", message=message
        )
        return await self.rebase_continue()

    async def rebase_skip(self) -> RebaseResult:
        result = await self._run("rebase_skip")
        return await self._rebase_result(
            result, "Rebase skip", "Commit skipped."
        )

    async def rebase_progress(self) -> RebaseProgress | None:
        git_dir = await self.git_dir()
        return await asyncio.to_thread(_read_rebase_progress, git_dir)

    async def rebase_preview(self, onto: str) -> RebasePreview:
        result = await self._run("resolve_commit", rev=onto)
        target_oid = result.stdout.strip() if result.ok else ""
        if not target_oid:
            raise EngineError(
                f"Invalid reference: {onto}", returncode=result.exited
            )

        result = await self._run("merge_base", rev=target_oid)
        base_oid = result.stdout.strip() if result.ok else ""
        if not base_oid:
            raise EngineError(
                f"No common ancestor found between HEAD and '{onto}'",
                returncode=result.exited,
            )

        replayed = await self._checked(
            "range_log", "Listing commits", range=f"{base_oid}..HEAD"
        )
        base = await self._commit(base_oid)
        target = await self._commit(target_oid)
        ahead = await self._checked(
            "count_commits", "Counting commits",
            range=f"{base_oid}..{target_oid}",
        )
        ref = await self._run("ref_name", rev=onto)
        name = ref.stdout.strip() if ref.ok else ""

        return RebasePreview(
            commits=_parse_commits(replayed.stdout),
            merge_base=base,
            target=RebaseTarget(
                name=name.removeprefix("refs/heads/") or onto,
                oid=target.oid,
                summary=target.summary,
            ),
            target_ahead=int(ahead.stdout.strip() or 0),
        )

    # ---- cherry-pick ----

    async def cherry_pick(
        self,
        oids: Sequence[str],
        no_commit: bool = False,
        allow_empty: bool = False,
    ) -> CherryPickResult:
        args = ["cherry-pick"]
        if no_commit:
            args.append("-n")
        if allow_empty:
            args.append("--allow-empty")
        result = await self._git(*args, *oids)
        if not result.ok:
            return CherryPickResult(
                success=False,
                conflicts=await self._failure(result, "Cherry-pick"),
                message=(
                    "Cherry-pick has conflicts. Please resolve and continue."
                ),
            )
        return CherryPickResult(
            success=True,
            message=f"Successfully cherry-picked {len(oids)} commit(s).",
        )

    async def cherry_pick_abort(self) -> None:
        await self._checked("cherry_pick_abort", "Cherry-pick abort")

    async def cherry_pick_continue(self) -> CherryPickResult:
        return await self._cherry_pick_step(
            "cherry_pick_continue", "Cherry-pick continue",
            "Cherry-pick completed successfully.",
        )

    async def cherry_pick_skip(self) -> CherryPickResult:
        return await self._cherry_pick_step(
            "cherry_pick_skip", "Cherry-pick skip", "Commit skipped.",
        )

    async def _cherry_pick_step(
        self, name: str, what: str, message: str
    ) -> CherryPickResult:
        result = await self._run(name)
        if not result.ok:
            return CherryPickResult(
                success=False,
                conflicts=await self._failure(result, what),
                message="More conflicts detected. Please resolve and continue.",
            )
        return CherryPickResult(success=True, message=message)

    # ---- revert ----

    async def revert(
        self, oids: Sequence[str], no_commit: bool = False
    ) -> RevertResult:
        args = ["revert", "--no-edit"]
        if no_commit:
            args.append("-n")
        result = await self._git(*args, *oids)
        if not result.ok:
            return RevertResult(
                success=False,
                conflicts=await self._failure(result, "Revert"),
                message="Revert has conflicts. Please resolve and continue.",
            )
        return RevertResult(
            success=True,
            message=f"Successfully reverted {len(oids)} commit(s).",
        )

    async def revert_abort(self) -> None:
        await self._checked("revert_abort", "Revert abort")

    async def revert_continue(self) -> RevertResult:
        result = await self._run("revert_continue")
        if not result.ok:
            return RevertResult(
                success=False,
                conflicts=await self._failure(result, "Revert continue"),
                message="More conflicts detected. Please resolve and continue.",
            )
        return RevertResult(
            success=True, message="Revert completed successfully."
        )

    # ---- mailbox apply ----

    async def apply_mailbox(
        self, patch_paths: Sequence[str], three_way: bool = True
    ) -> PatchResult:
        args = ["am"]
        if three_way:
            args.append("--3way")
        result = await self._git(*args, *patch_paths)
        if not result.ok:
            return PatchResult(
                success=False,
                conflicts=await self._failure(result, "Applying patches"),
                patches=list(patch_paths),
                message="Patch does not apply cleanly. Resolve and continue.",
            )
        return PatchResult(
            message=f"Applied {len(patch_paths)} patch(es) successfully",
            patches=list(patch_paths),
        )

    async def am_abort(self) -> None:
        await self._checked("am_abort", "Aborting patch application")

    async def am_continue(self) -> PatchResult:
        return await self._am_step(
            "am_continue", "Continuing patch application",
            "Patch application continued",
        )

    async def am_skip(self) -> PatchResult:
        return await self._am_step(
            "am_skip", "Skipping current patch", "Patch skipped",
        )

    async def _am_step(self, name: str, what: str, message: str) -> PatchResult:
        result = await self._run(name)
        if not result.ok:
            return PatchResult(
                success=False,
                conflicts=await self._failure(result, what),
                message="More conflicts detected. Please resolve and continue.",
            )
        return PatchResult(message=message)

    # ---- conflicts ----

    async def conflicted_files(self) -> list[ConflictFile]:
        entries = await self.status()
        conflicts = []
        for entry in entries:
            if not entry.unmerged:
                continue
            conflict_type = conflict_type_from_status(
                entry.index + entry.worktree
            )
            if conflict_type is ConflictType.CONTENT and await asyncio.to_thread(
                _looks_binary, self.workdir / entry.path
            ):
                conflict_type = ConflictType.BINARY
            conflicts.append(
                ConflictFile(path=entry.path, conflict_type=conflict_type)
            )
        return conflicts

    async def _stage_content(self, path: str, stage: int) -> str | None:
        result = await self._run("show_stage", stage=stage, path=path)
        return result.stdout if result.ok else None

    async def conflict_content(self, path: str) -> ConflictContent:
        base, ours, theirs = await asyncio.gather(
            self._stage_content(path, 1),
            self._stage_content(path, 2),
            self._stage_content(path, 3),
        )
        file_path = self.workdir / path
        try:
            merged = await asyncio.to_thread(
                file_path.read_text, encoding="utf-8", errors="replace"
            )
        except FileNotFoundError:
            merged = ""
        return ConflictContent(
            path=path, base=base, ours=ours, theirs=theirs, merged=merged
        )

    async def resolve_conflict(
        self,
        path: str,
        resolution: ConflictResolution,
        content: str | None = None,
    ) -> None:
        if resolution is ConflictResolution.UNRESOLVED:
            await self._checked(
                "checkout_conflict", "Restoring conflict", path=path
            )
            return

        if resolution is ConflictResolution.MERGED:
            if content is None:
                raise EngineError(
                    "Custom content required for merged resolution"
                )
            await asyncio.to_thread(
                (self.workdir / path).write_text, content, encoding="utf-8"
            )
            await self._checked("stage_path", "Staging", path=path)
            return

        side = resolution.value
        result = await self._run("checkout_side", side=side, path=path)
        if result.ok:
            await self._checked("stage_path", "Staging", path=path)
        elif "does not have" in result.stderr:
            # the chosen side deleted the path
            await self._checked("remove_path", "Removing", path=path)
        else:
            raise EngineError(
                f"Could not check out {side} version of {path}: "
                f"{_output(result)}",
                returncode=result.exited,
            )
        logger.debug("Resolved conflict", path=path, resolution=side)

    async def mark_resolved(self, path: str) -> None:
        await self._checked("stage_path", "Staging", path=path)
        logger.debug("Marked conflict resolved", path=path)

    # ---- queries ----

    async def operation_state(self) -> OperationState:
        git_dir = await self.git_dir()
        state = await asyncio.to_thread(_detect_operation, git_dir)
        if state.kind in (OperationKind.REBASE, OperationKind.PATCH_APPLY):
            state.progress = await self.rebase_progress()
        return state

    async def log(self, limit: int = 200) -> list[CommitSummary]:
        result = await self._run("log", limit=limit)
        if not result.ok:
            # unborn HEAD has no history yet
            return []
        return _parse_commits(result.stdout)

    async def branches(self) -> list[BranchInfo]:
        result = await self._checked("branches", "Listing branches")
        branches = []
        for line in result.stdout.splitlines():
            head, name, upstream = (line.split("\x1f") + ["", ""])[:3]
            branches.append(BranchInfo(
                name=name, is_head=head == "*", upstream=upstream or None
            ))
        return branches

    async def status(self) -> list[StatusEntry]:
        result = await self._checked("status", "Reading status")
        return parse_porcelain_status(result.stdout)

    async def stashes(self) -> list[StashEntry]:
        result = await self._checked("stashes", "Listing stashes")
        stashes = []
        for line in result.stdout.splitlines():
            ref, _, message = line.partition("\x1f")
            index = ref[ref.find("{") + 1:ref.rfind("}")]
            stashes.append(StashEntry(
                index=int(index) if index.isdigit() else len(stashes),
                message=message,
            ))
        return stashes


def _output(result: Result) -> str:
    return (result.stderr.strip() or result.stdout.strip()
            or f"exit code {result.exited}")


def _parse_commits(output: str) -> list[CommitSummary]:
    commits = []
    for line in output.splitlines():
        oid, parents, summary = (line.split("\x1f") + ["", ""])[:3]
        commits.append(CommitSummary(
            oid=oid, summary=summary, parents=parents.split()
        ))
    return commits


def parse_porcelain_status(output: str) -> list[StatusEntry]:
    """Parse `git status --porcelain=v1 -z` output."""
    entries = []
    tokens = output.split("\0")
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1
        if len(token) < 4:
            continue
        index, worktree, path = token[0], token[1], token[3:]
        if index in ("R", "C"):
            # rename/copy source follows as its own token
            i += 1
        entries.append(StatusEntry(path=path, index=index, worktree=worktree))
    return entries


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace").strip()
    except (FileNotFoundError, NotADirectoryError):
        return None


def _read_int(path: Path) -> int:
    value = _read(path)
    return int(value) if value and value.isdigit() else 0


def _read_rebase_progress(git_dir: Path) -> RebaseProgress | None:
    merge_dir = git_dir / "rebase-merge"
    apply_dir = git_dir / "rebase-apply"

    if merge_dir.is_dir():
        state_dir = merge_dir
        current = _read_int(state_dir / "msgnum")
        total = _read_int(state_dir / "end")
    elif apply_dir.is_dir():
        state_dir = apply_dir
        current = _read_int(state_dir / "next")
        total = _read_int(state_dir / "last")
    else:
        return None

    head_name = _read(state_dir / "head-name")
    if head_name:
        head_name = head_name.removeprefix("refs/heads/")

    stopped = _read(state_dir / "stopped-sha")
    is_edit = (state_dir / "amend").exists()
    message = _read(state_dir / "message")

    paused_action = None
    if stopped and is_edit:
        paused_action = RebaseAction.EDIT
        current_oid = _last_done_oid(state_dir) or stopped
        for oid in (_read(state_dir / REWORD_MARKER) or "").split():
            if oid.startswith(current_oid) or current_oid.startswith(oid):
                paused_action = RebaseAction.REWORD
                break

    return RebaseProgress(
        current_step=current,
        total_steps=total,
        stopped_oid=stopped,
        head_name=head_name,
        onto=_read(state_dir / "onto"),
        paused_action=paused_action,
        commit_message=message,
    )


def _last_done_oid(state_dir: Path) -> str | None:
    """Commit named by the most recent line of the `done` list."""
    done = _read(state_dir / "done") or ""
    for line in reversed(done.splitlines()):
        parts = line.split()
        if len(parts) >= 2 and not line.startswith("#"):
            return parts[1]
    return None


def _detect_operation(git_dir: Path) -> OperationState:
    apply_dir = git_dir / "rebase-apply"
    if (git_dir / "rebase-merge").is_dir():
        return OperationState(kind=OperationKind.REBASE)
    if apply_dir.is_dir():
        if (apply_dir / "applying").exists():
            return OperationState(kind=OperationKind.PATCH_APPLY)
        return OperationState(kind=OperationKind.REBASE)
    if (git_dir / "MERGE_HEAD").exists():
        return OperationState(
            kind=OperationKind.MERGE, target=_read(git_dir / "MERGE_HEAD")
        )
    if (git_dir / "CHERRY_PICK_HEAD").exists():
        return OperationState(
            kind=OperationKind.CHERRY_PICK,
            target=_read(git_dir / "CHERRY_PICK_HEAD"),
        )
    if (git_dir / "REVERT_HEAD").exists():
        return OperationState(
            kind=OperationKind.REVERT, target=_read(git_dir / "REVERT_HEAD")
        )
    return OperationState()


def _looks_binary(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return b"\0" in f.read(8000)
    except OSError:
        return False
