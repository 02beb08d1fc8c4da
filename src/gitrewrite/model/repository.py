"""Derived repository data shown alongside an operation."""

from pydantic import BaseModel

from gitrewrite.model.options import RebaseTodoEntry


class CommitSummary(BaseModel):
    oid: str
    summary: str
    parents: list[str] = []

    @property
    def short_oid(self) -> str:
        return self.oid[:7]


class BranchInfo(BaseModel):
    name: str
    is_head: bool = False
    upstream: str | None = None


class StatusEntry(BaseModel):
    """One line of porcelain status: index and worktree codes."""

    path: str
    index: str = " "
    worktree: str = " "

    @property
    def staged(self) -> bool:
        return self.index not in (" ", "?", "U") and self.worktree != "U"

    @property
    def unmerged(self) -> bool:
        return "U" in (self.index, self.worktree) or (
            self.index == self.worktree and self.index in ("A", "D")
        )


class StashEntry(BaseModel):
    index: int
    message: str


class RebaseTarget(BaseModel):
    name: str
    oid: str
    summary: str = ""

    @property
    def short_oid(self) -> str:
        return self.oid[:7]


class RebasePreview(BaseModel):
    """What a rebase of HEAD onto `target` would replay.

    `commits` runs oldest first, the order a rebase applies them in.
    """

    commits: list[CommitSummary]
    merge_base: CommitSummary
    target: RebaseTarget
    target_ahead: int = 0

    def todo_entries(self) -> list[RebaseTodoEntry]:
        """Default interactive todo list: pick every commit."""
        return [
            RebaseTodoEntry(oid=commit.oid, summary=commit.summary)
            for commit in self.commits
        ]
