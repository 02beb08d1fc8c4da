"""Enumerations shared across the model."""

from enum import StrEnum


class OperationKind(StrEnum):
    """The history-rewriting operations the controller can drive."""

    MERGE = "merge"
    REBASE = "rebase"
    CHERRY_PICK = "cherry_pick"
    REVERT = "revert"
    PATCH_APPLY = "patch_apply"

    @property
    def label(self) -> str:
        return self.value.replace("_", "-")


class SessionStatus(StrEnum):
    """Lifecycle states of an operation session."""

    IDLE = "idle"
    RUNNING = "running"
    RESUMING = "resuming"
    COMPLETED = "completed"
    CONFLICTED = "conflicted"
    PAUSED = "paused"
    FAILED = "failed"
    ABORTED = "aborted"


# A session in one of these blocks any new start.
BUSY_STATUSES = frozenset({
    SessionStatus.RUNNING,
    SessionStatus.RESUMING,
    SessionStatus.CONFLICTED,
    SessionStatus.PAUSED,
})

# States the user can resume from with continue/skip.
RESUMABLE_STATUSES = frozenset({
    SessionStatus.CONFLICTED,
    SessionStatus.PAUSED,
})

# Kinds with a skip entry point.
SKIPPABLE_KINDS = frozenset({
    OperationKind.REBASE,
    OperationKind.CHERRY_PICK,
    OperationKind.PATCH_APPLY,
})


class RebaseAction(StrEnum):
    """Actions of an interactive rebase todo entry."""

    PICK = "pick"
    REWORD = "reword"
    EDIT = "edit"
    SQUASH = "squash"
    FIXUP = "fixup"
    DROP = "drop"
