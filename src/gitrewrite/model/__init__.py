"""Data models for operations, sessions and conflicts."""

from gitrewrite.model.conflict import (
    ConflictContent,
    ConflictFile,
    ConflictResolution,
    ConflictType,
)
from gitrewrite.model.outcome import OperationOutcome, RebaseProgress
from gitrewrite.model.repository import RebasePreview
from gitrewrite.model.session import OperationSession
from gitrewrite.model.types import OperationKind, RebaseAction, SessionStatus

__all__ = [
    "ConflictContent",
    "ConflictFile",
    "ConflictResolution",
    "ConflictType",
    "OperationKind",
    "OperationOutcome",
    "OperationSession",
    "RebaseAction",
    "RebasePreview",
    "RebaseProgress",
    "SessionStatus",
]
