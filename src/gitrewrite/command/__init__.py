"""CLI command modules for gitrewrite."""

from gitrewrite.command.operation import (
    AmCommand,
    CherryPickCommand,
    MergeCommand,
    RebaseCommand,
    RevertCommand,
)
from gitrewrite.command.resume import (
    AbortCommand,
    ContinueCommand,
    ResolveCommand,
    SkipCommand,
    StatusCommand,
)

__all__ = [
    "MergeCommand",
    "RebaseCommand",
    "CherryPickCommand",
    "RevertCommand",
    "AmCommand",
    "ContinueCommand",
    "SkipCommand",
    "AbortCommand",
    "ResolveCommand",
    "StatusCommand",
]
