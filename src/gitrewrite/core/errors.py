"""Error taxonomy for operation lifecycle calls.

Validation, busy and transition errors are raised synchronously to
the caller before anything touches the repository. Engine errors are
raised by the git engine and its adapter; the controller turns them
into a Failed session instead of letting them escape.
"""

from __future__ import annotations


class GitRewriteError(Exception):
    """Base class for all gitrewrite errors."""


class ValidationError(GitRewriteError):
    """Options were missing or contradictory.

    Raised before any engine call; never mutates session state.
    """


class SessionBusy(GitRewriteError):
    """A start was requested while another operation is live."""

    def __init__(self, kind, status):
        self.kind = kind
        self.status = status
        super().__init__(
            f"A {kind.value} operation is already {status.value}; "
            f"continue, skip or abort it first"
        )


class InvalidTransition(GitRewriteError):
    """The requested call is not legal from the current status."""

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"Cannot {action}: {reason}")


class EngineError(GitRewriteError):
    """The git engine failed at the transport or process level.

    The message is surfaced to the user verbatim.
    """

    def __init__(self, message: str, *, command: str | None = None,
                 returncode: int | None = None):
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class AbortFailure(EngineError):
    """An abort call failed. Reported as a warning only."""


__all__ = [
    "GitRewriteError",
    "ValidationError",
    "SessionBusy",
    "InvalidTransition",
    "EngineError",
    "AbortFailure",
]
