"""State threaded through one transition graph run."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import ConfigDict, Field

from gitrewrite.core.base import BaseState
from gitrewrite.model.options import OperationOptions
from gitrewrite.model.outcome import OperationOutcome
from gitrewrite.model.types import OperationKind, SessionStatus


class Action(StrEnum):
    START = "start"
    CONTINUE = "continue"
    SKIP = "skip"
    ABORT = "abort"


class Transition(BaseState):
    """One start/continue/skip/abort call on its way through the graph.

    `generation` is the token stamped on the session when the call
    was issued; ApplyOutcome compares it with the session's current
    token before touching anything.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    controller: Any = Field(exclude=True, repr=False)
    action: Action
    kind: OperationKind
    generation: int
    options: OperationOptions | None = None
    message: str | None = Field(
        default=None,
        description="Replacement commit message for a rebase stop",
    )
    outcome: OperationOutcome | None = None
    error: str | None = None
    warning: str | None = None
    resulting_status: SessionStatus | None = None
