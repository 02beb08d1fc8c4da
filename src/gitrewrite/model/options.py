"""Per-kind option bags, keyed by operation kind.

Each kind has its own model; OperationOptions is the discriminated
union of all of them. build_options() is the single place options
are validated and normalized before anything reaches the engine.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from gitrewrite.core.errors import ValidationError
from gitrewrite.model.types import OperationKind, RebaseAction


class MergeOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal[OperationKind.MERGE] = OperationKind.MERGE
    branch: str = Field(default="", validate_default=True)
    message: str | None = None
    no_fast_forward: bool = False
    squash: bool = False
    ff_only: bool = False
    commit_immediately: bool = Field(
        default=True,
        description="False stages the merge result without committing",
    )

    @field_validator("branch")
    @classmethod
    def _require_branch(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("select a branch to merge")
        return value.strip()

    @model_validator(mode="after")
    def _normalize(self) -> MergeOptions:
        # squash and no-ff are exclusive; squash wins
        if self.squash:
            self.no_fast_forward = False
        if self.ff_only and (self.no_fast_forward or self.squash):
            raise ValueError(
                "ff_only cannot be combined with no_fast_forward or squash"
            )
        return self


class RebaseTodoEntry(BaseModel):
    """One line of an interactive rebase todo list."""

    action: RebaseAction = RebaseAction.PICK
    oid: str
    summary: str = ""


class RebaseOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal[OperationKind.REBASE] = OperationKind.REBASE
    onto_branch: str | None = None
    onto_commit: str | None = None
    entries: list[RebaseTodoEntry] | None = Field(
        default=None,
        description="Interactive todo list; None runs a plain rebase",
    )
    autosquash: bool = False

    @model_validator(mode="after")
    def _one_target(self) -> RebaseOptions:
        if self.onto_branch and self.onto_commit:
            raise ValueError(
                "onto_branch and onto_commit are mutually exclusive"
            )
        if not (self.onto_branch or self.onto_commit):
            raise ValueError("select a branch or commit to rebase onto")
        if self.entries is not None and all(
            entry.action is RebaseAction.DROP for entry in self.entries
        ):
            raise ValueError("interactive rebase would drop every commit")
        return self

    @property
    def onto(self) -> str:
        return self.onto_branch or self.onto_commit

    @property
    def interactive(self) -> bool:
        return self.entries is not None


def _require_items(value: list[str], what: str) -> list[str]:
    items = [item.strip() for item in value if item and item.strip()]
    if not items:
        raise ValueError(f"select at least one {what}")
    return items


class CherryPickOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal[OperationKind.CHERRY_PICK] = OperationKind.CHERRY_PICK
    commits: list[str] = Field(default_factory=list, validate_default=True)
    no_commit: bool = False
    allow_empty: bool = False

    @field_validator("commits")
    @classmethod
    def _require_commits(cls, value: list[str]) -> list[str]:
        return _require_items(value, "commit")


class RevertOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal[OperationKind.REVERT] = OperationKind.REVERT
    commits: list[str] = Field(default_factory=list, validate_default=True)
    no_commit: bool = False

    @field_validator("commits")
    @classmethod
    def _require_commits(cls, value: list[str]) -> list[str]:
        return _require_items(value, "commit")


class PatchApplyOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal[OperationKind.PATCH_APPLY] = OperationKind.PATCH_APPLY
    patch_paths: list[str] = Field(
        default_factory=list, validate_default=True
    )
    three_way: bool = True

    @field_validator("patch_paths")
    @classmethod
    def _require_patches(cls, value: list[str]) -> list[str]:
        return _require_items(value, "patch")


OperationOptions = Annotated[
    MergeOptions
    | RebaseOptions
    | CherryPickOptions
    | RevertOptions
    | PatchApplyOptions,
    Field(discriminator="kind"),
]

_options_adapter: TypeAdapter[OperationOptions] = TypeAdapter(OperationOptions)

# Option field that receives start()'s target argument
TARGET_FIELDS = {
    OperationKind.MERGE: "branch",
    OperationKind.REBASE: "onto_branch",
    OperationKind.CHERRY_PICK: "commits",
    OperationKind.REVERT: "commits",
    OperationKind.PATCH_APPLY: "patch_paths",
}

_LIST_TARGETS = {"commits", "patch_paths"}


def _describe(error: pydantic.ValidationError) -> str:
    messages = []
    for item in error.errors():
        msg = item["msg"].removeprefix("Value error, ")
        # drop the union tag pydantic prepends to the location
        loc = [str(part) for part in item["loc"][1:]]
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(messages)


def build_options(
    kind: OperationKind,
    target: str | Sequence[str] | None = None,
    options: Mapping[str, Any] | BaseModel | None = None,
) -> OperationOptions:
    """Validate and normalize the option bag for a start call.

    Args:
        kind: Operation kind being started
        target: Branch, commit list or patch list; lands in the
            kind's target field (see TARGET_FIELDS)
        options: Remaining options as a mapping or a model of the
            same kind

    Returns:
        The validated options model for `kind`

    Raises:
        ValidationError: On missing targets or conflicting options
    """
    kind = OperationKind(kind)

    if isinstance(options, BaseModel):
        if getattr(options, "kind", kind) != kind:
            raise ValidationError(
                f"{options.kind.label} options passed to a "
                f"{kind.label} operation"
            )
        data = options.model_dump()
    else:
        data = dict(options or {})
    data["kind"] = kind

    if target is not None:
        field = TARGET_FIELDS[kind]
        if field in _LIST_TARGETS:
            value = [target] if isinstance(target, str) else list(target)
        else:
            value = target
        if data.get(field) not in (None, [], "", value):
            raise ValidationError(
                f"{field} given both as target and as an option"
            )
        data[field] = value

    try:
        return _options_adapter.validate_python(data)
    except pydantic.ValidationError as e:
        raise ValidationError(_describe(e)) from e


def describe_target(options: OperationOptions) -> str:
    """Human-readable form of what the operation acts against."""
    match options:
        case MergeOptions():
            return options.branch
        case RebaseOptions():
            return options.onto
        case CherryPickOptions() | RevertOptions():
            return ", ".join(options.commits)
        case PatchApplyOptions():
            return ", ".join(options.patch_paths)
