"""Conflicted paths, their resolution state and three-way content."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field


class ConflictType(StrEnum):
    """How the two sides disagree about a path."""

    CONTENT = "content"
    DELETE_MODIFY = "delete_modify"
    ADD_ADD = "add_add"
    RENAME_RENAME = "rename_rename"
    RENAME_MODIFY = "rename_modify"
    BINARY = "binary"


class ConflictResolution(StrEnum):
    """What the user has asked for a conflicted path."""

    UNRESOLVED = "unresolved"
    OURS = "ours"
    THEIRS = "theirs"
    MERGED = "merged"


# Unmerged XY codes from `git status --porcelain`
_STATUS_CONFLICT_TYPES = {
    "UU": ConflictType.CONTENT,
    "AA": ConflictType.ADD_ADD,
    "AU": ConflictType.ADD_ADD,
    "UA": ConflictType.ADD_ADD,
    "DU": ConflictType.DELETE_MODIFY,
    "UD": ConflictType.DELETE_MODIFY,
    "DD": ConflictType.RENAME_RENAME,
}


def conflict_type_from_status(xy: str) -> ConflictType:
    """Classify an unmerged porcelain status code."""
    return _STATUS_CONFLICT_TYPES.get(xy, ConflictType.CONTENT)


class ConflictFile(BaseModel):
    """One conflicted path.

    The resolution is the user's recorded intent. Whether the index
    agrees is only known after the engine runs continue.
    """

    path: str
    conflict_type: ConflictType = ConflictType.CONTENT
    resolution: ConflictResolution = ConflictResolution.UNRESOLVED

    @property
    def is_resolved(self) -> bool:
        return self.resolution is not ConflictResolution.UNRESOLVED


@dataclass
class ConflictHunk:
    """One `<<<<<<< ... >>>>>>>` region of a conflicted file."""

    ours_content: str
    theirs_content: str
    base_content: str | None
    context_before: list[str]
    context_after: list[str]
    ours_ref: str
    theirs_ref: str
    start_line: int


def parse_conflict_markers(
    file_content: str,
    context_lines: int = 3,
) -> list[ConflictHunk]:
    """Parse conflict markers from working-tree content.

    Understands both the plain two-way layout and diff3 layout
    (with a `|||||||` base section).

    Args:
        file_content: File text containing conflict markers
        context_lines: Lines of context to keep on each side

    Returns:
        One ConflictHunk per marked region, in file order

    Raises:
        ValueError: If a region is missing its separator or end
    """
    lines = file_content.splitlines(keepends=True)
    hunks = []
    i = 0

    while i < len(lines):
        if not lines[i].startswith("<<<<<<<"):
            i += 1
            continue

        start = i
        ours_ref = lines[i][7:].strip()
        base_idx = separator_idx = end_idx = None

        j = i + 1
        while j < len(lines):
            line = lines[j]
            if line.startswith("|||||||") and separator_idx is None:
                base_idx = j
            elif line.startswith("=======") and separator_idx is None:
                separator_idx = j
            elif line.startswith(">>>>>>>") and separator_idx is not None:
                end_idx = j
                break
            j += 1

        if separator_idx is None:
            raise ValueError(
                f"Malformed conflict at line {start + 1}: no separator found"
            )
        if end_idx is None:
            raise ValueError(
                f"Malformed conflict at line {start + 1}: no end marker found"
            )

        ours_end = base_idx if base_idx is not None else separator_idx
        ours = "".join(lines[start + 1:ours_end])
        base = (
            "".join(lines[base_idx + 1:separator_idx])
            if base_idx is not None else None
        )
        theirs = "".join(lines[separator_idx + 1:end_idx])

        before = lines[max(0, start - context_lines):start]
        after = lines[end_idx + 1:end_idx + 1 + context_lines]

        hunks.append(ConflictHunk(
            ours_content=ours.rstrip("\r\n"),
            theirs_content=theirs.rstrip("\r\n"),
            base_content=base.rstrip("\r\n") if base is not None else None,
            context_before=[line.rstrip("\r\n") for line in before],
            context_after=[line.rstrip("\r\n") for line in after],
            ours_ref=ours_ref or "ours",
            theirs_ref=lines[end_idx][7:].strip() or "theirs",
            start_line=start + 1,
        ))
        i = end_idx + 1

    return hunks


class ConflictContent(BaseModel):
    """Three-way view of a conflicted path.

    A side is None when it does not exist in that stage, e.g. the
    base of an add/add conflict or the deleted side of a
    delete/modify conflict.
    """

    path: str
    base: str | None = None
    ours: str | None = None
    theirs: str | None = None
    merged: str = Field(
        default="",
        description="Working-tree text with conflict markers",
    )

    def hunks(self, context_lines: int = 3) -> list[ConflictHunk]:
        return parse_conflict_markers(self.merged, context_lines)
