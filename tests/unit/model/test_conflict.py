"""Tests for conflict classification and marker parsing."""

import pytest

from gitrewrite.model.conflict import (
    ConflictContent,
    ConflictFile,
    ConflictResolution,
    ConflictType,
    conflict_type_from_status,
    parse_conflict_markers,
)
from gitrewrite.model.session import OperationSession
from gitrewrite.model.types import OperationKind, SessionStatus


@pytest.mark.parametrize("xy, expected", [
    ("UU", ConflictType.CONTENT),
    ("AA", ConflictType.ADD_ADD),
    ("DU", ConflictType.DELETE_MODIFY),
    ("UD", ConflictType.DELETE_MODIFY),
    ("DD", ConflictType.RENAME_RENAME),
    ("XY", ConflictType.CONTENT),
])
def test_conflict_type_from_status(xy, expected):
    assert conflict_type_from_status(xy) is expected


def test_two_way_markers():
    text = (
        "one\n"
        "<<<<<<< HEAD\n"
        "ours\n"
        "=======\n"
        "theirs\n"
        ">>>>>>> feature\n"
        "two\n"
    )

    hunk, = parse_conflict_markers(text)

    assert hunk.ours_content == "ours"
    assert hunk.theirs_content == "theirs"
    assert hunk.base_content is None
    assert hunk.ours_ref == "HEAD"
    assert hunk.theirs_ref == "feature"
    assert hunk.context_before == ["one"]
    assert hunk.context_after == ["two"]
    assert hunk.start_line == 2


def test_diff3_markers():
    text = (
        "<<<<<<< ours\n"
        "a\n"
        "||||||| base\n"
        "b\n"
        "=======\n"
        "c\n"
        ">>>>>>> theirs\n"
    )

    hunk, = parse_conflict_markers(text)

    assert (hunk.ours_content, hunk.base_content, hunk.theirs_content) == (
        "a", "b", "c"
    )


def test_several_hunks():
    block = "<<<<<<<\nx\n=======\ny\n>>>>>>>\n"

    hunks = ConflictContent(path="f", merged=block + "mid\n" + block).hunks()

    assert [h.start_line for h in hunks] == [1, 7]
    assert hunks[0].ours_ref == "ours"
    assert hunks[0].theirs_ref == "theirs"


def test_malformed_markers():
    with pytest.raises(ValueError, match="no separator"):
        parse_conflict_markers("<<<<<<< HEAD\nx\n")
    with pytest.raises(ValueError, match="no end marker"):
        parse_conflict_markers("<<<<<<< HEAD\nx\n=======\ny\n")


def test_session_conflict_bookkeeping():
    session = OperationSession(
        kind=OperationKind.MERGE,
        status=SessionStatus.CONFLICTED,
        conflicts=[
            ConflictFile(path="a", resolution=ConflictResolution.OURS),
            ConflictFile(path="b"),
        ],
    )

    assert session.is_busy
    assert session.is_resumable
    assert [c.path for c in session.unresolved] == ["b"]
    assert session.conflict("a").is_resolved
    assert session.conflict("missing") is None
