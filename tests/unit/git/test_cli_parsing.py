"""Tests for parsing git output and on-disk operation state."""

import pytest

from gitrewrite.git.cli import (
    REWORD_MARKER,
    GitCliEngine,
    _detect_operation,
    _read_rebase_progress,
    parse_porcelain_status,
)
from gitrewrite.model.types import OperationKind, RebaseAction


@pytest.fixture
def git_dir(tmp_path):
    path = tmp_path / ".git"
    path.mkdir()
    return path


def rebase_merge_dir(git_dir, **files):
    state_dir = git_dir / "rebase-merge"
    state_dir.mkdir()
    for name, text in files.items():
        (state_dir / name.replace("_", "-")).write_text(text)
    return state_dir


def test_porcelain_status_entries():
    output = "UU both.txt\0 M changed.txt\0?? new.txt\0"

    entries = parse_porcelain_status(output)

    assert [(e.index, e.worktree, e.path) for e in entries] == [
        ("U", "U", "both.txt"),
        (" ", "M", "changed.txt"),
        ("?", "?", "new.txt"),
    ]
    assert entries[0].unmerged
    assert not entries[1].staged


def test_porcelain_status_skips_rename_source():
    output = "R  new name.txt\0old name.txt\0A  added.txt\0"

    entries = parse_porcelain_status(output)

    assert [e.path for e in entries] == ["new name.txt", "added.txt"]
    assert entries[0].staged


def test_porcelain_status_empty():
    assert parse_porcelain_status("") == []


def test_no_rebase_in_progress(git_dir):
    assert _read_rebase_progress(git_dir) is None


def test_rebase_merge_progress(git_dir):
    rebase_merge_dir(
        git_dir,
        msgnum="2\n",
        end="5\n",
        head_name="refs/heads/topic\n",
        onto="1234abcd\n",
    )

    progress = _read_rebase_progress(git_dir)

    assert progress.current_step == 2
    assert progress.total_steps == 5
    assert progress.head_name == "topic"
    assert progress.onto == "1234abcd"
    assert progress.paused_action is None


def test_edit_stop(git_dir):
    rebase_merge_dir(
        git_dir,
        msgnum="1", end="2",
        stopped_sha="abcdef0123",
        amend="abcdef0123",
        done="pick abcdef0123 First\n",
        message="First\n\nbody\n",
    )

    progress = _read_rebase_progress(git_dir)

    assert progress.paused_action is RebaseAction.EDIT
    assert progress.stopped_oid == "abcdef0123"
    assert progress.commit_message == "First\n\nbody"


def test_edit_stop_with_latin1_message(git_dir):
    state_dir = rebase_merge_dir(
        git_dir,
        msgnum="1", end="1",
        stopped_sha="abcdef0123",
        amend="abcdef0123",
        done="pick abcdef0123 Caf\n",
    )
    (state_dir / "message").write_bytes("Caf\xe9 au lait\n".encode("latin-1"))

    progress = _read_rebase_progress(git_dir)

    assert progress.paused_action is RebaseAction.EDIT
    assert progress.commit_message == "Caf\ufffd au lait"


def test_reword_stop_from_marker(git_dir):
    state_dir = rebase_merge_dir(
        git_dir,
        msgnum="2", end="2",
        stopped_sha="feed",
        amend="feed",
        done="pick 1111111 One\nedit 2222222 Two\n",
    )
    (state_dir / REWORD_MARKER).write_text("2222222222\n")

    progress = _read_rebase_progress(git_dir)

    assert progress.paused_action is RebaseAction.REWORD


def test_edit_stop_for_commit_not_in_marker(git_dir):
    state_dir = rebase_merge_dir(
        git_dir,
        msgnum="1", end="2",
        stopped_sha="1111111",
        amend="1111111",
        done="edit 1111111 One\n",
    )
    (state_dir / REWORD_MARKER).write_text("2222222\n")

    assert _read_rebase_progress(git_dir).paused_action is RebaseAction.EDIT


def test_rebase_apply_progress(git_dir):
    apply_dir = git_dir / "rebase-apply"
    apply_dir.mkdir()
    (apply_dir / "next").write_text("3\n")
    (apply_dir / "last").write_text("4\n")

    progress = _read_rebase_progress(git_dir)

    assert (progress.current_step, progress.total_steps) == (3, 4)


def test_detect_nothing(git_dir):
    assert not _detect_operation(git_dir).in_progress


@pytest.mark.parametrize("head_file, kind", [
    ("MERGE_HEAD", OperationKind.MERGE),
    ("CHERRY_PICK_HEAD", OperationKind.CHERRY_PICK),
    ("REVERT_HEAD", OperationKind.REVERT),
])
def test_detect_sequencer_heads(git_dir, head_file, kind):
    (git_dir / head_file).write_text("cafebabe\n")

    state = _detect_operation(git_dir)

    assert state.kind is kind
    assert state.target == "cafebabe"


def test_detect_rebase_over_merge_head(git_dir):
    (git_dir / "rebase-merge").mkdir()
    (git_dir / "MERGE_HEAD").write_text("cafebabe\n")

    assert _detect_operation(git_dir).kind is OperationKind.REBASE


def test_detect_mailbox_apply(git_dir):
    apply_dir = git_dir / "rebase-apply"
    apply_dir.mkdir()
    (apply_dir / "applying").touch()

    assert _detect_operation(git_dir).kind is OperationKind.PATCH_APPLY

    (apply_dir / "applying").unlink()
    assert _detect_operation(git_dir).kind is OperationKind.REBASE


def test_templates_fill_placeholders_per_token(tmp_path):
    engine = GitCliEngine(tmp_path)

    argv = engine._template("amend_message", message="Fix {thing}: it's done")

    assert argv == [
        "commit", "--amend", "--allow-empty", "-m", "Fix {thing}: it's done"
    ]
    assert engine._template("checkout_side", side="theirs", path="a b.txt") == [
        "checkout", "--theirs", "--", "a b.txt"
    ]


def test_template_overrides(tmp_path):
    engine = GitCliEngine(tmp_path, commands={"merge_abort": "reset --merge"})

    assert engine._template("merge_abort") == ["reset", "--merge"]
    assert engine._template("rebase_abort") == ["rebase", "--abort"]


def test_template_keeps_escaped_braces(tmp_path):
    engine = GitCliEngine(tmp_path)

    assert engine._template("resolve_commit", rev="main") == [
        "rev-parse", "--verify", "--quiet", "main^{commit}"
    ]
