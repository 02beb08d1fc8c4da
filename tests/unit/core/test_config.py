"""Tests for State loading, environment overrides and templates."""

import sys

import platformdirs
import pydantic
import pytest

from gitrewrite.core import yaml_settings
from gitrewrite.core.config import State
from gitrewrite.model.types import OperationKind


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Empty project directory as cwd, with no user-level config."""
    monkeypatch.setattr(
        yaml_settings, "user_config_dir",
        lambda *a, **kw: str(tmp_path / "user-config"),
    )
    monkeypatch.setattr(sys, "argv", ["gitrewrite"])
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(project):
    state = State()

    assert state.config.git.binary == "git"
    assert state.config.git.timeout is None
    assert not state.config.git.bypass_hooks
    assert state.config.refresh.history_limit == 200
    assert state.config.refresh.stash_kinds == [
        OperationKind.MERGE, OperationKind.REBASE
    ]
    assert state.config.commands["git"]["am_abort"] == "am --abort"
    assert state.runtime.operation.controller is None


def test_project_file_overrides_defaults(project):
    (project / "gitrewrite.yaml").write_text(
        "config:\n"
        "  log-level: debug\n"
        "  git:\n"
        "    timeout: 60\n"
        "  refresh:\n"
        "    stash_kinds: [cherry_pick]\n"
    )

    config = State().config

    assert config.log_level == "debug"
    assert config.git.timeout == 60
    assert config.git.binary == "git"
    assert config.refresh.stash_kinds == [OperationKind.CHERRY_PICK]


def test_environment_fills_unset_values(project, monkeypatch):
    monkeypatch.setenv("GITREWRITE_CONFIG__LOG_ROOT", str(project / "logs"))

    assert State().config.log_root == project / "logs"


def test_repo_name_from_workdir(project):
    (project / "myrepo").mkdir()
    (project / "gitrewrite.yaml").write_text(
        "config:\n  git:\n    workdir: myrepo\n"
    )

    assert State().config.git.repo_name == "myrepo"


def test_invalid_log_level_rejected(project):
    with pytest.raises(pydantic.ValidationError, match="log-level"):
        State(config={"log-level": "loud"})


def test_config_templates_substituted(project):
    (project / "gitrewrite.yaml").write_text(
        "config:\n"
        "  commands:\n"
        "    notes:\n"
        "      binary: \"{config.git.binary} notes\"\n"
        "      cache: \"{platformdirs.user_cache_dir}\"\n"
    )

    notes = State().config.commands["notes"]

    assert notes["binary"] == "git notes"
    assert notes["cache"] == platformdirs.user_cache_dir(
        "gitrewrite", appauthor=False
    )


def test_runtime_placeholders_preserved(project):
    (project / "gitrewrite.yaml").write_text(
        "config:\n"
        "  commands:\n"
        "    git:\n"
        "      show_stage: \"show :{stage}:{path}\"\n"
    )

    commands = State().config.commands["git"]

    assert commands["show_stage"] == "show :{stage}:{path}"
    # defaults are merged underneath
    assert commands["merge_abort"] == "merge --abort"
