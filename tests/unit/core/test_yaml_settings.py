"""Tests for layered YAML loading and include: handling."""

import sys
from pathlib import Path

import pytest

from gitrewrite.core import yaml_settings
from gitrewrite.core.config import State
from gitrewrite.core.yaml_settings import (
    YamlWithIncludesSettingsSource,
    cli_includes,
    deep_merge,
    load_yaml,
)


@pytest.fixture(autouse=True)
def isolated_layers(tmp_path, monkeypatch):
    """No user config directory and no --include on the command line."""
    user_dir = tmp_path / "user-config"
    monkeypatch.setattr(
        yaml_settings, "user_config_dir", lambda *a, **kw: str(user_dir)
    )
    monkeypatch.setattr(sys, "argv", ["gitrewrite"])
    return user_dir


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_cli_includes_both_spellings():
    argv = [
        "gitrewrite", "--include", "a.yaml", "merge",
        "--include=b.yaml", "feature", "--include",
    ]
    assert cli_includes(argv) == ["a.yaml", "b.yaml"]


def test_deep_merge_keeps_untouched_keys():
    base = {"git": {"binary": "git", "timeout": 10}, "log-level": "info"}
    override = {"git": {"timeout": 30}}

    merged = deep_merge(base, override)

    assert merged == {
        "git": {"binary": "git", "timeout": 30}, "log-level": "info"
    }
    assert base["git"]["timeout"] == 10


def test_include_relative_to_including_file(tmp_path):
    write(tmp_path / "shared" / "git.yaml", "config:\n  git:\n    timeout: 5\n")
    main = write(
        tmp_path / "main.yaml",
        "include: shared/git.yaml\nconfig:\n  log-level: debug\n",
    )

    data = load_yaml(main)

    assert data == {"config": {"git": {"timeout": 5}, "log-level": "debug"}}


def test_includer_wins_over_included(tmp_path):
    write(tmp_path / "base.yaml", "config:\n  git:\n    binary: /opt/git\n")
    main = write(tmp_path / "main.yaml", (
        "include:\n  - base.yaml\n"
        "config:\n  git:\n    binary: git\n"
    ))

    assert load_yaml(main)["config"]["git"]["binary"] == "git"


def test_nested_includes(tmp_path):
    write(tmp_path / "c.yaml", "config:\n  refresh:\n    history_limit: 7\n")
    write(tmp_path / "b.yaml", "include: c.yaml\n")
    main = write(tmp_path / "a.yaml", "include: b.yaml\n")

    assert load_yaml(main)["config"]["refresh"]["history_limit"] == 7


def test_circular_include_raises(tmp_path):
    write(tmp_path / "a.yaml", "include: b.yaml\n")
    write(tmp_path / "b.yaml", "include: a.yaml\n")

    with pytest.raises(ValueError, match="Circular include"):
        load_yaml(tmp_path / "a.yaml")


def test_empty_file_loads_as_empty(tmp_path):
    assert load_yaml(write(tmp_path / "empty.yaml", "")) == {}


def test_source_starts_from_packaged_defaults(tmp_path):
    source = YamlWithIncludesSettingsSource(
        State, yaml_file=str(tmp_path / "missing.yaml")
    )
    data = source()

    assert data["config"]["git"]["binary"] == "git"
    assert data["config"]["commands"]["git"]["merge_abort"] == "merge --abort"


def test_layer_priority(tmp_path, isolated_layers, monkeypatch):
    write(isolated_layers / "gitrewrite.yaml", (
        "config:\n  git:\n    timeout: 10\n    binary: user-git\n"
    ))
    project = write(tmp_path / "gitrewrite.yaml", (
        "config:\n  git:\n    timeout: 20\n"
    ))
    extra = write(tmp_path / "extra.yaml", "config:\n  git:\n    timeout: 30\n")
    monkeypatch.setattr(
        sys, "argv", ["gitrewrite", "--include", str(extra), "status"]
    )

    data = YamlWithIncludesSettingsSource(State, yaml_file=str(project))()

    assert data["config"]["git"]["timeout"] == 30
    assert data["config"]["git"]["binary"] == "user-git"
    assert data["config"]["log-level"] == "info"


def test_cli_include_without_base_file(tmp_path, monkeypatch):
    extra = write(tmp_path / "only.yaml", "config:\n  log-level: warn\n")
    monkeypatch.setattr(sys, "argv", ["gitrewrite", f"--include={extra}"])

    monkeypatch.chdir(tmp_path)
    source = YamlWithIncludesSettingsSource(State, yaml_file=None)

    assert source()["config"]["log-level"] == "warn"


def test_read_files_accepts_deep_merge_keyword(tmp_path):
    project = write(tmp_path / "gitrewrite.yaml", (
        "config:\n  git:\n    binary: /opt/git\n"
    ))
    source = YamlWithIncludesSettingsSource(State, yaml_file=None)

    data = source._read_files([str(project)], deep_merge=True)

    assert data["config"]["git"]["binary"] == "/opt/git"
    assert data["config"]["git"]["workdir"] == "."


def test_state_loads_from_packaged_defaults_only(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    state = State()

    assert state.config.git.binary == "git"
    assert state.config.refresh.history_limit == 200
