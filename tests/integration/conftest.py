"""Fixtures for tests that drive a real git executable."""

import shutil
import subprocess
from pathlib import Path

import pytest
import pytest_asyncio

from gitrewrite.git.adapter import EngineAdapter
from gitrewrite.git.cli import GitCliEngine
from gitrewrite.workflow.controller import OperationController
from gitrewrite.workflow.refresh import RefreshCoordinator, RepositoryView


class Repo:
    """Scratch repository driven with plain subprocess calls."""

    def __init__(self, path: Path):
        self.path = path

    def git(self, *args) -> str:
        result = subprocess.run(
            ["git", *args], cwd=self.path, check=True,
            capture_output=True, text=True,
        )
        return result.stdout.strip()

    def commit(self, name, content, message) -> str:
        (self.path / name).write_text(content)
        self.git("add", "--", name)
        self.git("commit", "-q", "-m", message)
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")

    def summaries(self, count=10) -> list[str]:
        return self.git("log", "--format=%s", "-n", str(count)).splitlines()

    def read(self, name) -> str:
        return (self.path / name).read_text()


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    """Deterministic identity; no user or system git config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "author@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "author@example.com")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", "/dev/null")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")


@pytest.fixture
def repo(tmp_path):
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    path = tmp_path / "repo"
    path.mkdir()
    scratch = Repo(path)
    scratch.git("init", "-q", "-b", "main")
    scratch.commit("a.txt", "base\n", "initial")
    return scratch


@pytest.fixture
def diverged(repo):
    """main and topic both change a.txt, so merging them conflicts."""
    repo.git("checkout", "-q", "-b", "topic")
    repo.commit("a.txt", "topic\n", "topic change")
    repo.git("checkout", "-q", "main")
    repo.commit("a.txt", "main\n", "main change")
    return repo


@pytest.fixture
def git_engine(repo):
    return GitCliEngine(repo.path)


@pytest.fixture
def git_view(git_engine):
    return RepositoryView(git_engine)


@pytest_asyncio.fixture
async def git_controller(git_engine, git_view):
    refresh = RefreshCoordinator(git_view)
    yield OperationController(EngineAdapter(git_engine), refresh=refresh)
    await refresh.drain()
