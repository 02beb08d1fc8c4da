"""Git engine interface, its command-line implementation and adapter."""

from gitrewrite.git.adapter import EngineAdapter
from gitrewrite.git.cli import GitCliEngine
from gitrewrite.git.engine import GitEngine

__all__ = ["GitEngine", "GitCliEngine", "EngineAdapter"]
