"""Stop-and-resume controller for git history-rewriting operations."""

__version__ = "0.1.0"
