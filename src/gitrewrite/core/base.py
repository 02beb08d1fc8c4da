"""Base models shared by configuration and runtime state.

Kept apart from config.py so that log.py can build on BaseConfig
without importing the full settings machinery.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Anything that owns a resource released by close()."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Model that closes every Closeable field it holds.

    Closing walks the declared fields and closes each child that
    implements close(). A failing child does not stop the walk, so
    State -> Config -> Logger -> sinks always runs to the end.
    """

    def close(self):
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None or not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                # the logger may be the thing failing; stderr is all we have
                print(
                    f"Warning: error closing {field_name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration sections (YAML/env/CLI)."""


class BaseState(BaseCloseable):
    """Marker base for runtime sections mutated while running."""


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
