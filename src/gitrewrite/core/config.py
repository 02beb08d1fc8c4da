"""Application state and configuration."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitrewrite.core.base import BaseConfig, BaseState
from gitrewrite.core.log import LEVELS, Logger
from gitrewrite.core.yaml_settings import (
    CONFIG_NAME,
    YamlWithIncludesSettingsSource,
)
from gitrewrite.model.types import OperationKind

# Usable in YAML string values: {platformdirs.user_log_dir}, {os.getcwd}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}


class GitConfig(BaseConfig):
    """Repository and git executable settings."""

    workdir: Path = Field(
        default=Path("."),
        description="Working directory of the repository to operate on",
    )
    binary: str = Field(
        default="git",
        description="git executable name or path",
    )
    timeout: int | None = Field(
        default=None,
        description="Seconds before a single git invocation is killed",
    )
    bypass_hooks: bool = Field(
        default=False,
        description="Pass --no-verify to merge and rebase",
    )

    @property
    def repo_name(self) -> str:
        return self.workdir.expanduser().resolve().name or "repository"


class RefreshConfig(BaseConfig):
    """Derived-state reloads after a transition."""

    history_limit: int = Field(
        default=200,
        description="Commits reloaded into the history cache",
    )
    stash_kinds: list[OperationKind] = Field(
        default_factory=lambda: [OperationKind.MERGE, OperationKind.REBASE],
        description="Operation kinds whose completion reloads stashes",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance",
    )
    git: GitConfig = Field(
        default_factory=GitConfig,
        description="Repository settings",
    )
    refresh: RefreshConfig = Field(
        default_factory=RefreshConfig,
        description="Derived-state refresh settings",
    )
    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "gitrewrite"
        ),
        description="Root directory for log files",
    )
    commands: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Command templates by category (git, ...)",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> Config:
        """Initialize the global logger once configuration is loaded."""
        from gitrewrite.core.log import setup_logger

        if self.log_level not in LEVELS:
            raise ValueError(
                f"log-level must be one of {', '.join(LEVELS)}"
            )
        if self.logger is None:
            self.logger = Logger(level=self.log_level)
        self.logger.console.level = self.log_level

        setup_logger(
            log_root=self.log_root,
            repo_name=self.git.repo_name,
            console=self.logger.console,
            file=self.logger.file,
            logfire=self.logger.logfire,
        )
        return self

    def close(self):
        from gitrewrite.core.log import close_logger

        close_logger()
        super().close()


class OperationRuntime(BaseState):
    """Live objects of the operation workflow."""

    controller: Any = Field(
        default=None,
        description="OperationController driving the repository",
    )
    view: Any = Field(
        default=None,
        description="RepositoryView with the derived caches",
    )
    refresh: Any = Field(
        default=None,
        description="RefreshCoordinator feeding the view",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Runtime(BaseModel):
    """Runtime state, grouped by workflow."""

    operation: OperationRuntime = Field(
        default_factory=OperationRuntime,
        description="Operation controller state",
    )


class State(BaseSettings):
    """Configuration plus runtime state.

    - config: loaded from YAML/env/CLI and not changed afterwards
    - runtime: objects created while a command runs
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (created while running)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to deep-merge over the "
            "configuration (repeatable --include)"
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_NAME,
        env_file=".env",
        env_prefix="GITREWRITE_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority, highest first: init kwargs, YAML layers, .env,
        environment, file secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> State:
        """Replace {config.*} and {platformdirs.*} style templates."""
        self._substitute(self)
        return self

    def _substitute(self, obj: Any) -> Any:
        if isinstance(obj, str):
            return self._substitute_string(obj)
        if isinstance(obj, Path):
            return Path(self._substitute_string(str(obj)))
        if isinstance(obj, BaseModel):
            for name in obj.__class__.model_fields:
                value = getattr(obj, name)
                new_value = self._substitute(value)
                if new_value is not value and new_value != value:
                    setattr(obj, name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute(obj[key])
        elif isinstance(obj, list):
            for i, item in enumerate(obj):
                obj[i] = self._substitute(item)
        return obj

    def _substitute_string(self, value: str) -> str:
        """Resolve {dotted.path} references; unknown ones stay as-is.

        "{config.git.workdir}/notes" -> "/home/user/repo/notes"
        "{platformdirs.user_log_dir}" -> "~/.local/state/gitrewrite/log"
        """
        def replace(match):
            parts = match.group(1).split(".")
            head = parts[0]
            if head in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[head]
                parts = parts[1:]
            else:
                obj = self
            try:
                for part in parts:
                    obj = getattr(obj, part)
                if callable(obj):
                    obj = (
                        obj('gitrewrite', appauthor=False)
                        if head == 'platformdirs' else obj()
                    )
                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z._]+)\}', replace, value)


__all__ = ["State", "Config", "GitConfig", "RefreshConfig", "Runtime"]
