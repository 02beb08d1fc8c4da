"""Layered YAML configuration with include: support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

from gitrewrite.core.log import logger

CONFIG_NAME = "gitrewrite.yaml"

DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"


def cli_includes(argv: list[str]) -> list[str]:
    """Values of every `--include FILE` pair in argv."""
    includes = []
    args = iter(argv[1:])
    for arg in args:
        if arg == "--include":
            value = next(args, None)
            if value is not None:
                includes.append(value)
        elif arg.startswith("--include="):
            includes.append(arg.split("=", 1)[1])
    return includes


def deep_merge(base: dict, override: dict) -> dict:
    """Merge override into a copy of base; nested dicts merge too."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path, visited: frozenset[Path] = frozenset()) -> dict:
    """Load one YAML file, resolving its include: entries first.

    Included files are merged underneath the including file, so the
    includer always wins.

    Raises:
        ValueError: A file includes itself, directly or not
    """
    path = path.resolve()
    if path in visited:
        raise ValueError(f"Circular include: {path}")
    visited = visited | {path}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    includes = data.pop("include", None) or []
    if isinstance(includes, str):
        includes = [includes]

    merged: dict = {}
    for include in includes:
        include_path = Path(include).expanduser()
        if not include_path.is_absolute():
            include_path = path.parent / include_path
        logger.debug(f"Including {include_path.name}", included_from=str(path))
        merged = deep_merge(merged, load_yaml(include_path, visited))
    return deep_merge(merged, data)


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source reading every configuration layer.

    Layers, lowest priority first: packaged defaults, the user's
    gitrewrite.yaml, ./gitrewrite.yaml, then --include files from the
    command line.
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_file=None):
        includes = cli_includes(sys.argv)
        base = yaml_file or settings_cls.model_config.get("yaml_file")
        if includes:
            base_files = [] if base is None else (
                [base] if isinstance(base, (str, os.PathLike)) else list(base)
            )
            yaml_file = base_files + includes
        else:
            yaml_file = base
        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files, **_):
        candidates = [
            DEFAULTS_FILE,
            Path(user_config_dir("gitrewrite", appauthor=False)) / CONFIG_NAME,
        ]
        if files is not None:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            candidates.extend(Path(f).expanduser() for f in files)

        result: dict = {}
        for path in candidates:
            if not path.is_file():
                logger.debug(
                    "Configuration file not found (skipping)", file=str(path)
                )
                continue
            with logger.span("Configuration loading", file=str(path)):
                result = deep_merge(result, load_yaml(path))
        return result
