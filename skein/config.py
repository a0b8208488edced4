# Skein CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""config.py
Configuration loader for Skein applications."""
from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Any, Literal

import toml
import yaml
from pydantic import BaseModel, Field, field_validator

from skein.exceptions import InvalidCommandError
from skein.logger import logger


class SkeinConfig(BaseModel):
    """Skein application configuration model."""

    program: str | None = None
    description: str = ""
    log_mode: Literal["cli", "json"] | None = None
    log_file: str | None = None
    json_log_to_file: bool = False
    console_log_level: int = logging.WARNING
    configure_logging: bool = True
    disable_help: bool = False
    disable_completion: bool = False
    commands: list[str] = Field(default_factory=list)

    @field_validator("console_log_level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> int:
        if isinstance(value, str):
            level = logging.getLevelName(value.strip().upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {value}")
            return level
        return value

    @field_validator("commands")
    @classmethod
    def validate_command_paths(cls, value: list[str]) -> list[str]:
        for dotted_path in value:
            if "." not in dotted_path:
                raise ValueError(
                    f"Command path must be a dotted import path: {dotted_path!r}"
                )
        return value


def import_target(dotted_path: str) -> Any:
    """Import a command target from a dotted path like 'my.module.Deploy'."""
    module_path, _, attr = dotted_path.rpartition(".")
    if not module_path:
        raise InvalidCommandError(f"Invalid command path: {dotted_path}")
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as error:
        logger.error("Failed to import module '%s': %s", module_path, error)
        raise InvalidCommandError(f"Could not import '{dotted_path}': {error}") from error
    try:
        return getattr(module, attr)
    except AttributeError as error:
        logger.error(
            "Module '%s' does not have attribute '%s': %s", module_path, attr, error
        )
        raise InvalidCommandError(
            f"Module '{module_path}' has no attribute '{attr}'"
        ) from error


def find_config(cwd: Path | None = None) -> Path | None:
    """Return the first Skein configuration file found, if any."""
    base = cwd or Path.cwd()
    candidates = [
        base / "skein.yaml",
        base / "skein.toml",
        base / ".skein.yaml",
        base / ".skein.toml",
    ]
    if os.environ.get("SKEIN_CONFIG"):
        candidates.append(Path(os.environ["SKEIN_CONFIG"]))
    candidates.append(base / "pyproject.toml")
    for path in candidates:
        if not path.is_file():
            continue
        if path.name == "pyproject.toml":
            with path.open("r", encoding="UTF-8") as config_file:
                if "skein" not in toml.load(config_file).get("tool", {}):
                    continue
        return path
    return None


def load_config(file_path: Path | str) -> SkeinConfig:
    """
    Load Skein configuration from a YAML or TOML file.

    `pyproject.toml` is read from its `[tool.skein]` table.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the format is unsupported or the content is not a mapping.
        pydantic.ValidationError: If a value is invalid.
    """
    if isinstance(file_path, (str, Path)):
        path = Path(file_path)
    else:
        raise TypeError("file_path must be a string or Path object.")

    if not path.is_file():
        raise FileNotFoundError(f"No such config file: {file_path}")

    suffix = path.suffix
    with path.open("r", encoding="UTF-8") as config_file:
        if suffix in (".yaml", ".yml"):
            raw_config = yaml.safe_load(config_file)
        elif suffix == ".toml":
            raw_config = toml.load(config_file)
            if path.name == "pyproject.toml":
                raw_config = raw_config.get("tool", {}).get("skein", {})
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError(
            "Configuration file must contain a mapping.\n"
            "Example:\n"
            "program: 'tasks'\n"
            "commands:\n"
            "  - 'my_module.Deploy'"
        )

    logger.debug("Loaded config from %s", path)
    return SkeinConfig(**raw_config)
