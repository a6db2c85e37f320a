from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from flatten_remote.config import (
    DEFAULT_BINARY_EXTENSIONS,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_TIMEOUT,
    GITHUB_API_BASE_URL,
)
from flatten_remote.exceptions import ConfigError
from flatten_remote.filters import PatternFilter

ENV_FILE = find_dotenv(usecwd=True)

CONFIG_KEYS = frozenset({"ignore_patterns", "binary_extensions", "max_depth", "api_base_url", "timeout"})


def load_env() -> None:
    """Load a `.env` file found from the working directory, without overriding the environment."""
    if ENV_FILE:
        load_dotenv(ENV_FILE, override=False)


def _env_token() -> str | None:
    return os.getenv("GITHUB_TOKEN") or None


def _env_api_base_url() -> str:
    return os.getenv("GITHUB_API_URL") or GITHUB_API_BASE_URL


class Settings(BaseModel):
    """Configuration settings for one export."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str = Field(..., description="GitHub repository URL.")
    token: str | None = Field(default_factory=_env_token, description="Access token.")
    branch: str | None = Field(default=None, description="Branch override.")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0, description="Deepest level listed.")
    output: Path | None = Field(default=None, description="Output file, stdout when unset.")
    log_file: str = Field(default="", description="Log file path.")
    verbose: bool = Field(default=False, description="Debug logging.")
    config: Path | None = Field(default=None, description="YAML configuration file.")

    ignore_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        description="Substrings excluding items from traversal.",
    )
    binary_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BINARY_EXTENSIONS),
        description="Extensions whose content is not fetched.",
    )
    api_base_url: str = Field(default_factory=_env_api_base_url, description="GitHub API root.")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="HTTP timeout in seconds.")

    def pattern_filter(self) -> PatternFilter:
        return PatternFilter(
            ignore_patterns=tuple(self.ignore_patterns),
            binary_extensions=tuple(self.binary_extensions),
        )


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML configuration file.

    Only the keys in `CONFIG_KEYS` are accepted. `ignore_patterns` and
    `binary_extensions` replace the built-in lists.

    Args:
        path (Path): the YAML file

    Raises:
        ConfigError: if the file cannot be read, is not a mapping or has unknown keys

    Returns:
        dict[str, Any]: the configuration values
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(path=path, message=f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(path=path, message=f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(path=path, message=f"Config file {path} must contain a mapping.")
    unknown = sorted(set(data) - CONFIG_KEYS)
    if unknown:
        raise ConfigError(path=path, message=f"Unknown config keys in {path}: {', '.join(map(str, unknown))}")
    return data


def build_settings(values: dict[str, Any]) -> Settings:
    """Merge command-line values with the optional config file.

    Precedence: explicit command-line values, then the config file, then the
    defaults. `extra_ignore` and `extra_binary` are appended to the resulting
    pattern lists.

    Args:
        values (dict[str, Any]): parsed arguments; None means "not given"

    Raises:
        ConfigError: if the config file is invalid or the merged values fail validation

    Returns:
        Settings: the settings for the export
    """
    cli = dict(values)
    extra_ignore = list(cli.pop("extra_ignore", None) or [])
    extra_binary = list(cli.pop("extra_binary", None) or [])

    merged: dict[str, Any] = {}
    config_path = cli.get("config")
    if config_path:
        merged.update(load_config_file(Path(config_path)))
    merged.update({k: v for k, v in cli.items() if v is not None})

    try:
        settings = Settings(**merged)
    except ValidationError as e:
        raise ConfigError(path=Path(config_path or "."), message=f"Invalid settings: {e}") from e
    if extra_ignore or extra_binary:
        settings = settings.model_copy(
            update={
                "ignore_patterns": [*settings.ignore_patterns, *extra_ignore],
                "binary_extensions": [*settings.binary_extensions, *extra_binary],
            },
        )
    return settings
