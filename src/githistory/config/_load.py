"""Configuration loading.

Configuration comes from an optional ``githistory.toml`` file followed by
``GITHISTORY_*`` environment overrides.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from githistory.config._loader import deep_merge, parse_env_vars, read_toml_file
from githistory.config._models import HistoryConfig
from githistory.exceptions import ConfigLoadError, ConfigValidationError

CONFIG_FILE_NAME: Final = "githistory.toml"


def find_config_file(start: Path) -> Path | None:
    """Find githistory.toml at the repository root above `start`.

    Walks up from `start` to the first directory containing ``.git`` and
    returns the config file there if it exists.

    Args:
        start: File or directory to search from.

    Returns:
        Path to the config file, or None if none was found.
    """
    current = start.resolve()
    if current.is_file():
        current = current.parent

    while True:
        if (current / ".git").exists():
            candidate = current / CONFIG_FILE_NAME
            return candidate if candidate.is_file() else None

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(
    path: Path | None = None,
    *,
    search_from: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> HistoryConfig:
    """Load configuration from file and environment.

    Args:
        path: Explicit config file path. Must exist when given.
        search_from: Directory used to discover githistory.toml when no
            explicit path is given.
        env: Environment mapping used for overrides. Defaults to os.environ.

    Returns:
        The validated configuration.

    Raises:
        ConfigLoadError: If an explicit file is missing or unparsable.
        ConfigValidationError: If a value fails validation.
    """
    data: dict[str, object] = {}
    source: str | None = None

    if path is not None:
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise ConfigLoadError(msg, path=path)
        data = read_toml_file(path)
        source = str(path)
    elif search_from is not None:
        discovered = find_config_file(search_from)
        if discovered is not None:
            data = read_toml_file(discovered)
            source = str(discovered)

    data = deep_merge(data, parse_env_vars(env))

    try:
        return HistoryConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"])
        msg = f"Invalid configuration value for {key}: {first['msg']}"
        raise ConfigValidationError(
            msg, key=key, value=first.get("input"), source=source
        ) from e
