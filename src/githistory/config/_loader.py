"""Low-level configuration readers.

TOML parsing, dictionary merging and environment variable parsing used by
load_config().
"""

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from githistory.exceptions import ConfigLoadError

ENV_PREFIX = "GITHISTORY_"


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(msg, path=path) from e


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Deep merge two configuration dictionaries.

    Dictionaries are merged recursively; any other value in `override`
    replaces the value in `base`. Neither input is modified.

    Args:
        base: Base configuration (lower precedence).
        override: Override configuration (higher precedence).

    Returns:
        Merged configuration dictionary.
    """
    result = dict(base)
    for key, value in override.items():
        existing = result.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            result[key] = deep_merge(existing, value)  # pyright: ignore[reportUnknownArgumentType]
        else:
            result[key] = value
    return result


def _parse_env_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Parse environment variable value with type inference.

    Args:
        value: The raw string value from the environment variable.

    Returns:
        bool for true/false, int or float for numerics, otherwise the string.
    """
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def parse_env_vars(
    env: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Parse environment variables into a config dictionary.

    Args:
        env: Environment mapping. Defaults to os.environ.
        prefix: Environment variable prefix.

    Returns:
        Dictionary of parsed config values with nested structure.

    Environment variable naming:
        - Add prefix (GITHISTORY_)
        - Convert to uppercase
        - Replace dots with double underscores
        - Example: logging.level -> GITHISTORY_LOGGING__LEVEL
    """
    source = os.environ if env is None else env
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

    for key, value in source.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix) :]
        if not config_key:
            continue

        parts = config_key.lower().split("__")
        target = result
        for part in parts[:-1]:
            nested = target.setdefault(part, {})
            if not isinstance(nested, dict):
                break
            target = nested  # pyright: ignore[reportUnknownVariableType]
        else:
            target[parts[-1]] = _parse_env_value(value)

    return result
