"""githistory configuration.

Example:
    >>> from githistory.config import load_config
    >>> config = load_config()
    >>> config.page_size
    50
"""

from githistory.config._load import CONFIG_FILE_NAME, find_config_file, load_config
from githistory.config._models import (
    HistoryConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)
from githistory.exceptions import ConfigError, ConfigLoadError, ConfigValidationError

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "HistoryConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "find_config_file",
    "load_config",
]
