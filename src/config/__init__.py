"""
Application configuration: typed settings loaded from environment variables.

Import from here rather than from the submodules:

    from src.config import ConfigError, load_config

    try:
        cfg = load_config()
    except ConfigError as e:
        ...  # report every invalid variable and abort startup
"""

from src.config.errors import ConfigError, ConfigValidationError
from src.config.loader import Loader, get_config, load_config, reset_config
from src.config.settings import (
    TCP_PORT_MAX,
    TCP_PORT_MIN,
    Config,
    LogFormat,
    LogLevel,
    LogOutput,
    LogStream,
)
