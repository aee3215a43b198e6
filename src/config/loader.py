"""
Environment variable loader for the application configuration.

**Conceptual**: The Loader resolves each of the nine Config fields
independently, using the same four steps for every field:

  1. Read the named environment variable.
  2. If it is unset or empty, use the documented default (not an error).
  3. Otherwise convert it to the target type (enum membership, duration,
     host:port with a port range check).
  4. If conversion fails, record a ConfigValidationError and carry on with
     the next field.

After all fields are resolved, load_config() either returns a complete Config
or raises a single ConfigError listing every failure. A partially valid
Config is never returned, and defaults never replace a value that is present
but invalid.

**Side effects**: reads environment variables through an injectable
Environment (see src.utils.environment); nothing else.
"""

import logging
from datetime import timedelta
from typing import Callable, List, Mapping, Optional, TypeVar, Union

from src.config.errors import ConfigError, ConfigValidationError
from src.config.settings import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_LOG_OUTPUT,
    DEFAULT_SERVER_ADDRESS,
    DEFAULT_SERVER_IDLE_TIMEOUT,
    DEFAULT_SERVER_READ_HEADER_TIMEOUT,
    DEFAULT_SERVER_READ_TIMEOUT,
    DEFAULT_SERVER_SHUTDOWN_TIMEOUT,
    DEFAULT_SERVER_WRITE_TIMEOUT,
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
    ENV_LOG_OUTPUT,
    ENV_SERVER_ADDRESS,
    ENV_SERVER_IDLE_TIMEOUT,
    ENV_SERVER_READ_HEADER_TIMEOUT,
    ENV_SERVER_READ_TIMEOUT,
    ENV_SERVER_SHUTDOWN_TIMEOUT,
    ENV_SERVER_WRITE_TIMEOUT,
    Config,
    LogFormat,
    LogLevel,
    LogOutput,
    expected_values,
)
from src.utils.environment import Environment, as_environment
from src.utils.net import TCP_PORT_MAX, TCP_PORT_MIN, parse_server_address
from src.utils.time import parse_duration

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXPECTED_DURATION = 'a duration such as "5s", "1m30s" or "250ms"'
EXPECTED_ADDRESS = f'"host:port" with port in [{TCP_PORT_MIN}, {TCP_PORT_MAX}]'
EXPECTED_LOG_OUTPUT = "stdout, stderr or a file path"


class Loader:
    """
    Resolves Config fields from an environment, collecting every failure.

    A Loader is created for one load pass and then discarded. Each field
    method returns a usable value (the parsed override, or the default as a
    placeholder when the override is invalid), so resolution never stops
    early; error() reports whether any field failed.

    Usage example:
        >>> loader = Loader(StaticEnvironment({"LOG_LEVEL": "debug"}))
        >>> loader.log_level()
        <LogLevel.DEBUG: 'debug'>
        >>> loader.error() is None
        True
    """

    def __init__(self, env: Environment):
        self._env = env
        self._errors: List[ConfigValidationError] = []

    def log_level(self) -> LogLevel:
        return self._resolve(
            ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL, LogLevel.parse, expected_values(LogLevel)
        )

    def log_format(self) -> LogFormat:
        return self._resolve(
            ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT, LogFormat.parse, expected_values(LogFormat)
        )

    def log_output(self) -> LogOutput:
        return self._resolve(
            ENV_LOG_OUTPUT, DEFAULT_LOG_OUTPUT, LogOutput.parse, EXPECTED_LOG_OUTPUT
        )

    def server_address(self) -> str:
        return self._resolve(
            ENV_SERVER_ADDRESS, DEFAULT_SERVER_ADDRESS, _parse_address, EXPECTED_ADDRESS
        )

    def server_read_timeout(self) -> timedelta:
        return self._duration(ENV_SERVER_READ_TIMEOUT, DEFAULT_SERVER_READ_TIMEOUT)

    def server_read_header_timeout(self) -> timedelta:
        return self._duration(ENV_SERVER_READ_HEADER_TIMEOUT, DEFAULT_SERVER_READ_HEADER_TIMEOUT)

    def server_write_timeout(self) -> timedelta:
        return self._duration(ENV_SERVER_WRITE_TIMEOUT, DEFAULT_SERVER_WRITE_TIMEOUT)

    def server_idle_timeout(self) -> timedelta:
        return self._duration(ENV_SERVER_IDLE_TIMEOUT, DEFAULT_SERVER_IDLE_TIMEOUT)

    def server_shutdown_timeout(self) -> timedelta:
        return self._duration(ENV_SERVER_SHUTDOWN_TIMEOUT, DEFAULT_SERVER_SHUTDOWN_TIMEOUT)

    def error(self) -> Optional[ConfigError]:
        """Return one ConfigError joining all failures, or None if there were none."""
        if not self._errors:
            return None
        return ConfigError(self._errors)

    def raise_for_errors(self) -> None:
        """Raise the joined ConfigError if any field failed."""
        err = self.error()
        if err is not None:
            raise err

    def _duration(self, name: str, default: timedelta) -> timedelta:
        return self._resolve(name, default, _parse_timeout, EXPECTED_DURATION)

    def _resolve(self, name: str, default: T, parse: Callable[[str], T], expected: str) -> T:
        raw = self._env.get(name)
        if raw is None or not raw.strip():
            return default

        try:
            value = parse(raw)
        except ValueError as e:
            self._append_error(ConfigValidationError(name, raw, expected, str(e)))
            return default

        logger.debug("Using %s=%r from environment", name, raw)
        return value

    def _append_error(self, err: ConfigValidationError) -> None:
        logger.debug("Rejected %s", err)
        self._errors.append(err)


def _parse_address(raw: str) -> str:
    address = raw.strip()
    parse_server_address(address)
    return address


def _parse_timeout(raw: str) -> timedelta:
    value = parse_duration(raw)
    if value < timedelta(0):
        raise ValueError("timeout must not be negative")
    return value


def load_config(env: Union[Environment, Mapping[str, str], None] = None) -> Config:
    """
    Load and validate the application configuration.

    **Conceptual**: This is the single entry point the composition root calls
    at startup. It builds a fresh Loader, resolves all nine fields, and
    either returns the finished Config or raises every failure at once.

    Args:
        env: Where to read variables from. None means the real process
            environment; a dict or an Environment (e.g. StaticEnvironment)
            lets tests supply synthetic variables.

    Returns:
        Fully populated, validated Config.

    Raises:
        ConfigError: If one or more variables are invalid. The error lists
                    every invalid variable in field order.

    Usage example:
        >>> cfg = load_config({"SERVER_ADDRESS": ":9000"})
        >>> cfg.server_port
        9000
    """
    loader = Loader(as_environment(env))
    cfg = Config(
        log_level=loader.log_level(),
        log_format=loader.log_format(),
        log_output=loader.log_output(),
        server_address=loader.server_address(),
        server_read_timeout=loader.server_read_timeout(),
        server_read_header_timeout=loader.server_read_header_timeout(),
        server_write_timeout=loader.server_write_timeout(),
        server_idle_timeout=loader.server_idle_timeout(),
        server_shutdown_timeout=loader.server_shutdown_timeout(),
    )
    loader.raise_for_errors()
    return cfg


# Process-wide config for the composition root. load_config() never reads or
# writes this; tests should call load_config() directly or reset_config().
_default_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the process-wide Config, loading it from the environment on first use.

    Raises:
        ConfigError: If the environment holds invalid values. Nothing is
                    cached in that case, so a later call tries again.
    """
    global _default_config

    if _default_config is None:
        _default_config = load_config()
    return _default_config


def reset_config() -> None:
    """Clear the process-wide Config (for testing)."""
    global _default_config
    _default_config = None
