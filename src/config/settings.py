"""
Configuration settings for the HTTP server application.

**Conceptual**: This module defines the strongly-typed configuration object
consumed by the rest of the application: how to log (level, format, output)
and how the HTTP server behaves (listen address and timeouts). Values come
from environment variables and are validated at startup by
src.config.loader, so a bad setting stops the process before anything starts
serving.

**Why frozen dataclasses and enums?**
  - Immutable: a Config never changes after construction, so any number of
    request handlers can read it without locking.
  - Closed value sets: LogLevel / LogFormat are enums with one parse()
    function each, instead of string comparisons spread across call sites.
  - Defaults live in one place (the DEFAULT_* constants below), and
    Config() with no arguments is exactly the default configuration.

**Environment variables**:

  | Variable                   | Format                          | Default        |
  |----------------------------|---------------------------------|----------------|
  | LOG_LEVEL                  | debug / info / warn / error     | info           |
  | LOG_FORMAT                 | text / json                     | text           |
  | LOG_OUTPUT                 | stdout / stderr / a file path   | stdout         |
  | SERVER_ADDRESS             | host:port, port 0-65535         | localhost:8080 |
  | SERVER_READ_TIMEOUT        | duration ("5s", "1m")           | 5s             |
  | SERVER_READ_HEADER_TIMEOUT | duration                        | 2s             |
  | SERVER_WRITE_TIMEOUT       | duration                        | 10s            |
  | SERVER_IDLE_TIMEOUT        | duration                        | 60s            |
  | SERVER_SHUTDOWN_TIMEOUT    | duration                        | 15s            |
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import ClassVar, Optional

from src.utils.net import TCP_PORT_MAX, TCP_PORT_MIN, parse_server_address


class LogLevel(str, Enum):
    """Severity threshold for log records."""

    DEBUG = "debug"  # detailed information for development and debugging
    INFO = "info"  # general information about normal operation
    WARN = "warn"  # potentially harmful or unexpected situations
    ERROR = "error"  # failures that need immediate attention

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> "LogLevel":
        """
        Validate membership and return the matching LogLevel.

        Matching ignores case and surrounding whitespace.

        Raises:
            ValueError: If raw is not one of debug, info, warn, error.
        """
        return _parse_member(cls, raw)

    def to_logging_level(self) -> int:
        """Map to the numeric level used by the stdlib logging module."""
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LogFormat(str, Enum):
    """Encoding style of log records."""

    TEXT = "text"  # human-readable lines
    JSON = "json"  # one JSON object per line

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> "LogFormat":
        """
        Validate membership and return the matching LogFormat.

        Raises:
            ValueError: If raw is not text or json.
        """
        return _parse_member(cls, raw)


class LogStream(str, Enum):
    """Standard streams a log output can name."""

    STDOUT = "stdout"
    STDERR = "stderr"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LogOutput:
    """
    Destination of log records: a standard stream or a file path.

    **Conceptual**: This is a two-variant type. Either `target` is one of the
    LogStream names ("stdout", "stderr"), or it is any other non-empty string,
    which is treated as a file path. Callers branch on `stream` / `is_file`
    rather than comparing strings.

    Attributes:
        target: "stdout", "stderr" or a file path.
    """

    target: str

    STDOUT: ClassVar["LogOutput"]
    STDERR: ClassVar["LogOutput"]

    def __post_init__(self):
        if not self.target:
            raise ValueError("LogOutput target must be a non-empty string")

    def __str__(self) -> str:
        return self.target

    @property
    def stream(self) -> Optional[LogStream]:
        """The named stream, or None when the output is a file."""
        try:
            return LogStream(self.target)
        except ValueError:
            return None

    @property
    def is_file(self) -> bool:
        return self.stream is None

    @classmethod
    def parse(cls, raw: str) -> "LogOutput":
        """
        Build a LogOutput from an environment value.

        Stream names match case-insensitively; anything else is kept verbatim
        (after trimming whitespace) as a file path.

        Raises:
            ValueError: If raw is empty or whitespace-only.
        """
        value = raw.strip()
        if not value:
            raise ValueError("log output must not be empty")
        if value.lower() in _STREAM_NAMES:
            return cls(value.lower())
        return cls(value)


_STREAM_NAMES = frozenset(stream.value for stream in LogStream)

LogOutput.STDOUT = LogOutput(LogStream.STDOUT.value)
LogOutput.STDERR = LogOutput(LogStream.STDERR.value)


def _parse_member(enum_cls, raw: str):
    value = raw.strip().lower()
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"{raw!r} is not a valid {enum_cls.__name__}")


def expected_values(enum_cls) -> str:
    """Describe an enum's accepted values for error messages ("one of a, b")."""
    return "one of " + ", ".join(member.value for member in enum_cls)


# Environment variable names.
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_FORMAT = "LOG_FORMAT"
ENV_LOG_OUTPUT = "LOG_OUTPUT"
ENV_SERVER_ADDRESS = "SERVER_ADDRESS"
ENV_SERVER_READ_TIMEOUT = "SERVER_READ_TIMEOUT"
ENV_SERVER_READ_HEADER_TIMEOUT = "SERVER_READ_HEADER_TIMEOUT"
ENV_SERVER_WRITE_TIMEOUT = "SERVER_WRITE_TIMEOUT"
ENV_SERVER_IDLE_TIMEOUT = "SERVER_IDLE_TIMEOUT"
ENV_SERVER_SHUTDOWN_TIMEOUT = "SERVER_SHUTDOWN_TIMEOUT"

# Fallbacks used when the matching variable is unset or empty.
DEFAULT_LOG_LEVEL = LogLevel.INFO
DEFAULT_LOG_FORMAT = LogFormat.TEXT
DEFAULT_LOG_OUTPUT = LogOutput.STDOUT
DEFAULT_SERVER_ADDRESS = "localhost:8080"
DEFAULT_SERVER_READ_TIMEOUT = timedelta(seconds=5)
DEFAULT_SERVER_READ_HEADER_TIMEOUT = timedelta(seconds=2)
DEFAULT_SERVER_WRITE_TIMEOUT = timedelta(seconds=10)
DEFAULT_SERVER_IDLE_TIMEOUT = timedelta(seconds=60)
DEFAULT_SERVER_SHUTDOWN_TIMEOUT = timedelta(seconds=15)


@dataclass(frozen=True)
class Config:
    """
    Immutable application configuration.

    **Conceptual**: Created once at startup by load_config() and then shared
    read-only with every consumer (logging setup, HTTP server, workers).
    Every field holds an immutable value (enum, str, timedelta), so reading
    a field never hands out something the reader could mutate. Assigning to a
    field raises dataclasses.FrozenInstanceError.

    server_address is validated on construction, so a hand-built
    Config(server_address="bad") raises AddressError (a ValueError) just like
    an invalid SERVER_ADDRESS does in load_config().

    Attributes:
        log_level: Minimum severity of emitted log records.
        log_format: Text or JSON log lines.
        log_output: stdout, stderr or a log file path.
        server_address: Listen address as given ("host:port").
        server_read_timeout: Max time to read a whole request, body included.
        server_read_header_timeout: Max time to read request headers.
        server_write_timeout: Max time to write a response.
        server_idle_timeout: Max keep-alive idle time between requests.
        server_shutdown_timeout: Grace period for in-flight requests on shutdown.
    """

    log_level: LogLevel = DEFAULT_LOG_LEVEL
    log_format: LogFormat = DEFAULT_LOG_FORMAT
    log_output: LogOutput = DEFAULT_LOG_OUTPUT
    server_address: str = DEFAULT_SERVER_ADDRESS
    server_read_timeout: timedelta = DEFAULT_SERVER_READ_TIMEOUT
    server_read_header_timeout: timedelta = DEFAULT_SERVER_READ_HEADER_TIMEOUT
    server_write_timeout: timedelta = DEFAULT_SERVER_WRITE_TIMEOUT
    server_idle_timeout: timedelta = DEFAULT_SERVER_IDLE_TIMEOUT
    server_shutdown_timeout: timedelta = DEFAULT_SERVER_SHUTDOWN_TIMEOUT

    # Parsed once from server_address in __post_init__.
    _server_host: str = field(init=False, repr=False, compare=False)
    _server_port: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        host, port = parse_server_address(self.server_address)
        object.__setattr__(self, "_server_host", host)
        object.__setattr__(self, "_server_port", port)

    @property
    def server_host(self) -> str:
        """Host part of server_address ("" means all interfaces)."""
        return self._server_host

    @property
    def server_port(self) -> int:
        """Port part of server_address."""
        return self._server_port

    @classmethod
    def from_env(cls, env=None) -> "Config":
        """
        Load the configuration from environment variables.

        Same as src.config.loader.load_config(); see there for details.
        """
        # Imported here because the loader module builds on this one.
        from src.config.loader import load_config

        return load_config(env)
