"""
Logging setup driven by the application Config.

The loader only decides *what* the logging settings are; this module applies
them to the stdlib logging module at startup: level, text or JSON lines, and
a handler on stdout, stderr or a log file.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from src.config.settings import Config, LogFormat, LogStream

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def build_handler(config: Config) -> logging.Handler:
    """
    Create the handler for config.log_output with the configured formatter.

    Raises:
        OSError: If the log file cannot be opened.
    """
    stream = config.log_output.stream
    if stream is LogStream.STDOUT:
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
    elif stream is LogStream.STDERR:
        handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.FileHandler(config.log_output.target, encoding="utf-8")

    if config.log_format is LogFormat.JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    return handler


def configure_logging(config: Config) -> logging.Handler:
    """
    Replace the root logger's handlers with one built from config.

    Replaced handlers are closed, so a file opened by an earlier call is
    released.

    Returns:
        The installed handler (callers may close it on shutdown).
    """
    handler = build_handler(config)
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)
    root.setLevel(config.log_level.to_logging_level())
    return handler
