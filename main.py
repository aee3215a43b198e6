"""
server_config – Main entry point.

Loads the application configuration from the environment (seeded from a
.env file in the working directory if one exists), installs logging from it,
and logs the resolved settings. Exits with status 1 and a list of every
invalid variable when the configuration does not validate, or when the log
output file cannot be opened.
"""

import logging
import sys

from dotenv import find_dotenv, load_dotenv

from src.config import ConfigError, load_config
from src.utils.log import configure_logging
from src.utils.time import format_duration

logger = logging.getLogger(__name__)


def main() -> int:
    """Load, validate and report the configuration; return the exit status."""
    # Real environment variables win over .env entries.
    load_dotenv(find_dotenv(usecwd=True), override=False)

    try:
        cfg = load_config()
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 1

    try:
        configure_logging(cfg)
    except OSError as e:
        print(f'cannot open log output "{cfg.log_output}": {e}', file=sys.stderr)
        return 1

    logger.info(
        "Configuration loaded: log_level=%s log_format=%s log_output=%s",
        cfg.log_level, cfg.log_format, cfg.log_output,
    )
    logger.info(
        "Server address=%s read_timeout=%s read_header_timeout=%s "
        "write_timeout=%s idle_timeout=%s shutdown_timeout=%s",
        cfg.server_address,
        format_duration(cfg.server_read_timeout),
        format_duration(cfg.server_read_header_timeout),
        format_duration(cfg.server_write_timeout),
        format_duration(cfg.server_idle_timeout),
        format_duration(cfg.server_shutdown_timeout),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
