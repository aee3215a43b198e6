"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import src...' works, and
provides shared fixtures for configuration tests.
"""
import logging
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.config.settings import (  # noqa: E402
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
    ENV_LOG_OUTPUT,
    ENV_SERVER_ADDRESS,
    ENV_SERVER_IDLE_TIMEOUT,
    ENV_SERVER_READ_HEADER_TIMEOUT,
    ENV_SERVER_READ_TIMEOUT,
    ENV_SERVER_SHUTDOWN_TIMEOUT,
    ENV_SERVER_WRITE_TIMEOUT,
)
from src.config.loader import reset_config  # noqa: E402

ALL_CONFIG_VARIABLES = (
    ENV_LOG_LEVEL,
    ENV_LOG_FORMAT,
    ENV_LOG_OUTPUT,
    ENV_SERVER_ADDRESS,
    ENV_SERVER_READ_TIMEOUT,
    ENV_SERVER_READ_HEADER_TIMEOUT,
    ENV_SERVER_WRITE_TIMEOUT,
    ENV_SERVER_IDLE_TIMEOUT,
    ENV_SERVER_SHUTDOWN_TIMEOUT,
)


@pytest.fixture
def clean_process_env(monkeypatch):
    """
    Remove every configuration variable from the real process environment.

    Only needed by tests that exercise the os.environ path; everything else
    passes a StaticEnvironment or a dict to load_config().
    """
    for name in ALL_CONFIG_VARIABLES:
        # setenv first so undo also removes values written behind monkeypatch's back
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    reset_config()
    yield monkeypatch
    reset_config()


@pytest.fixture
def preserved_root_logger():
    """
    Yield the root logger and put its handlers and level back afterwards.

    For tests that call configure_logging() (directly or through main()),
    which replaces the root logger's handlers.
    """
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
