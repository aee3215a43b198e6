"""
Tests for src/config/loader.py

These tests verify the per-field resolution algorithm (default when unset,
parse when set, collect failures without stopping) and the all-or-nothing
contract of load_config().

**Testing approach**: Every test passes a synthetic environment (a dict or a
StaticEnvironment) instead of mutating os.environ, so tests cannot leak
variables into each other. Only the get_config() tests touch the process
environment, through the clean_process_env fixture.
"""

import dataclasses
from datetime import timedelta

import pytest

from src.config.errors import ConfigError, ConfigValidationError
from src.config.loader import Loader, get_config, load_config, reset_config
from src.config.settings import (
    Config,
    LogFormat,
    LogLevel,
    LogOutput,
)
from src.utils.environment import StaticEnvironment


@pytest.fixture
def defaults():
    """The configuration expected when no variable is set."""
    return Config(
        log_level=LogLevel.INFO,
        log_format=LogFormat.TEXT,
        log_output=LogOutput.STDOUT,
        server_address="localhost:8080",
        server_read_timeout=timedelta(seconds=5),
        server_read_header_timeout=timedelta(seconds=2),
        server_write_timeout=timedelta(seconds=10),
        server_idle_timeout=timedelta(seconds=60),
        server_shutdown_timeout=timedelta(seconds=15),
    )


# ---------------------------------------------------------------------------
# Defaults and overrides
# ---------------------------------------------------------------------------

def test_all_unset_gives_documented_defaults(defaults):
    """Test that an empty environment yields exactly the documented defaults."""
    cfg = load_config({})

    assert cfg == defaults
    assert cfg == Config()


def test_empty_values_count_as_unset(defaults):
    """Test that empty and whitespace-only values fall back to defaults."""
    cfg = load_config({
        "LOG_LEVEL": "",
        "LOG_OUTPUT": "   ",
        "SERVER_ADDRESS": "",
        "SERVER_IDLE_TIMEOUT": "",
    })

    assert cfg == defaults


@pytest.mark.parametrize(
    "name, raw, field, expected",
    [
        ("LOG_LEVEL", "debug", "log_level", LogLevel.DEBUG),
        ("LOG_LEVEL", "warn", "log_level", LogLevel.WARN),
        ("LOG_FORMAT", "json", "log_format", LogFormat.JSON),
        ("LOG_OUTPUT", "stderr", "log_output", LogOutput.STDERR),
        ("LOG_OUTPUT", "/var/log/app.log", "log_output", LogOutput("/var/log/app.log")),
        ("SERVER_ADDRESS", "0.0.0.0:9000", "server_address", "0.0.0.0:9000"),
        ("SERVER_ADDRESS", ":3000", "server_address", ":3000"),
        ("SERVER_READ_TIMEOUT", "30s", "server_read_timeout", timedelta(seconds=30)),
        ("SERVER_READ_HEADER_TIMEOUT", "500ms", "server_read_header_timeout", timedelta(milliseconds=500)),
        ("SERVER_WRITE_TIMEOUT", "1m", "server_write_timeout", timedelta(minutes=1)),
        ("SERVER_IDLE_TIMEOUT", "2m30s", "server_idle_timeout", timedelta(seconds=150)),
        ("SERVER_SHUTDOWN_TIMEOUT", "1h", "server_shutdown_timeout", timedelta(hours=1)),
    ],
)
def test_single_override_changes_only_that_field(defaults, name, raw, field, expected):
    """Test that one valid override sets its field and leaves the rest at defaults."""
    cfg = load_config({name: raw})

    assert getattr(cfg, field) == expected
    for other in (f.name for f in dataclasses.fields(Config) if f.init):
        if other != field:
            assert getattr(cfg, other) == getattr(defaults, other), other


def test_read_timeout_five_seconds_is_exact():
    """Test that "5s" resolves to exactly five seconds."""
    cfg = load_config({"SERVER_READ_TIMEOUT": "5s"})

    assert cfg.server_read_timeout == timedelta(seconds=5)
    assert cfg.server_read_timeout.total_seconds() == 5.0


def test_enum_values_are_case_insensitive():
    """Test that enum matching ignores case and surrounding whitespace."""
    cfg = load_config({"LOG_LEVEL": " DEBUG ", "LOG_FORMAT": "Json", "LOG_OUTPUT": "STDERR"})

    assert cfg.log_level is LogLevel.DEBUG
    assert cfg.log_format is LogFormat.JSON
    assert cfg.log_output == LogOutput.STDERR


def test_accepts_static_environment_object():
    """Test that an Environment object works as well as a plain dict."""
    cfg = load_config(StaticEnvironment({"LOG_FORMAT": "json"}))

    assert cfg.log_format is LogFormat.JSON


def test_config_from_env_matches_load_config():
    """Test that Config.from_env() is an alias of load_config()."""
    env = {"SERVER_ADDRESS": "example.com:443", "LOG_LEVEL": "error"}

    assert Config.from_env(env) == load_config(env)


def test_loading_twice_is_idempotent():
    """Test that two loads of the same environment give equal configs."""
    first = load_config({})
    second = load_config({})

    assert first == second
    assert first is not second


# ---------------------------------------------------------------------------
# Validation failures
# ---------------------------------------------------------------------------

def test_invalid_log_level_names_variable_and_value():
    """Test that LOG_LEVEL=verbose fails and the message names both."""
    with pytest.raises(ConfigError) as exc_info:
        load_config({"LOG_LEVEL": "verbose"})

    message = str(exc_info.value)
    assert "LOG_LEVEL" in message
    assert "verbose" in message
    assert exc_info.value.names == ("LOG_LEVEL",)


def test_multiple_failures_are_all_reported():
    """Test that every invalid variable is reported, not just the first."""
    with pytest.raises(ConfigError) as exc_info:
        load_config({"LOG_LEVEL": "verbose", "SERVER_ADDRESS": "bad"})

    err = exc_info.value
    assert len(err) == 2
    assert err.names == ("LOG_LEVEL", "SERVER_ADDRESS")
    message = str(err)
    assert "verbose" in message
    assert "bad" in message


def test_failures_follow_field_resolution_order():
    """Test that joined failures keep field order regardless of dict order."""
    env = {
        "SERVER_SHUTDOWN_TIMEOUT": "never",
        "LOG_OUTPUT": "stdout",
        "SERVER_ADDRESS": "nope",
        "LOG_FORMAT": "xml",
    }

    with pytest.raises(ConfigError) as exc_info:
        load_config(env)

    assert exc_info.value.names == ("LOG_FORMAT", "SERVER_ADDRESS", "SERVER_SHUTDOWN_TIMEOUT")


@pytest.mark.parametrize("address", ["localhost:65536", "localhost:-1", ":99999"])
def test_port_out_of_range_fails(address):
    """Test that ports outside 0-65535 fail with a range error."""
    with pytest.raises(ConfigError) as exc_info:
        load_config({"SERVER_ADDRESS": address})

    failure = exc_info.value.errors[0]
    assert failure.name == "SERVER_ADDRESS"
    assert failure.value == address
    assert "out of range" in str(failure)


@pytest.mark.parametrize("address, port", [("localhost:0", 0), ("localhost:65535", 65535)])
def test_port_range_boundaries_succeed(address, port):
    """Test that the port range boundaries 0 and 65535 are accepted."""
    cfg = load_config({"SERVER_ADDRESS": address})

    assert cfg.server_address == address
    assert cfg.server_port == port


@pytest.mark.parametrize("address", ["bad", "localhost", "host:http", "::1:80", "[::1]"])
def test_malformed_address_fails(address):
    """Test that addresses without a numeric port are rejected."""
    with pytest.raises(ConfigError) as exc_info:
        load_config({"SERVER_ADDRESS": address})

    assert exc_info.value.names == ("SERVER_ADDRESS",)


def test_invalid_duration_names_variable_and_value():
    """Test that SERVER_READ_TIMEOUT=not-a-duration fails with context."""
    with pytest.raises(ConfigError) as exc_info:
        load_config({"SERVER_READ_TIMEOUT": "not-a-duration"})

    failure = exc_info.value.errors[0]
    assert failure.name == "SERVER_READ_TIMEOUT"
    assert failure.value == "not-a-duration"
    assert "SERVER_READ_TIMEOUT" in str(exc_info.value)
    assert "not-a-duration" in str(exc_info.value)


@pytest.mark.parametrize("raw", ["30", "5 s", "5sec", "-5s"])
def test_rejected_timeouts(raw):
    """Test that unit-less, unknown-unit and negative timeouts fail."""
    with pytest.raises(ConfigError) as exc_info:
        load_config({"SERVER_IDLE_TIMEOUT": raw})

    assert exc_info.value.names == ("SERVER_IDLE_TIMEOUT",)


def test_invalid_value_does_not_fall_back_to_default():
    """Test that a present-but-invalid value is an error, never a silent default."""
    with pytest.raises(ConfigError):
        load_config({"LOG_FORMAT": "yaml"})


def test_every_variable_invalid_reports_nine_failures():
    """Test that all nine fields are resolved even when each one fails."""
    env = {
        "LOG_LEVEL": "loud",
        "LOG_FORMAT": "xml",
        "SERVER_ADDRESS": "nowhere",
        "SERVER_READ_TIMEOUT": "x",
        "SERVER_READ_HEADER_TIMEOUT": "x",
        "SERVER_WRITE_TIMEOUT": "x",
        "SERVER_IDLE_TIMEOUT": "x",
        "SERVER_SHUTDOWN_TIMEOUT": "x",
    }

    with pytest.raises(ConfigError) as exc_info:
        load_config(env)

    # LOG_OUTPUT accepts any non-empty string, so eight of nine fail.
    assert len(exc_info.value) == 8
    assert all(isinstance(e, ConfigValidationError) for e in exc_info.value)


# ---------------------------------------------------------------------------
# Loader internals
# ---------------------------------------------------------------------------

def test_loader_collects_errors_and_returns_placeholder():
    """Test that a failing field returns its default and records one error."""
    loader = Loader(StaticEnvironment({"LOG_LEVEL": "chatty"}))

    assert loader.log_level() is LogLevel.INFO
    err = loader.error()
    assert isinstance(err, ConfigError)
    assert err.names == ("LOG_LEVEL",)


def test_loader_without_failures_has_no_error():
    """Test that error() is None and raise_for_errors() is a no-op when valid."""
    loader = Loader(StaticEnvironment({"LOG_LEVEL": "debug"}))

    assert loader.log_level() is LogLevel.DEBUG
    assert loader.error() is None
    loader.raise_for_errors()


def test_loader_logs_each_failure(caplog):
    """Test that each invalid variable is logged at DEBUG."""
    loader = Loader(StaticEnvironment({"LOG_FORMAT": "xml"}))

    with caplog.at_level("DEBUG", logger="src.config.loader"):
        loader.log_format()

    assert any("LOG_FORMAT" in record.getMessage() for record in caplog.records)


# ---------------------------------------------------------------------------
# Process-wide config
# ---------------------------------------------------------------------------

def test_get_config_reads_process_environment(clean_process_env):
    """Test that get_config() loads from os.environ and caches the result."""
    clean_process_env.setenv("LOG_LEVEL", "debug")

    first = get_config()
    clean_process_env.setenv("LOG_LEVEL", "error")
    second = get_config()

    assert first.log_level is LogLevel.DEBUG
    assert second is first


def test_reset_config_forces_reload(clean_process_env):
    """Test that reset_config() makes get_config() read the environment again."""
    clean_process_env.setenv("LOG_FORMAT", "json")
    assert get_config().log_format is LogFormat.JSON

    clean_process_env.setenv("LOG_FORMAT", "text")
    reset_config()

    assert get_config().log_format is LogFormat.TEXT


def test_get_config_does_not_cache_failures(clean_process_env):
    """Test that a failed load is not cached."""
    clean_process_env.setenv("SERVER_ADDRESS", "bad")
    with pytest.raises(ConfigError):
        get_config()

    clean_process_env.delenv("SERVER_ADDRESS")

    assert get_config().server_address == "localhost:8080"
