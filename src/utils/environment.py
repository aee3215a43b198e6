"""
Environment variable abstractions for deterministic configuration tests.

This module provides a simple, testable way to read environment variables via
an environment object rather than calling os.getenv() directly. Tests can hand
the configuration loader a fixed set of variables without touching the real
process environment (and without leaking state between tests).
"""

import os
from typing import Mapping, Optional, Protocol, Union


class Environment(Protocol):
    """
    Abstract environment variable source protocol.

    **Conceptual**: An Environment is any object that can answer the question
    "what is the value of variable NAME?" By depending on this abstraction
    instead of os.environ, the configuration loader becomes testable: tests
    inject a StaticEnvironment, production passes a ProcessEnvironment.

    **Example**:
        def load(env: Environment):
            level = env.get("LOG_LEVEL")

        # In production:
        load(ProcessEnvironment())

        # In tests:
        load(StaticEnvironment({"LOG_LEVEL": "debug"}))
    """

    def get(self, name: str) -> Optional[str]:
        """
        Return the value of the named variable, or None when it is unset.
        """
        ...


class ProcessEnvironment:
    """
    Environment that reads the real process environment (os.environ).

    Values are read on every call, so this object holds no state of its own.
    """

    def get(self, name: str) -> Optional[str]:
        return os.environ.get(name)


class StaticEnvironment:
    """
    Environment backed by a fixed mapping (for tests and embedding).

    **Conceptual**: The mapping is copied at construction, so mutating the
    caller's dict afterwards does not change what this environment reports.

    **Usage**:
        env = StaticEnvironment({"SERVER_ADDRESS": ":9000"})
        env.get("SERVER_ADDRESS")  # ":9000"
        env.get("LOG_LEVEL")       # None
    """

    def __init__(self, variables: Optional[Mapping[str, str]] = None):
        self._variables = dict(variables or {})

    def get(self, name: str) -> Optional[str]:
        return self._variables.get(name)

    def __repr__(self) -> str:
        return f"StaticEnvironment({sorted(self._variables)})"


def get_process_environment() -> Environment:
    """Factory for the real process environment."""
    return ProcessEnvironment()


def get_static_environment(variables: Mapping[str, str]) -> Environment:
    """Factory for a fixed environment built from a mapping."""
    return StaticEnvironment(variables)


def as_environment(source: Union[Environment, Mapping[str, str], None]) -> Environment:
    """
    Coerce a loader argument into an Environment.

    Args:
        source: None (use the process environment), a plain mapping of
               variable names to values, or an existing Environment.

    Returns:
        An object satisfying the Environment protocol.

    Raises:
        TypeError: If source is none of the accepted kinds.
    """
    if source is None:
        return ProcessEnvironment()
    if isinstance(source, (ProcessEnvironment, StaticEnvironment)):
        return source
    if isinstance(source, Mapping):
        return StaticEnvironment(source)
    if callable(getattr(source, "get", None)):
        return source
    raise TypeError(
        f"Expected an Environment, a mapping or None, got: {type(source).__name__}"
    )
