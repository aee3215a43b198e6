"""
Configuration error types.

**Conceptual**: Configuration loading has a single kind of failure, a
variable that is present but invalid. Each failure is captured as a
ConfigValidationError naming the variable, the raw value and the format that
was expected. The loader keeps going after a failure and finally raises one
ConfigError bundling every failure, so an operator sees all bad settings at
once instead of fixing them one restart at a time.
"""

from typing import Iterable, Iterator, Optional, Tuple


class ConfigValidationError(ValueError):
    """
    Raised (or collected) when one environment variable holds an invalid value.

    Attributes:
        name: Environment variable name, e.g. "LOG_LEVEL".
        value: The raw value that failed to parse.
        expected: Human-readable description of the accepted format.
        reason: Optional detail from the underlying parser.
    """

    def __init__(self, name: str, value: str, expected: str, reason: Optional[str] = None):
        self.name = name
        self.value = value
        self.expected = expected
        self.reason = reason
        message = f'invalid value "{value}" for {name}: expected {expected}'
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ConfigError(ValueError):
    """
    Raised when the configuration cannot be loaded.

    Holds every ConfigValidationError from one load pass, in the order the
    fields were resolved. The message lists one failure per line.

    Usage example:
        >>> try:
        ...     load_config({"LOG_LEVEL": "verbose", "SERVER_ADDRESS": "bad"})
        ... except ConfigError as e:
        ...     for failure in e:
        ...         print(failure.name)
        LOG_LEVEL
        SERVER_ADDRESS
    """

    def __init__(self, errors: Iterable[ConfigValidationError]):
        self.errors: Tuple[ConfigValidationError, ...] = tuple(errors)
        if not self.errors:
            raise ValueError("ConfigError requires at least one validation error")
        lines = "\n".join(str(error) for error in self.errors)
        super().__init__(f"failed to load config:\n{lines}")

    @property
    def names(self) -> Tuple[str, ...]:
        """Variable names that failed, in resolution order."""
        return tuple(error.name for error in self.errors)

    def __iter__(self) -> Iterator[ConfigValidationError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)
