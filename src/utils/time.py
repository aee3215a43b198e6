"""
Duration parsing and formatting for timeout settings.

This module converts compact duration strings such as "5s", "1m30s" or
"250ms" into datetime.timedelta values, and renders timedeltas back into the
same compact form for log output.

**Grammar**: an optional sign followed by one or more `<number><unit>` pairs.
Numbers are decimal and may carry a fraction ("1.5h", ".5s"). Units are:
  - ns (nanoseconds), us / µs / μs (microseconds), ms (milliseconds)
  - s (seconds), m (minutes), h (hours)
The bare string "0" is also accepted. A number without a unit ("30") is
rejected, because it is ambiguous whether seconds or milliseconds were meant.

**Precision**: timedelta resolves to microseconds, so nanosecond components
are rounded to the nearest microsecond.
"""

import re
from datetime import timedelta
from fractions import Fraction

# Nanoseconds per unit.
_UNIT_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5 micro sign
    "μs": 1_000,  # U+03BC greek small letter mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_SEGMENT = r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([-+]?)((?:{_SEGMENT})+)")
_SEGMENT_RE = re.compile(_SEGMENT)


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration string into a timedelta.

    Args:
        text: Duration string, e.g. "5s", "1m30s", "-1.5h", "300ms" or "0".

    Returns:
        The equivalent timedelta (rounded to microsecond resolution).

    Raises:
        ValueError: If text is empty, has no unit, uses an unknown unit, or is
                   too large to represent.

    Usage example:
        >>> parse_duration("1m30s")
        datetime.timedelta(seconds=90)
    """
    if text is None:
        raise ValueError("invalid duration: None")

    raw = text.strip()
    if raw in ("0", "+0", "-0"):
        return timedelta(0)

    match = _DURATION_RE.fullmatch(raw)
    if match is None:
        raise ValueError(f"invalid duration: {text!r}")

    sign, body = match.group(1), match.group(2)

    # Fraction keeps "0.1s" exact before the final rounding to microseconds.
    total_ns = Fraction(0)
    for number, unit in _SEGMENT_RE.findall(body):
        total_ns += Fraction(number) * _UNIT_NANOSECONDS[unit]

    if sign == "-":
        total_ns = -total_ns

    try:
        return timedelta(microseconds=round(total_ns / 1000))
    except OverflowError:
        raise ValueError(f"invalid duration: {text!r} is out of range")


def format_duration(value: timedelta) -> str:
    """
    Render a timedelta in compact duration form.

    Sub-second values use the largest exact unit ("250ms", "1500us"); longer
    values are written as hours, minutes and seconds ("1h0m0s", "1m30s",
    "2.5s"). The output is accepted by parse_duration().
    """
    total_us = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if total_us == 0:
        return "0s"

    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)

    if total_us < 1_000_000:
        if total_us % 1_000 == 0:
            return f"{sign}{total_us // 1_000}ms"
        return f"{sign}{total_us}us"

    hours, rest = divmod(total_us, 3600 * 1_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000)
    whole_seconds, micros = divmod(rest, 1_000_000)

    seconds = str(whole_seconds)
    if micros:
        seconds += "." + f"{micros:06d}".rstrip("0")

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"
