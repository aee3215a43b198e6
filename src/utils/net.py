"""
Network address helpers for the server address setting.

Addresses take the form "host:port". The host may be a name, an IPv4
address, a bracketed IPv6 address ("[::1]:8080") or empty (":3000", meaning
all interfaces). The port must be a decimal number in the TCP port range.
"""

from typing import Tuple

# TCP port range accepted for the listening address (0 lets the OS pick).
TCP_PORT_MIN = 0
TCP_PORT_MAX = 65535


class AddressError(ValueError):
    """Raised when an address is not of the form host:port."""
    pass


class PortRangeError(AddressError):
    """Raised when an address port lies outside [TCP_PORT_MIN, TCP_PORT_MAX]."""
    pass


def split_host_port(address: str) -> Tuple[str, str]:
    """
    Split "host:port" into its host and port parts.

    Brackets around an IPv6 host are removed. The port is returned as text;
    see parse_server_address() for numeric validation.

    Raises:
        AddressError: If the port is missing, the host contains unbracketed
                     colons, or brackets are unbalanced.
    """
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise AddressError(f"missing ']' in address {address!r}")
        if end + 1 == len(address):
            raise AddressError(f"missing port in address {address!r}")
        if address[end + 1] != ":":
            raise AddressError(f"unexpected text after ']' in address {address!r}")
        host = address[1:end]
        port = address[end + 2:]
        if "[" in host or "]" in port or "[" in port:
            raise AddressError(f"unexpected bracket in address {address!r}")
        return host, port

    sep = address.rfind(":")
    if sep < 0:
        raise AddressError(f"missing port in address {address!r}")

    host = address[:sep]
    port = address[sep + 1:]
    if ":" in host:
        raise AddressError(f"too many colons in address {address!r}")
    if "[" in address or "]" in address:
        raise AddressError(f"unexpected bracket in address {address!r}")
    return host, port


def parse_port(port: str) -> int:
    """
    Convert port text to an int and check it against the TCP port range.

    Raises:
        AddressError: If the text is not a (possibly signed) decimal integer.
        PortRangeError: If the number is outside [TCP_PORT_MIN, TCP_PORT_MAX].
    """
    digits = port[1:] if port[:1] in ("-", "+") else port
    if not digits or not digits.isascii() or not digits.isdigit():
        raise AddressError(f"port {port!r} is not a number")

    number = int(port)
    if number < TCP_PORT_MIN or number > TCP_PORT_MAX:
        raise PortRangeError(
            f"port {number} is out of range [{TCP_PORT_MIN}, {TCP_PORT_MAX}]"
        )
    return number


def parse_server_address(address: str) -> Tuple[str, int]:
    """
    Validate a listening address and return its (host, port) pair.

    Usage example:
        >>> parse_server_address("localhost:8080")
        ('localhost', 8080)
        >>> parse_server_address("[::1]:0")
        ('::1', 0)
        >>> parse_server_address(":65536")
        Traceback (most recent call last):
        ...
        src.utils.net.PortRangeError: port 65536 is out of range [0, 65535]
    """
    host, port = split_host_port(address)
    return host, parse_port(port)
