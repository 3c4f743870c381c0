"""
Small helpers shared across the monitoring server.

This module collects the address, URL and identifier helpers used when
talking to remote agents and when normalizing data pulled from them:
- URL construction for agent and control-agent endpoints
- IP address / prefix recognition and CIDR conversion
- MAC address and hexadecimal identifier formatting
"""

import ipaddress
import re
from datetime import datetime, timezone
from typing import Optional, Tuple

_MAC_PATTERN = re.compile(r"^[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2})*$")
_HEX_IDENTIFIER_PATTERN = re.compile(r"^[0-9A-Fa-f]{2}((\s*|:{0,2})[0-9A-Fa-f]{2})*$")


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def host_with_port_url(address: str, port: int) -> str:
    """
    Build the URL of a host listening on the given port.

    Args:
        address: Host name or IP address
        port: TCP port

    Returns:
        URL in the form ``http://address:port/``
    """
    if ":" in address and not address.startswith("["):
        # IPv6 literals must be bracketed inside URLs
        address = f"[{address}]"
    return f"http://{address}:{port}/"


def make_cidr(address: str) -> str:
    """
    Turn an IP address into CIDR notation.

    Addresses which already carry a prefix length are returned unchanged.

    Raises:
        ValueError: If the string is not a valid IP address
    """
    if "/" in address:
        return address
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        raise ValueError(f"provided string {address} is not a valid IP address")
    return f"{address}/{ip.max_prefixlen}"


def parse_ip(address: str) -> Tuple[str, bool, bool]:
    """
    Recognize whether a value is an IP address or a prefix.

    ``192.0.2.2/32`` is converted to ``192.0.2.2`` and ``2001:db8:1::/128``
    to ``2001:db8:1::``, while a real prefix such as ``2001:db8:1::/48`` is
    returned in its canonical network form.

    Args:
        address: Address or prefix in CIDR notation

    Returns:
        Tuple of (normalized value, is_prefix, is_valid)
    """
    if "/" not in address:
        return "", False, False
    try:
        interface = ipaddress.ip_interface(address)
    except ValueError:
        return "", False, False

    network = interface.network
    if network.prefixlen == network.max_prefixlen:
        return str(interface.ip), False, True
    return str(network), True, True


def is_hex_identifier(text: str) -> bool:
    """
    Check whether the text is an identifier made of hexadecimal digit pairs.

    Pairs may be separated by whitespace or up to two colons, e.g. ``010203``,
    ``01:02:03``, ``01::02::03`` or ``01 02 03``. Such values are DHCP client
    identifiers, DUIDs or MAC addresses.
    """
    return _HEX_IDENTIFIER_PATTERN.match(text.strip()) is not None


def format_mac_address(identifier: str) -> Optional[str]:
    """
    Format a string of hexadecimal digits as a colon separated MAC address.

    Args:
        identifier: Identifier such as ``010203040506`` or ``01 02 03``

    Returns:
        Formatted identifier, or None if the input is not a hex identifier
    """
    identifier = identifier.strip()
    if _MAC_PATTERN.match(identifier):
        return identifier
    if not is_hex_identifier(identifier):
        return None

    digits = re.sub(r"[\s:]", "", identifier)
    return ":".join(digits[i : i + 2] for i in range(0, len(digits), 2))
