"""Local interface addresses via psutil, so senders know where to point their appenders."""

from __future__ import annotations

import ipaddress
import logging
import socket
from dataclasses import dataclass

import psutil

logger = logging.getLogger("logscanner.netinfo")

_FAMILIES: dict[int, str] = {
    socket.AF_INET: "IPv4",
    socket.AF_INET6: "IPv6",
}


@dataclass(frozen=True, slots=True)
class InterfaceAddress:
    """One address bound to a local network interface."""

    interface: str
    address: str
    family: str


def _is_loopback(address: str) -> bool:
    try:
        return ipaddress.ip_address(address.split("%", 1)[0]).is_loopback
    except ValueError:
        return False


def local_addresses() -> list[InterfaceAddress]:
    """Non-loopback IPv4/IPv6 addresses, grouped by interface name."""
    try:
        interfaces = psutil.net_if_addrs()
    except (psutil.AccessDenied, OSError):
        logger.warning("Cannot enumerate network interfaces")
        return []

    result: list[InterfaceAddress] = []
    for name in sorted(interfaces):
        for addr in interfaces[name]:
            family = _FAMILIES.get(addr.family)
            if family is None or _is_loopback(addr.address):
                continue
            result.append(InterfaceAddress(interface=name, address=addr.address, family=family))
    return result
