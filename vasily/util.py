"""Helpers shared by the networking code: IP versions, addresses and echo IDs."""

from __future__ import annotations

import ipaddress
import random
import socket
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeVar, Union

T = TypeVar("T")

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

NUM_SEQUENCE_NOS = 1 << 16

# IANA protocol numbers.
IPPROTO_IP = 0
IPPROTO_ICMP = 1
IPPROTO_UDP = 17
IPPROTO_IPV6 = 41
IPPROTO_ICMPV6 = 58


class IPVersion(IntEnum):
    """The version of IP to use."""

    IPv4 = 4
    IPv6 = 6

    def __str__(self) -> str:
        return self.name

    def address_family(self) -> int:
        """Socket domain for this IP version."""
        return choose(self, socket.AF_INET, socket.AF_INET6)

    def ip_proto_num(self) -> int:
        """Socket option level for this IP version."""
        return choose(self, IPPROTO_IP, IPPROTO_IPV6)

    def icmp_proto_num(self) -> int:
        """Protocol number of ICMPv4 or ICMPv6 as appropriate."""
        return choose(self, IPPROTO_ICMP, IPPROTO_ICMPV6)

    def ttl_sock_opt(self) -> int:
        """Socket option for accessing the time to live."""
        return choose(self, socket.IP_TTL, socket.IPV6_UNICAST_HOPS)


def choose(version, val4: T, val6: T) -> T:
    """Pick between values for IPv4 or IPv6."""
    try:
        version = IPVersion(version)
    except ValueError:
        raise ValueError(f"invalid IP version: {version!r}") from None
    return val4 if version is IPVersion.IPv4 else val6


@dataclass(frozen=True)
class Address:
    """A network address: an IP and an optional port."""

    ip: IPAddress | None = None
    port: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.ip, (str, bytes, int)):
            object.__setattr__(self, "ip", ipaddress.ip_address(self.ip))

    def __str__(self) -> str:
        if self.ip is None:
            host = ""
        elif self.ip.version == 6:
            host = f"[{self.ip}]"
        else:
            host = str(self.ip)
        return f"{host}:{self.port}"


def addr_version(addr: Address | None) -> IPVersion:
    """Return the IP version of an address; addresses without an IPv4 IP are IPv6."""
    ip = addr.ip if addr is not None else None
    if isinstance(ip, ipaddress.IPv4Address):
        return IPVersion.IPv4
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return IPVersion.IPv4
    return IPVersion.IPv6


class IDGenerator:
    """Thread-safe generator of ICMP echo IDs."""

    def __init__(self, start: int | None = None) -> None:
        self._lock = threading.Lock()
        self._next_id = random.randrange(NUM_SEQUENCE_NOS) if start is None else start

    def gen_id(self) -> int:
        """Return the next ID."""
        with self._lock:
            current = self._next_id
            self._next_id += 1
            return current


ID_GENERATOR = IDGenerator()


def gen_id() -> int:
    """Return an echo ID unique within this process."""
    return ID_GENERATOR.gen_id()