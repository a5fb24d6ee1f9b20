"""UDP header encoding and decoding."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass

HEADER_LEN = 8

_HEADER = struct.Struct("!HHHH")


class Checksum:
    """Internet checksum accumulator."""

    def __init__(self) -> None:
        self.value = 0

    def add_bytes(self, data: bytes) -> None:
        """Add bytes as big-endian 16-bit words, padding an odd length with zero."""
        data = bytes(data)
        if len(data) % 2:
            data += b"\x00"
        self.value += sum(struct.unpack(f"!{len(data) // 2}H", data))

    def add_uint16(self, value: int) -> None:
        self.value += value & 0xFFFF

    def add_uint32(self, value: int) -> None:
        value &= 0xFFFFFFFF
        self.value += value >> 16
        self.value += value & 0xFFFF

    def sum(self) -> int:
        """Fold the accumulated value into 16 bits."""
        return ((self.value & 0xFFFF) + (self.value >> 16)) & 0xFFFF


@dataclass(frozen=True)
class IPv4PseudoHeader:
    """The IPv4 header fields that enter the UDP checksum."""

    src: ipaddress.IPv4Address
    dst: ipaddress.IPv4Address
    length: int
    protocol: int = 17

    def __post_init__(self) -> None:
        object.__setattr__(self, "src", ipaddress.IPv4Address(self.src))
        object.__setattr__(self, "dst", ipaddress.IPv4Address(self.dst))


def _to16(addr) -> ipaddress.IPv6Address:
    addr = ipaddress.ip_address(addr)
    if isinstance(addr, ipaddress.IPv4Address):
        return ipaddress.IPv6Address(f"::ffff:{addr}")
    return addr


@dataclass(frozen=True)
class IPv6PseudoHeader:
    """The IPv6 header fields that enter the UDP checksum."""

    src: ipaddress.IPv6Address
    dst: ipaddress.IPv6Address
    payload_len: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "src", _to16(self.src))
        object.__setattr__(self, "dst", _to16(self.dst))


@dataclass
class UDPHeader:
    """A UDP header."""

    src_port: int = 0
    dst_port: int = 0
    total_len: int = 0
    checksum: int = 0

    def marshal(self, pseudo_header: IPv4PseudoHeader | IPv6PseudoHeader | None = None) -> bytes:
        """Encode the header, first recomputing the checksum if a pseudo-header is given."""
        if isinstance(pseudo_header, IPv4PseudoHeader):
            ck = Checksum()
            ck.add_bytes(pseudo_header.src.packed)
            ck.add_bytes(pseudo_header.dst.packed)
            ck.add_uint16(pseudo_header.protocol)
            ck.add_uint16(pseudo_header.length)
            self._add_udp_fields(ck)
        elif isinstance(pseudo_header, IPv6PseudoHeader):
            ck = Checksum()
            ck.add_bytes(pseudo_header.src.packed)
            ck.add_bytes(pseudo_header.dst.packed)
            ck.add_uint32(pseudo_header.payload_len)
            self._add_udp_fields(ck)
        try:
            return _HEADER.pack(self.src_port, self.dst_port, self.total_len, self.checksum)
        except struct.error as exc:
            raise ValueError(f"error encoding UDP header {self!r}: {exc}") from exc

    def _add_udp_fields(self, ck: Checksum) -> None:
        ck.add_uint16(self.src_port)
        ck.add_uint16(self.dst_port)
        ck.add_uint16(self.total_len)
        self.checksum = ck.sum()


def parse_udp_header(data: bytes) -> UDPHeader:
    """Parse the first HEADER_LEN bytes of data as a UDP header."""
    if len(data) < HEADER_LEN:
        raise ValueError(f"UDP header too short: {len(data)} bytes")
    return UDPHeader(*_HEADER.unpack_from(data))