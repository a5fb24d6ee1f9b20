"""Parsing of ICMP packets and of the packets quoted inside ICMP errors."""

from __future__ import annotations

import dataclasses
import struct
from enum import Enum, auto
from typing import NamedTuple

from vasily.packet import Packet, PacketType
from vasily.udppkt import HEADER_LEN as UDP_HEADER_LEN
from vasily.udppkt import parse_udp_header
from vasily.util import IPPROTO_UDP, IPVersion

CODE_PORT_UNREACHABLE_V4 = 3
CODE_PORT_UNREACHABLE_V6 = 4

ICMPV4_ECHO_REPLY = 0
ICMPV4_DESTINATION_UNREACHABLE = 3
ICMPV4_ECHO = 8
ICMPV4_TIME_EXCEEDED = 11

ICMPV6_DESTINATION_UNREACHABLE = 1
ICMPV6_TIME_EXCEEDED = 3
ICMPV6_ECHO_REQUEST = 128
ICMPV6_ECHO_REPLY = 129

_IPV4_HEADER_LEN = 20
_IPV6_HEADER_LEN = 40


class ParseError(ValueError):
    """An ICMP packet could not be parsed."""


class ParsedPacket(NamedTuple):
    """A parsed packet with the echo ID (or source port) and protocol it came from."""

    packet: Packet
    id: int
    proto: int


class _Kind(Enum):
    ECHO_REQUEST = auto()
    ECHO_REPLY = auto()
    DESTINATION_UNREACHABLE = auto()
    TIME_EXCEEDED = auto()


_KINDS = {
    IPVersion.IPv4: {
        ICMPV4_ECHO: _Kind.ECHO_REQUEST,
        ICMPV4_ECHO_REPLY: _Kind.ECHO_REPLY,
        ICMPV4_DESTINATION_UNREACHABLE: _Kind.DESTINATION_UNREACHABLE,
        ICMPV4_TIME_EXCEEDED: _Kind.TIME_EXCEEDED,
    },
    IPVersion.IPv6: {
        ICMPV6_ECHO_REQUEST: _Kind.ECHO_REQUEST,
        ICMPV6_ECHO_REPLY: _Kind.ECHO_REPLY,
        ICMPV6_DESTINATION_UNREACHABLE: _Kind.DESTINATION_UNREACHABLE,
        ICMPV6_TIME_EXCEEDED: _Kind.TIME_EXCEEDED,
    },
}


def parse(ip_version, data: bytes) -> ParsedPacket:
    """Parse an ICMP message into a packet, its ID and the protocol that carried it."""
    ip_version = IPVersion(ip_version)
    data = bytes(data)
    if len(data) < 4:
        raise ParseError("parsing message: message too short")
    icmp_type, code = data[0], data[1]
    body = data[4:]
    kind = _KINDS[ip_version].get(icmp_type)
    if kind is None:
        raise ParseError(f"unhandled ICMP type: {icmp_type}")
    if kind in (_Kind.ECHO_REQUEST, _Kind.ECHO_REPLY):
        return _echo_to_packet(ip_version, kind, body)
    if len(body) < 4:
        raise ParseError("parsing message: message too short")
    inner = _ip_body_to_packet(ip_version, body[4:])
    if kind is _Kind.TIME_EXCEEDED:
        pkt_type = PacketType.TIME_EXCEEDED
    else:
        port_code = (
            CODE_PORT_UNREACHABLE_V4
            if ip_version is IPVersion.IPv4
            else CODE_PORT_UNREACHABLE_V6
        )
        # A closed port on the destination means the host answered.
        pkt_type = (
            PacketType.REPLY if code == port_code else PacketType.DESTINATION_UNREACHABLE
        )
    return inner._replace(packet=dataclasses.replace(inner.packet, type=pkt_type))


def _echo_to_packet(ip_version: IPVersion, kind: _Kind, body: bytes) -> ParsedPacket:
    if len(body) < 4:
        raise ParseError("parsing message: echo body too short")
    echo_id, seq = struct.unpack_from("!HH", body)
    pkt_type = PacketType.REQUEST if kind is _Kind.ECHO_REQUEST else PacketType.REPLY
    return ParsedPacket(
        Packet(type=pkt_type, seq=seq, payload=body[4:]),
        echo_id,
        ip_version.icmp_proto_num(),
    )


def _ip_body_to_packet(ip_version: IPVersion, buf: bytes) -> ParsedPacket:
    if ip_version is IPVersion.IPv4:
        if len(buf) < _IPV4_HEADER_LEN:
            raise ParseError("parse header: header too short")
        header_len = (buf[0] & 0x0F) << 2
        if header_len < _IPV4_HEADER_LEN or header_len > len(buf):
            raise ParseError(f"parse header: invalid header length {header_len}")
        proto = buf[9]
    else:
        if len(buf) < _IPV6_HEADER_LEN:
            raise ParseError("parse header: header too short")
        header_len = _IPV6_HEADER_LEN
        proto = buf[6]

    rest = buf[header_len:]
    if proto == ip_version.icmp_proto_num():
        return parse(ip_version, rest)
    if proto == IPPROTO_UDP:
        return _decode_udp(rest)
    raise ParseError(f"unrecognized proto field: {proto}")


def _decode_udp(buf: bytes) -> ParsedPacket:
    try:
        hdr = parse_udp_header(buf)
    except ValueError as exc:
        raise ParseError(f"parse UDP header: {exc}") from exc
    return ParsedPacket(
        Packet(seq=hdr.dst_port, payload=buf[UDP_HEADER_LEN:]),
        hdr.src_port,
        IPPROTO_UDP,
    )