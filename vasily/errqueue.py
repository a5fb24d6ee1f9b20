"""Parsing of Linux socket error-queue control messages (IP_RECVERR)."""

from __future__ import annotations

import ipaddress
import struct

from vasily.icmppkt import (
    CODE_PORT_UNREACHABLE_V4,
    CODE_PORT_UNREACHABLE_V6,
    ICMPV4_DESTINATION_UNREACHABLE,
    ICMPV4_TIME_EXCEEDED,
    ICMPV6_DESTINATION_UNREACHABLE,
    ICMPV6_TIME_EXCEEDED,
)
from vasily.packet import PacketType
from vasily.util import IPPROTO_IP, IPPROTO_IPV6, Address, choose

# Linux values.
IP_RECVERR = 11
IPV6_RECVERR = 25
SO_EE_ORIGIN_ICMP = 2
SO_EE_ORIGIN_ICMP6 = 3
AF_INET = 2
AF_INET6 = 10

SIZEOF_SOCKADDR_IN = 16
SIZEOF_SOCKADDR_IN6 = 28

_CMSGHDR = struct.Struct("@Nii")
_EXTENDED_ERR = struct.Struct("@IBBBBII")
_FAMILY = struct.Struct("@H")
_ALIGN = struct.calcsize("@N")


class ErrQueueError(ValueError):
    """An error-queue control message could not be parsed."""


def _align(n: int) -> int:
    return (n + _ALIGN - 1) & ~(_ALIGN - 1)


def _cmsg_space(n: int) -> int:
    return _align(_CMSGHDR.size) + _align(n)


def oob_bytes(ip_version) -> bytearray:
    """Allocate room for a control message holding an extended error and its offender."""
    sa_size = choose(ip_version, SIZEOF_SOCKADDR_IN, SIZEOF_SOCKADDR_IN6)
    return bytearray(_cmsg_space(_EXTENDED_ERR.size + sa_size))


def _control_messages(oob: bytes):
    header_len = _align(_CMSGHDR.size)
    offset = 0
    while offset + header_len <= len(oob):
        length, level, cmsg_type = _CMSGHDR.unpack_from(oob, offset)
        if length < _CMSGHDR.size or length > len(oob) - offset:
            raise ErrQueueError(f"invalid control message length {length}")
        yield level, cmsg_type, oob[offset + header_len : offset + length]
        offset += _align(length)


def _is_recv_err(level: int, cmsg_type: int) -> bool:
    return (cmsg_type == IP_RECVERR and level == IPPROTO_IP) or (
        cmsg_type == IPV6_RECVERR and level == IPPROTO_IPV6
    )


def _packet_type(origin: int, icmp_type: int, code: int) -> PacketType:
    if origin == SO_EE_ORIGIN_ICMP:
        if icmp_type == ICMPV4_TIME_EXCEEDED:
            return PacketType.TIME_EXCEEDED
        if icmp_type == ICMPV4_DESTINATION_UNREACHABLE:
            if code == CODE_PORT_UNREACHABLE_V4:
                return PacketType.REPLY
            return PacketType.DESTINATION_UNREACHABLE
    elif origin == SO_EE_ORIGIN_ICMP6:
        if icmp_type == ICMPV6_TIME_EXCEEDED:
            return PacketType.TIME_EXCEEDED
        if icmp_type == ICMPV6_DESTINATION_UNREACHABLE:
            if code == CODE_PORT_UNREACHABLE_V6:
                return PacketType.REPLY
            return PacketType.DESTINATION_UNREACHABLE
    else:
        raise ErrQueueError(f"unrecognized origin {origin}")
    raise ErrQueueError(f"unrecognized packet type {icmp_type}")


def _offender(sockaddr: bytes) -> Address:
    if len(sockaddr) < _FAMILY.size:
        raise ErrQueueError("offender address missing")
    (family,) = _FAMILY.unpack_from(sockaddr)
    if family == AF_INET:
        if len(sockaddr) < SIZEOF_SOCKADDR_IN:
            raise ErrQueueError("offender address truncated")
        (port,) = struct.unpack_from("!H", sockaddr, 2)
        return Address(ipaddress.IPv4Address(sockaddr[4:8]), port)
    if family == AF_INET6:
        if len(sockaddr) < SIZEOF_SOCKADDR_IN6:
            raise ErrQueueError("offender address truncated")
        (port,) = struct.unpack_from("!H", sockaddr, 2)
        return Address(ipaddress.IPv6Address(sockaddr[8:24]), port)
    raise ErrQueueError(f"unsupported address family {family}")


def parse_linux_ee(oob: bytes) -> tuple[PacketType, Address]:
    """Parse an extended socket error read from the error queue.

    Returns the packet type the error stands for and the address that sent it.
    """
    messages = list(_control_messages(bytes(oob)))
    if len(messages) != 1:
        raise ErrQueueError(
            f"expected exactly 1 control message (got {len(messages)})"
        )
    level, cmsg_type, data = messages[0]
    if not _is_recv_err(level, cmsg_type):
        raise ErrQueueError(
            f"unexpected control header: level={level} type={cmsg_type}"
        )
    if len(data) < _EXTENDED_ERR.size:
        raise ErrQueueError("extended error truncated")
    _errno, origin, icmp_type, code, _pad, _info, _data = _EXTENDED_ERR.unpack_from(data)
    pkt_type = _packet_type(origin, icmp_type, code)
    peer = _offender(data[_EXTENDED_ERR.size :])
    return pkt_type, peer