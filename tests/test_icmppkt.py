import socket
import struct

import pytest

from vasily.icmppkt import (
    CODE_PORT_UNREACHABLE_V4,
    CODE_PORT_UNREACHABLE_V6,
    ICMPV4_DESTINATION_UNREACHABLE,
    ICMPV4_ECHO,
    ICMPV4_ECHO_REPLY,
    ICMPV4_TIME_EXCEEDED,
    ICMPV6_DESTINATION_UNREACHABLE,
    ICMPV6_ECHO_REPLY,
    ICMPV6_ECHO_REQUEST,
    ICMPV6_TIME_EXCEEDED,
    ParseError,
    parse,
)
from vasily.packet import Packet, PacketType
from vasily.udppkt import HEADER_LEN, UDPHeader
from vasily.util import IPVersion

V4 = IPVersion.IPv4
V6 = IPVersion.IPv6
PROTO_ICMP = 1
PROTO_ICMPV6 = 58
PROTO_UDP = 17


def icmp_message(icmp_type, body, code=0):
    return bytes([icmp_type, code, 0, 0]) + body


def echo_body(echo_id, seq, payload):
    return struct.pack("!HH", echo_id, seq) + payload


def error_body(data):
    return bytes(4) + data


def ip_header(ip_version, protocol, payload_len):
    if ip_version is V4:
        return struct.pack(
            "!BBHHHBBH4s4s",
            0x45, 0, 20 + payload_len, 0, 0, 0, protocol, 0,
            bytes([127, 0, 0, 1]), bytes([127, 0, 0, 1]),
        )
    buf = bytearray(40)
    buf[0] = 6 << 4
    buf[4] = (payload_len >> 8) & 0xFF
    buf[5] = payload_len & 0xFF
    buf[6] = protocol
    return bytes(buf)


def echo_reply(ip_version, echo_id, seq, payload):
    msg_type = ICMPV4_ECHO if ip_version is V4 else ICMPV6_ECHO_REQUEST
    icmp = icmp_message(msg_type, echo_body(echo_id, seq, payload))
    proto = PROTO_ICMP if ip_version is V4 else PROTO_ICMPV6
    return ip_header(ip_version, proto, len(icmp)) + icmp


def udp_ping(ip_version, echo_id, seq, payload):
    udp = UDPHeader(
        src_port=echo_id, dst_port=seq, total_len=HEADER_LEN + len(payload)
    ).marshal(None)
    return ip_header(ip_version, PROTO_UDP, len(udp) + len(payload)) + udp + payload


P = bytes([3, 4, 5])

CASES = [
    ("ICMP/EchoRequest", V4, icmp_message(ICMPV4_ECHO, echo_body(1, 2, P)),
     PacketType.REQUEST, PROTO_ICMP),
    ("ICMP/EchoRequest", V6, icmp_message(ICMPV6_ECHO_REQUEST, echo_body(1, 2, P)),
     PacketType.REQUEST, PROTO_ICMPV6),
    ("ICMP/EchoReply", V4, icmp_message(ICMPV4_ECHO_REPLY, echo_body(1, 2, P)),
     PacketType.REPLY, PROTO_ICMP),
    ("ICMP/EchoReply", V6, icmp_message(ICMPV6_ECHO_REPLY, echo_body(1, 2, P)),
     PacketType.REPLY, PROTO_ICMPV6),
    ("ICMP/TimeExceeded", V4,
     icmp_message(ICMPV4_TIME_EXCEEDED, error_body(echo_reply(V4, 1, 2, P))),
     PacketType.TIME_EXCEEDED, PROTO_ICMP),
    ("ICMP/TimeExceeded", V6,
     icmp_message(ICMPV6_TIME_EXCEEDED, error_body(echo_reply(V6, 1, 2, P))),
     PacketType.TIME_EXCEEDED, PROTO_ICMPV6),
    ("ICMP/DestinationUnreachable", V4,
     icmp_message(ICMPV4_DESTINATION_UNREACHABLE, error_body(echo_reply(V4, 1, 2, P))),
     PacketType.DESTINATION_UNREACHABLE, PROTO_ICMP),
    ("ICMP/DestinationUnreachable", V6,
     icmp_message(ICMPV6_DESTINATION_UNREACHABLE, error_body(echo_reply(V6, 1, 2, P))),
     PacketType.DESTINATION_UNREACHABLE, PROTO_ICMPV6),
    ("UDP/TimeExceeded", V4,
     icmp_message(ICMPV4_TIME_EXCEEDED, error_body(udp_ping(V4, 1, 2, P))),
     PacketType.TIME_EXCEEDED, PROTO_UDP),
    ("UDP/TimeExceeded", V6,
     icmp_message(ICMPV6_TIME_EXCEEDED, error_body(udp_ping(V6, 1, 2, P))),
     PacketType.TIME_EXCEEDED, PROTO_UDP),
    ("UDP/DestinationUnreachable", V4,
     icmp_message(ICMPV4_DESTINATION_UNREACHABLE, error_body(udp_ping(V4, 1, 2, P))),
     PacketType.DESTINATION_UNREACHABLE, PROTO_UDP),
    ("UDP/DestinationUnreachable", V6,
     icmp_message(ICMPV6_DESTINATION_UNREACHABLE, error_body(udp_ping(V6, 1, 2, P))),
     PacketType.DESTINATION_UNREACHABLE, PROTO_UDP),
    ("UDP/PortUnreachable", V4,
     icmp_message(ICMPV4_DESTINATION_UNREACHABLE, error_body(udp_ping(V4, 1, 2, P)),
                  code=CODE_PORT_UNREACHABLE_V4),
     PacketType.REPLY, PROTO_UDP),
    ("UDP/PortUnreachable", V6,
     icmp_message(ICMPV6_DESTINATION_UNREACHABLE, error_body(udp_ping(V6, 1, 2, P)),
                  code=CODE_PORT_UNREACHABLE_V6),
     PacketType.REPLY, PROTO_UDP),
]


@pytest.mark.parametrize(
    "name,ip_version,data,want_type,want_proto",
    CASES,
    ids=[f"{c[0]}/{c[1]}" for c in CASES],
)
def test_packets(name, ip_version, data, want_type, want_proto):
    got = parse(ip_version, data)
    assert got.packet == Packet(type=want_type, seq=2, payload=P)
    assert got.id == 1
    assert got.proto == want_proto


def test_proto_numbers_match_socket_module():
    assert parse(V4, icmp_message(ICMPV4_ECHO, echo_body(1, 2, P))).proto == socket.IPPROTO_ICMP
    assert parse(V4, icmp_message(ICMPV4_TIME_EXCEEDED, error_body(udp_ping(V4, 1, 2, P)))).proto == socket.IPPROTO_UDP


def test_too_short():
    with pytest.raises(ParseError):
        parse(V4, bytes([8, 0]))


def test_unhandled_type():
    with pytest.raises(ParseError, match="unhandled ICMP type"):
        parse(V4, icmp_message(ICMPV6_ECHO_REQUEST, echo_body(1, 2, P)))


def test_unrecognized_inner_proto():
    inner = ip_header(V4, 6, 4) + bytes(4)
    with pytest.raises(ParseError, match="unrecognized proto"):
        parse(V4, icmp_message(ICMPV4_TIME_EXCEEDED, error_body(inner)))


def test_truncated_inner_header():
    with pytest.raises(ParseError, match="parse header"):
        parse(V6, icmp_message(ICMPV6_TIME_EXCEEDED, error_body(bytes(10))))


def test_truncated_udp_header():
    inner = ip_header(V4, PROTO_UDP, 3) + bytes(3)
    with pytest.raises(ParseError, match="parse UDP header"):
        parse(V4, icmp_message(ICMPV4_TIME_EXCEEDED, error_body(inner)))