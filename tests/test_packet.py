import dataclasses

import pytest

from vasily.packet import Packet, PacketType


def test_defaults():
    pkt = Packet()
    assert pkt.type is PacketType.REQUEST
    assert pkt.seq == 0
    assert pkt.payload == b""


def test_equality_by_value():
    a = Packet(PacketType.REPLY, 2, bytes([3, 4, 5]))
    b = Packet(type=PacketType.REPLY, seq=2, payload=bytes([3, 4, 5]))
    assert a == b
    assert hash(a) == hash(b)


def test_replace_changes_type_only():
    pkt = Packet(PacketType.REQUEST, 7, b"xy")
    changed = dataclasses.replace(pkt, type=PacketType.TIME_EXCEEDED)
    assert changed.type is PacketType.TIME_EXCEEDED
    assert (changed.seq, changed.payload) == (pkt.seq, pkt.payload)
    assert changed != pkt


def test_frozen():
    pkt = Packet()
    with pytest.raises(dataclasses.FrozenInstanceError):
        pkt.seq = 1
    assert pkt.seq == 0


def test_types_distinct():
    packets = {Packet(t, 1, b"x") for t in PacketType}
    assert len(packets) == len(list(PacketType))