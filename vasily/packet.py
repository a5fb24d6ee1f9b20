"""The packet representation shared by the probing code."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PacketType(Enum):
    """What kind of packet was sent or received."""

    REQUEST = "request"
    REPLY = "reply"
    TIME_EXCEEDED = "time exceeded"
    DESTINATION_UNREACHABLE = "destination unreachable"


@dataclass(frozen=True)
class Packet:
    """A probe packet: its type, sequence number and payload."""

    type: PacketType = PacketType.REQUEST
    seq: int = 0
    payload: bytes = b""