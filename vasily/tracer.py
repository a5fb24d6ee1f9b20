"""Route tracing: probe a destination with increasing TTLs and report each hop."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterator, Protocol, Tuple

from vasily.packet import Packet, PacketType
from vasily.util import Address

DEFAULT_MAX_TTL = 64
DEFAULT_PROBES_PER_HOP = 3
DEFAULT_INTERVAL = 1.0

# Maximum time in seconds to wait for a reply.
TIMEOUT = 1.0


class _Conn(Protocol):
    def write_to(self, packet: Packet, dest: Address, ttl: int) -> None: ...

    def read_from(self, timeout: float) -> Tuple[Packet, Address]: ...


class TraceError(Exception):
    """A route trace failed."""


class MaxTTLError(TraceError):
    """The destination was not reached within the maximum TTL."""

    def __init__(self) -> None:
        super().__init__("maximum TTL reached")


class DestinationUnreachableError(TraceError):
    """A hop reported that the destination cannot be reached."""

    def __init__(self, peer: Address) -> None:
        super().__init__(f"destination unreachable: {peer}")
        self.peer = peer


@dataclass
class Options:
    """Trace options.

    interval is the time in seconds between probes; zero or less sends them
    without delay.
    """

    interval: float = DEFAULT_INTERVAL
    probes_per_hop: int = DEFAULT_PROBES_PER_HOP
    max_ttl: int = DEFAULT_MAX_TTL


@dataclass(frozen=True)
class Step:
    """A single step in the path to a remote host."""

    pos: int
    host: Address


def _ticks(interval: float) -> Iterator[None]:
    """Yield once immediately, then once every interval seconds."""
    if interval <= 0:
        while True:
            yield
    next_at = time.monotonic()
    while True:
        delay = next_at - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        yield
        next_at = max(next_at + interval, time.monotonic())


def _read_seq(conn: _Conn, seq: int) -> Tuple[Packet, Address]:
    """Read until a non-request packet with the given sequence number arrives."""
    deadline = time.monotonic() + TIMEOUT
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError("timed out waiting for reply")
        pkt, peer = conn.read_from(remaining)
        if pkt.seq != seq or pkt.type is PacketType.REQUEST:
            continue
        return pkt, peer


def trace_route(conn: _Conn, dest: Address, opts: Options | None = None) -> Iterator[Step]:
    """Find the path to dest, yielding each newly seen hop.

    conn must provide write_to(packet, dest, ttl) and read_from(timeout), the
    latter raising TimeoutError when nothing arrives. If conn has a
    seq_base_port attribute it is advanced after each round of probes.
    Raises MaxTTLError if a round does not reach the destination and
    DestinationUnreachableError if a hop reports it unreachable.
    """
    opts = opts or Options()
    seen: set[str] = set()
    tick = _ticks(opts.interval)
    has_port = hasattr(conn, "seq_base_port")
    next_base_port = conn.seq_base_port if has_port else 0

    for _ in range(opts.probes_per_hop):
        done = False
        ttl = 1
        while not done and ttl < opts.max_ttl:
            next(tick)
            next_base_port += 1
            seq = ttl - 1
            try:
                conn.write_to(Packet(type=PacketType.REQUEST, seq=seq), dest, ttl=ttl)
            except OSError as exc:
                raise TraceError(f"error sending ping: {exc}") from exc
            try:
                received, peer = _read_seq(conn, seq)
            except TimeoutError:
                ttl += 1
                continue
            except OSError as exc:
                raise TraceError(f"read error: {exc}") from exc

            if received.type is PacketType.DESTINATION_UNREACHABLE:
                raise DestinationUnreachableError(peer)
            if received.type is PacketType.REPLY:
                done = True

            key = f"{ttl}:{peer}"
            if key not in seen:
                seen.add(key)
                yield Step(pos=ttl, host=peer)
            ttl += 1

        if has_port:
            conn.seq_base_port = next_base_port
        if not done:
            raise MaxTTLError()