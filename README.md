# vasily

Building blocks for watching network paths: parsing of ping and traceroute
replies, a route tracer that works over a connection you supply, and the
colours used to draw latency heatmaps.

## Installation

    pip install vasily

For running the tests:

    pip install "vasily[test]"
    pytest

## Modules

- `vasily.util`: `IPVersion` (`IPv4` or `IPv6`, with `address_family()`,
  `ip_proto_num()`, `icmp_proto_num()` and `ttl_sock_opt()`), `Address`
  (an IP and a port; a string IP is parsed), `choose(version, val4, val6)`,
  `addr_version(addr)`, and echo ID generation with `IDGenerator` and the
  process-wide `gen_id()`.
- `vasily.udppkt`: `UDPHeader` with `marshal(pseudo_header)`, which fills in
  the checksum when given an `IPv4PseudoHeader` or `IPv6PseudoHeader` and
  leaves it as it is when given `None`; `parse_udp_header(data)`, which
  raises `ValueError` on fewer than 8 bytes; and the Internet `Checksum`
  accumulator.
- `vasily.packet`: the `Packet` value (`type`, `seq`, `payload`) and its
  `PacketType` (`REQUEST`, `REPLY`, `TIME_EXCEEDED`,
  `DESTINATION_UNREACHABLE`).
- `vasily.icmppkt`: `parse(ip_version, data)` turns an ICMP echo request,
  echo reply, time-exceeded or destination-unreachable message into a
  `ParsedPacket` of the packet, the echo ID (or UDP source port) and the
  protocol of the probe. For error messages the quoted ICMP or UDP probe is
  decoded and its sequence number (the UDP destination port) is kept.
  Port-unreachable errors count as replies. Malformed or unhandled input
  raises `ParseError`.
- `vasily.errqueue`: `parse_linux_ee(oob)` decodes the control data that
  Linux returns from a socket's error queue (`IP_RECVERR` /
  `IPV6_RECVERR`) into a `PacketType` and the `Address` of the host that
  sent the error; `oob_bytes(ip_version)` allocates a buffer of the right
  size. The layout read is the native one of the running machine. Failures
  raise `ErrQueueError`.
- `vasily.tracer`: `trace_route(conn, dest, opts)` is a generator that
  probes TTL 1, 2, … and yields `Step(pos, host)` as hops answer, never
  repeating a host already seen at that position. `Options` sets the
  `interval` between probes in seconds (zero or less for none), the
  `probes_per_hop` rounds and the `max_ttl`. It raises `MaxTTLError` when a
  round does not reach the destination, `DestinationUnreachableError` when a
  hop reports it unreachable, and `TraceError` on send or read failures.
- `vasily.theme`: `Gradient.at(v)` maps a fraction in [0, 1] to an
  `AdaptiveColor` of light and dark `CompleteColor` values (true colour
  blended in HCL space, ANSI-256 and ANSI); values outside the range raise
  `ValueError`. `hex_color(s)` parses `#rrggbb` or `#rgb` into RGB
  fractions and gives pure red for anything else. `HEATMAP` and
  `DEFAULT_COLORS` hold the default palette.
- `vasily.nav`: `Screen`, `GoMsg` and `go(screen)`, which returns a
  command producing a `GoMsg`.

## The connection used by the tracer

`trace_route` does not open sockets itself. The `conn` you pass must have:

- `write_to(packet, dest, ttl)` to send a probe, raising `OSError` on failure;
- `read_from(timeout)` returning `(packet, peer)`, raising `TimeoutError`
  when nothing arrives.

If it also has a `seq_base_port` attribute, that is advanced after each
round of probes.

## Example

    from vasily.icmppkt import parse
    from vasily.util import IPVersion

    result = parse(IPVersion.IPv4, raw_icmp_bytes)
    print(result.packet.type, result.packet.seq, result.id)

## What this package does not do

There is no command to run, no ping loop with statistics, no socket
backends that send ICMP or UDP probes, no host name lookup and no terminal
screen or results table. The package supplies the parsing, tracing logic
and colours such a tool would be built on.