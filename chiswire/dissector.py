"""Layer-by-layer dissection of raw Ethernet frames."""

from __future__ import annotations

import ipaddress
import struct
from collections.abc import Iterable
from dataclasses import dataclass

_ETHERNET_HEADER = 14
_IPV4_MIN_HEADER = 20
_IPV6_HEADER = 40
_ARP_SIZE = 28
_TCP_MIN_HEADER = 20
_UDP_HEADER = 8

_ETHERTYPE_IPV4 = 0x0800
_ETHERTYPE_ARP = 0x0806
_ETHERTYPE_IPV6 = 0x86DD

_PROTO_ICMP = 1
_PROTO_TCP = 6
_PROTO_UDP = 17
_PROTO_ICMPV6 = 58

_PROTOCOL_NAMES = {
    0: "Hopopt",
    1: "Icmp",
    2: "Igmp",
    4: "Ipv4",
    6: "Tcp",
    17: "Udp",
    41: "Ipv6",
    43: "Ipv6Route",
    44: "Ipv6Frag",
    47: "Gre",
    50: "Esp",
    51: "Ah",
    58: "Icmpv6",
    59: "Ipv6NoNxt",
    60: "Ipv6Opts",
    103: "Pim",
    112: "Vrrp",
    132: "Sctp",
}

_HEX_WIDTH = 16
_HEX_GROUP = 4


@dataclass(frozen=True)
class PacketInfo:
    """Summary of one dissected packet."""

    source: str
    destination: str
    protocol: str
    length: int
    info: str
    detailed_info: str
    hex_dump: str


def _mac(raw: bytes) -> str:
    return ":".join(f"{b:02x}" for b in raw)


def _debug_block(name: str, fields: Iterable[tuple[str, object]]) -> str:
    lines = [f"{name} {{"]
    lines.extend(f"    {key}: {value}," for key, value in fields)
    lines.append("}")
    return "\n".join(lines)


def _protocol_name(number: int) -> str:
    return _PROTOCOL_NAMES.get(number, "unknown")


def pretty_hex(data: bytes) -> str:
    """Render bytes as a titled hex dump with an ASCII column."""
    data = bytes(data)
    lines = [f"Length: {len(data)} (0x{len(data):x}) bytes"]
    full_width = _HEX_WIDTH * 3 - 1 + (_HEX_WIDTH // _HEX_GROUP - 1)
    for offset in range(0, len(data), _HEX_WIDTH):
        row = data[offset:offset + _HEX_WIDTH]
        groups = (
            " ".join(f"{b:02x}" for b in row[start:start + _HEX_GROUP])
            for start in range(0, len(row), _HEX_GROUP)
        )
        hex_part = "  ".join(groups).ljust(full_width)
        ascii_part = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in row)
        lines.append(f"{offset:04x}:   {hex_part}   {ascii_part}")
    return "\n".join(lines)


def _transport(protocol: int, payload: bytes, details: list[str]) -> tuple[str, str]:
    if protocol == _PROTO_TCP:
        if len(payload) < _TCP_MIN_HEADER:
            return "TCP", "Malformed Packet"
        sport, dport, seq, ack, offset_flags, window, checksum, urgent = struct.unpack(
            "!HHIIHHHH", payload[:_TCP_MIN_HEADER]
        )
        data_offset = offset_flags >> 12
        details.append(_debug_block("TcpPacket", [
            ("source", sport),
            ("destination", dport),
            ("sequence", seq),
            ("acknowledgement", ack),
            ("data_offset", data_offset),
            ("reserved", (offset_flags >> 9) & 0x7),
            ("flags", offset_flags & 0x1FF),
            ("window", window),
            ("checksum", checksum),
            ("urgent_ptr", urgent),
        ]))
        return "TCP", f"{sport} -> {dport} Seq: {seq} Ack: {ack}"
    if protocol == _PROTO_UDP:
        if len(payload) < _UDP_HEADER:
            return "UDP", "Malformed Packet"
        sport, dport, length, checksum = struct.unpack("!HHHH", payload[:_UDP_HEADER])
        details.append(_debug_block("UdpPacket", [
            ("source", sport),
            ("destination", dport),
            ("length", length),
            ("checksum", checksum),
        ]))
        return "UDP", f"{sport} -> {dport} Len: {length}"
    if protocol == _PROTO_ICMP:
        return "ICMP", "ICMP Packet"
    if protocol == _PROTO_ICMPV6:
        return "ICMPv6", "ICMPv6 Packet"
    return f"Protocol: {_protocol_name(protocol)}", ""


def _dissect_ipv4(payload: bytes, details: list[str]) -> tuple[str, str, str, str] | None:
    if len(payload) < _IPV4_MIN_HEADER:
        return None
    (ver_ihl, tos, total_length, ident, flags_frag, ttl, proto, checksum,
     src, dst) = struct.unpack("!BBHHHBBH4s4s", payload[:_IPV4_MIN_HEADER])
    header_length = ver_ihl & 0x0F
    start = min(header_length * 4, len(payload))
    end = max(start, min(total_length, len(payload)))
    source = str(ipaddress.IPv4Address(src))
    destination = str(ipaddress.IPv4Address(dst))
    details.append(_debug_block("Ipv4Packet", [
        ("version", ver_ihl >> 4),
        ("header_length", header_length),
        ("dscp", tos >> 2),
        ("ecn", tos & 0x3),
        ("total_length", total_length),
        ("identification", ident),
        ("flags", flags_frag >> 13),
        ("fragment_offset", flags_frag & 0x1FFF),
        ("ttl", ttl),
        ("next_level_protocol", _protocol_name(proto)),
        ("checksum", checksum),
        ("source", source),
        ("destination", destination),
    ]))
    protocol, info = _transport(proto, payload[start:end], details)
    return source, destination, protocol, info


def _dissect_ipv6(payload: bytes, details: list[str]) -> tuple[str, str, str, str] | None:
    if len(payload) < _IPV6_HEADER:
        return None
    first_word, payload_length, next_header, hop_limit, src, dst = struct.unpack(
        "!IHBB16s16s", payload[:_IPV6_HEADER]
    )
    source = str(ipaddress.IPv6Address(src))
    destination = str(ipaddress.IPv6Address(dst))
    details.append(_debug_block("Ipv6Packet", [
        ("version", first_word >> 28),
        ("traffic_class", (first_word >> 20) & 0xFF),
        ("flow_label", first_word & 0xFFFFF),
        ("payload_length", payload_length),
        ("next_header", _protocol_name(next_header)),
        ("hop_limit", hop_limit),
        ("source", source),
        ("destination", destination),
    ]))
    end = min(_IPV6_HEADER + payload_length, len(payload))
    protocol, info = _transport(next_header, payload[_IPV6_HEADER:end], details)
    return source, destination, protocol, info


def dissect_packet(packet_data: bytes) -> PacketInfo | None:
    """Dissect a raw Ethernet frame, or return None if it is too short to parse."""
    data = bytes(packet_data)
    if len(data) < _ETHERNET_HEADER:
        return None
    dst_mac, src_mac, ethertype = struct.unpack("!6s6sH", data[:_ETHERNET_HEADER])
    payload = data[_ETHERNET_HEADER:]
    details = [_debug_block("EthernetPacket", [
        ("destination", _mac(dst_mac)),
        ("source", _mac(src_mac)),
        ("ethertype", f"EtherType({ethertype})"),
    ])]
    hex_dump = pretty_hex(data)

    def build(source: str, destination: str, protocol: str, info: str) -> PacketInfo:
        return PacketInfo(
            source=source,
            destination=destination,
            protocol=protocol,
            length=len(data),
            info=info,
            detailed_info="\n\n".join(details),
            hex_dump=hex_dump,
        )

    if ethertype in (_ETHERTYPE_IPV4, _ETHERTYPE_IPV6):
        handler = _dissect_ipv4 if ethertype == _ETHERTYPE_IPV4 else _dissect_ipv6
        result = handler(payload, details)
        return None if result is None else build(*result)

    if ethertype == _ETHERTYPE_ARP:
        if len(payload) < _ARP_SIZE:
            return None
        (htype, ptype, hlen, plen, oper, sha, spa, tha, tpa) = struct.unpack(
            "!HHBBH6s4s6s4s", payload[:_ARP_SIZE]
        )
        sender_ip = str(ipaddress.IPv4Address(spa))
        target_ip = str(ipaddress.IPv4Address(tpa))
        details.append(_debug_block("ArpPacket", [
            ("hardware_type", htype),
            ("protocol_type", ptype),
            ("hw_addr_len", hlen),
            ("proto_addr_len", plen),
            ("operation", oper),
            ("sender_hw_addr", _mac(sha)),
            ("sender_proto_addr", sender_ip),
            ("target_hw_addr", _mac(tha)),
            ("target_proto_addr", target_ip),
        ]))
        return build(_mac(sha), "Broadcast", "ARP", f"Who has {target_ip}? Tell {sender_ip}")

    return build(_mac(src_mac), _mac(dst_mac), f"0x{ethertype:04x}", "Unknown L3 protocol")