"""Building and parsing of ICMP echo packets."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass

ICMP_ECHO_REQUEST = 8
ICMP_ECHO_REPLY = 0
ICMP_HEADER_SIZE = 8
IP_MIN_HEADER_SIZE = 20
MIN_PAYLOAD_SIZE = 56
MAX_PAYLOAD_SIZE = 1472

_ICMP_HEADER = struct.Struct("!BBHHH")


def calculate_checksum(data: bytes) -> int:
    """Internet checksum (one's complement of the one's complement sum)."""
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    total = sum(word for (word,) in struct.iter_unpack("!H", data))
    total = (total >> 16) + (total & 0xFFFF)
    total += total >> 16
    return ~total & 0xFFFF


def build_echo_request(ident: int, seq: int, payload_size: int) -> bytes:
    """Return an ICMP echo request with a zero-filled payload."""
    if payload_size < 0:
        raise ValueError("payload size must not be negative")
    ident &= 0xFFFF
    seq &= 0xFFFF
    payload = bytes(payload_size)
    unsigned = _ICMP_HEADER.pack(ICMP_ECHO_REQUEST, 0, 0, ident, seq) + payload
    checksum = calculate_checksum(unsigned)
    return _ICMP_HEADER.pack(ICMP_ECHO_REQUEST, 0, checksum, ident, seq) + payload


@dataclass(frozen=True)
class ReceivedPacket:
    """The fields of a received IPv4 datagram carrying ICMP that matter here."""

    source: str
    destination: str
    icmp_type: int
    code: int
    ident: int
    seq: int


def parse_packet(data: bytes) -> ReceivedPacket:
    """Parse an IPv4 datagram as read from a raw ICMP socket."""
    data = bytes(data)
    if len(data) < IP_MIN_HEADER_SIZE:
        raise ValueError(f"packet too short for an IPv4 header: {len(data)} bytes")
    ihl = (data[0] & 0x0F) * 4
    if ihl < IP_MIN_HEADER_SIZE:
        raise ValueError(f"invalid IPv4 header length: {ihl}")
    if len(data) < ihl + ICMP_HEADER_SIZE:
        raise ValueError(f"packet too short for an ICMP header: {len(data)} bytes")
    icmp_type, code, _checksum, ident, seq = _ICMP_HEADER.unpack_from(data, ihl)
    return ReceivedPacket(
        source=str(ipaddress.IPv4Address(data[12:16])),
        destination=str(ipaddress.IPv4Address(data[16:20])),
        icmp_type=icmp_type,
        code=code,
        ident=ident,
        seq=seq,
    )