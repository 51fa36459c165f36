"""
ICMP echo message encoding and decoding.

Echo Request / Echo Reply structure (RFC 792, RFC 4443):

     0                            15                               31
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    |     Type      |    Code (0)   |           Checksum            |
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    |           Identifier          |        Sequence Number        |
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+
    |                         Payload Data                          |
    +-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+-+

ICMPv4 messages carry the checksum computed here. ICMPv6 messages are
marshalled with a zero checksum: it covers an IPv6 pseudo header and the
kernel fills it in on raw ICMPv6 sockets.
"""

import struct
from dataclasses import dataclass, replace
from enum import IntEnum

from .errors import MarshalError

ICMP_HEADER_FORMAT = "!BBHHH"
ICMP_HEADER_SIZE = struct.calcsize(ICMP_HEADER_FORMAT)

ICMPV4_ECHO_REQUEST = 8
ICMPV4_ECHO_REPLY = 0
ICMPV6_ECHO_REQUEST = 128
ICMPV6_ECHO_REPLY = 129

# Marker carried in every echo request sent by this tool
ECHO_PAYLOAD = b"icmp_prober echo probe"


class IPVersion(IntEnum):
    """IP version of a probe, with its echo type constants."""

    V4 = 4
    V6 = 6

    @property
    def echo_request(self) -> int:
        return ICMPV4_ECHO_REQUEST if self is IPVersion.V4 else ICMPV6_ECHO_REQUEST

    @property
    def echo_reply(self) -> int:
        return ICMPV4_ECHO_REPLY if self is IPVersion.V4 else ICMPV6_ECHO_REPLY


def checksum(data: bytes) -> int:
    """Calculate the RFC 1071 internet checksum of `data`."""
    if len(data) % 2:
        data += b"\x00"

    total = sum(int.from_bytes(data[i : i + 2], "big") for i in range(0, len(data), 2))
    total = (total >> 16) + (total & 0xFFFF)
    total += total >> 16
    return ~total & 0xFFFF


@dataclass(frozen=True)
class EchoMessage:
    """A decoded ICMP echo request or reply."""

    type: int
    code: int
    identifier: int
    sequence: int
    payload: bytes
    checksum: int = 0

    def marshal(self, ip_version: IPVersion) -> bytes:
        """
        Serialize the message to wire bytes.

        Args:
            ip_version: IP version the message is sent over, decides whether
                the checksum is computed here

        Returns:
            bytes: The ICMP message

        Raises:
            MarshalError: If a field is out of range or the payload is not bytes
        """
        if not isinstance(self.payload, (bytes, bytearray)):
            raise MarshalError(
                f"Payload must be bytes, got {type(self.payload).__name__}"
            )
        try:
            header = struct.pack(
                ICMP_HEADER_FORMAT,
                self.type,
                self.code,
                0,
                self.identifier,
                self.sequence,
            )
        except struct.error as e:
            raise MarshalError(f"Cannot marshal echo message: {e}") from e

        packet = header + bytes(self.payload)
        if ip_version == IPVersion.V4:
            packet = packet[:2] + struct.pack("!H", checksum(packet)) + packet[4:]
        return packet

    @classmethod
    def unmarshal(cls, data: bytes) -> "EchoMessage":
        """
        Decode an ICMP echo message.

        Raises:
            MarshalError: If the buffer is shorter than an ICMP header
        """
        if len(data) < ICMP_HEADER_SIZE:
            raise MarshalError(
                f"ICMP message too short: {len(data)} < {ICMP_HEADER_SIZE} bytes"
            )
        msg_type, code, msg_checksum, identifier, sequence = struct.unpack(
            ICMP_HEADER_FORMAT, data[:ICMP_HEADER_SIZE]
        )
        return cls(
            type=msg_type,
            code=code,
            identifier=identifier,
            sequence=sequence,
            payload=bytes(data[ICMP_HEADER_SIZE:]),
            checksum=msg_checksum,
        )


def build_request(
    ip_version: IPVersion,
    identifier: int,
    sequence: int,
    payload: bytes = ECHO_PAYLOAD,
) -> bytes:
    """
    Build an echo request for the given IP version.

    Returns:
        bytes: Serialized echo request

    Raises:
        MarshalError: If the message cannot be serialized
    """
    message = EchoMessage(
        type=IPVersion(ip_version).echo_request,
        code=0,
        identifier=identifier,
        sequence=sequence,
        payload=payload,
    )
    return message.marshal(ip_version)


def derive_expected_reply(request: bytes, ip_version: IPVersion) -> bytes:
    """
    Derive the echo reply a target sends back for `request`.

    The reply is the same message with the type switched to echo reply.

    Raises:
        MarshalError: If the request cannot be decoded or re-serialized
    """
    message = EchoMessage.unmarshal(request)
    reply = replace(message, type=IPVersion(ip_version).echo_reply, checksum=0)
    return reply.marshal(ip_version)


def strip_ipv4_header(data: bytes) -> bytes:
    """
    Drop the IPv4 header raw IPv4 sockets prepend to received ICMP messages.

    Buffers that do not start with an IPv4 header are returned unchanged;
    no ICMP echo type has 4 in its upper nibble.
    """
    if data and data[0] >> 4 == 4:
        header_length = (data[0] & 0x0F) * 4
        if header_length >= 20 and len(data) >= header_length:
            return data[header_length:]
    return data


def parse_reply(data: bytes, ip_version: IPVersion) -> EchoMessage:
    """
    Decode a received buffer into an echo message ready for matching.

    For IPv4 a leading IP header is stripped. For IPv6 the checksum is
    cleared, since the locally derived reply never carries one.

    Raises:
        MarshalError: If the buffer does not hold an ICMP message
    """
    if ip_version == IPVersion.V4:
        data = strip_ipv4_header(data)
    message = EchoMessage.unmarshal(data)
    if ip_version == IPVersion.V6:
        message = replace(message, checksum=0)
    return message
