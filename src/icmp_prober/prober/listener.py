"""
Reply Listener Module.

Drives the exchange of one probe over an open SocketSession: writes the echo
request, then reads packets until the expected echo reply arrives or the read
deadline passes.
"""

import ipaddress
import logging
from enum import Enum, auto
from typing import Optional

from .codec import EchoMessage, IPVersion, parse_reply
from .errors import MarshalError, ReadError
from .session import SocketSession
from .utils import resolve_logger


class ListenerState(Enum):
    """
    States of a probe exchange.

    Attributes:
        SENDING: Echo request not written yet
        LISTENING: Request written, waiting for the reply
        MATCHED: The expected reply was received
        TIMED_OUT: The read deadline passed without a matching reply
        ABORTED: The exchange failed before listening could finish
    """

    SENDING = auto()
    LISTENING = auto()
    MATCHED = auto()
    TIMED_OUT = auto()
    ABORTED = auto()


TERMINAL_STATES = frozenset(
    (ListenerState.MATCHED, ListenerState.TIMED_OUT, ListenerState.ABORTED)
)


def same_address(peer: str, address: str) -> bool:
    """Compare two IP address strings, ignoring notation and IPv6 zone suffixes."""
    try:
        return ipaddress.ip_address(peer.split("%")[0]) == ipaddress.ip_address(
            address.split("%")[0]
        )
    except ValueError:
        return peer == address


class ReplyListener:
    """
    Request/reply exchange for a single probe.

    Packets from other peers and replies that do not match the expected reply
    are discarded; only the read deadline ends an unanswered exchange.
    """

    def __init__(
        self,
        session: SocketSession,
        address: str,
        ip_version: IPVersion,
        buffer_size: int = 1500,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            session: Open socket session owned by the probe
            address: Resolved target address replies must come from
            ip_version: IP version of the exchange
            buffer_size: Receive buffer size in bytes
            logger: Optional logger, defaults to the prober logger
        """
        self.session = session
        self.address = address
        self.ip_version = IPVersion(ip_version)
        self.buffer_size = buffer_size
        self.logger = resolve_logger(logger)
        self._state = ListenerState.SENDING
        self.packets_seen = 0
        self.packets_discarded = 0

    @property
    def state(self) -> ListenerState:
        return self._state

    def abort(self) -> None:
        """Move to ABORTED unless the exchange already finished."""
        if self._state not in TERMINAL_STATES:
            self._state = ListenerState.ABORTED

    def send(self, request: bytes) -> None:
        """
        Write the echo request to the target.

        Raises:
            WriteError: If the write fails; the exchange is aborted
        """
        try:
            self.session.send(request, self.address)
        except Exception:
            self.abort()
            raise
        self.logger.info(f"Packet sent (ip={self.address}, bytes={len(request)})")

    def listen(self, expected_reply: bytes, deadline: float) -> bool:
        """
        Read packets until the expected reply arrives or the deadline passes.

        Args:
            expected_reply: Serialized echo reply the target should send back
            deadline: Absolute `time.monotonic()` instant ending the wait

        Returns:
            bool: True if a matching reply was received, False on timeout

        Raises:
            MarshalError: If `expected_reply` cannot be decoded
            DeadlineError: If the deadline cannot be applied to the socket
        """
        try:
            expected = parse_reply(expected_reply, self.ip_version)
            self.session.set_read_deadline(deadline)
        except Exception:
            self.abort()
            raise

        self._state = ListenerState.LISTENING
        self.logger.info("Waiting for reply packets")

        while True:
            try:
                data, peer = self.session.receive(self.buffer_size)
            except TimeoutError as e:
                self._state = ListenerState.TIMED_OUT
                self.logger.warning(
                    f"Timeout reading from socket (ip={self.address}, err={e})"
                )
                return False
            except ReadError as e:
                self.logger.error(f"Error reading from socket (err={e})")
                continue

            self.packets_seen += 1
            if not same_address(peer, self.address):
                self._discard(f"packet from other peer {peer}")
                continue

            if self._matches(data, expected):
                self._state = ListenerState.MATCHED
                self.logger.info(f"Found matching reply packet (ip={peer})")
                return True

            self._discard(f"non-matching packet from {peer}")

    def _matches(self, data: bytes, expected: EchoMessage) -> bool:
        """Compare a received buffer field by field with the expected reply."""
        try:
            received = parse_reply(data, self.ip_version)
        except MarshalError:
            return False
        # Checksums are compared for IPv4 only; parse_reply clears them for IPv6
        return received == expected

    def _discard(self, reason: str) -> None:
        self.packets_discarded += 1
        self.logger.debug(f"Discarding {reason}")
