#!/usr/bin/env python3
"""
This module provides the SocketSession class, a context manager owning the
raw ICMP socket of a single probe.

Opening raw ICMP sockets needs root or the CAP_NET_RAW capability.
"""

import logging
import socket
import time
from typing import Optional, Tuple

from .codec import IPVersion
from .errors import DeadlineError, ReadError, SocketOpenError, WriteError
from .utils import resolve_logger

_SOCKET_PARAMS = {
    IPVersion.V4: (socket.AF_INET, socket.IPPROTO_ICMP, "0.0.0.0"),
    IPVersion.V6: (socket.AF_INET6, socket.IPPROTO_ICMPV6, "::"),
}


class SocketSession:
    """
    Raw ICMP socket bound to the wildcard address of one IP version.

    The session is owned by exactly one probe and is closed when the `with`
    block exits, whatever the outcome of the probe.

    Example usage:
        >>> with SocketSession.open(IPVersion.V4) as session:
        ...     session.send(request, "192.0.2.1")
        ...     session.set_read_deadline(time.monotonic() + 1.0)
        ...     data, peer = session.receive()
    """

    def __init__(self, ip_version: IPVersion, logger: Optional[logging.Logger] = None):
        """
        Args:
            ip_version: IP version the socket is created for
            logger: Optional logger, defaults to the prober logger
        """
        self.ip_version = IPVersion(ip_version)
        self.logger = resolve_logger(logger)
        self.sock: Optional[socket.socket] = None
        self.read_deadline: Optional[float] = None

    @classmethod
    def open(
        cls, ip_version: IPVersion, logger: Optional[logging.Logger] = None
    ) -> "SocketSession":
        """
        Create a session with its socket already open.

        Raises:
            SocketOpenError: If the socket cannot be created or bound
        """
        session = cls(ip_version, logger=logger)
        session._configure_socket()
        return session

    def __enter__(self) -> "SocketSession":
        if self.sock is None:
            self._configure_socket()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions

    @property
    def closed(self) -> bool:
        return self.sock is None

    def _configure_socket(self) -> None:
        """Create the raw socket and bind it to the wildcard address."""
        family, proto, wildcard = _SOCKET_PARAMS[self.ip_version]
        try:
            self.sock = socket.socket(family, socket.SOCK_RAW, proto)
            self.sock.bind((wildcard, 0))
        except OSError as e:
            self.close()
            raise SocketOpenError(
                f"Failed to open ICMPv{int(self.ip_version)} socket: {e}"
            ) from e
        self.logger.debug(f"Socket bound to {wildcard!r} (ip_version={int(self.ip_version)})")

    def send(self, data: bytes, address: str) -> None:
        """
        Write an ICMP message to `address`.

        Raises:
            WriteError: If the session is closed or the write fails
        """
        if self.sock is None:
            raise WriteError("Socket session is closed")
        try:
            self.sock.sendto(data, (address, 0))
        except OSError as e:
            raise WriteError(f"Failed to send to {address}: {e}") from e

    def set_read_deadline(self, deadline: float) -> None:
        """
        Bound every following `receive` by an absolute deadline.

        Args:
            deadline: Instant on the `time.monotonic()` clock

        Raises:
            DeadlineError: If the session is closed or the deadline is not a number
        """
        if self.sock is None:
            raise DeadlineError("Socket session is closed")
        if isinstance(deadline, bool) or not isinstance(deadline, (int, float)):
            raise DeadlineError(f"Invalid read deadline: {deadline!r}")
        self.read_deadline = float(deadline)

    def receive(self, buffer_size: int = 1500) -> Tuple[bytes, str]:
        """
        Block until a packet arrives or the read deadline passes.

        Args:
            buffer_size: Maximum number of bytes read

        Returns:
            tuple: The bytes read and the sender address

        Raises:
            TimeoutError: If the read deadline has passed, including a deadline
                that is already reached when the call starts
            ReadError: If the receive fails for any other reason
        """
        if self.sock is None:
            raise ReadError("Socket session is closed")

        timeout = None
        if self.read_deadline is not None:
            timeout = self.read_deadline - time.monotonic()
            if timeout <= 0:
                raise TimeoutError("Read deadline exceeded")

        try:
            self.sock.settimeout(timeout)
            data, peer = self.sock.recvfrom(buffer_size)
        except TimeoutError:
            raise
        except OSError as e:
            raise ReadError(f"Failed to read from socket: {e}") from e
        return data, peer[0]

    def close(self) -> None:
        """Close the socket; calling it again is a no-op."""
        if self.sock is None:
            return
        try:
            self.sock.close()
        except OSError as e:
            self.logger.warning(f"Error during socket cleanup: {str(e)}")
        finally:
            self.sock = None
            self.logger.debug("Socket closed")
