import time
from unittest.mock import MagicMock

import pytest

from icmp_prober.prober.codec import IPVersion, checksum
from icmp_prober.prober.errors import ReadError, WriteError


@pytest.fixture
def mock_logger():
    """
    Fixture providing a mock logger that records messages per level.

    Returns:
        MagicMock: A mock with the standard logging methods; messages are
            stored in `logger.messages[level]`
    """
    logger = MagicMock()
    logger.messages = {"debug": [], "info": [], "warning": [], "error": []}

    def recorder(level):
        def store_message(*args, **kwargs):
            msg = args[0] if args else kwargs.get("msg", "")
            logger.messages[level].append(msg)

        return store_message

    for level in ("debug", "info", "warning", "error"):
        getattr(logger, level).side_effect = recorder(level)

    return logger


class FakeSession:
    """
    In-memory stand-in for SocketSession.

    `responder` is called with every sent buffer and returns the packets the
    network delivers in answer, as (data, peer) tuples. Packets queued with
    `deliver` are read first. Once the queue is empty, `receive` waits for the
    read deadline and raises TimeoutError, like a socket with a timeout.
    """

    def __init__(self, ip_version=IPVersion.V4, responder=None):
        self.ip_version = IPVersion(ip_version)
        self.responder = responder
        self.inbox = []
        self.sent = []
        self.received = []
        self.read_deadline = None
        self.receive_calls = 0
        self.read_errors = []
        self.send_error = None
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def deliver(self, data, peer):
        self.inbox.append((data, peer))

    def send(self, data, address):
        if self.send_error is not None:
            raise WriteError(self.send_error)
        self.sent.append((data, address))
        if self.responder is not None:
            self.inbox.extend(self.responder(data, address))

    def set_read_deadline(self, deadline):
        self.read_deadline = deadline

    def receive(self, buffer_size=1500):
        self.receive_calls += 1
        if self.read_errors:
            raise ReadError(self.read_errors.pop(0))
        if self.inbox:
            packet = self.inbox.pop(0)
            self.received.append(packet)
            return packet[0][:buffer_size], packet[1]
        remaining = self.read_deadline - time.monotonic()
        if remaining > 0:
            time.sleep(remaining)
        raise TimeoutError("timed out")

    def close(self):
        self.closed = True


def make_reply(request: bytes, ip_version=IPVersion.V4) -> bytes:
    """Turn a serialized echo request into the reply a target sends back."""
    ip_version = IPVersion(ip_version)
    reply = bytes([ip_version.echo_reply]) + request[1:2] + b"\x00\x00" + request[4:]
    if ip_version == IPVersion.V4:
        reply = reply[:2] + checksum(reply).to_bytes(2, "big") + reply[4:]
    return reply


def echo_responder(ip_version=IPVersion.V4, peer=None):
    """Responder answering every request with the matching echo reply."""

    def respond(data, address):
        return [(make_reply(data, ip_version), peer or address)]

    return respond

