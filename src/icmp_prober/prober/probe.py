"""
ICMP echo probe.

`probe_icmp` runs a single echo request/reply exchange against one target and
reports reachability as a boolean. Failures never propagate to the caller;
they are reported through the logger.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .codec import IPVersion, build_request, derive_expected_reply
from .config import ModuleConfig
from .errors import (
    DeadlineError,
    MarshalError,
    ResolutionError,
    SocketOpenError,
    WriteError,
)
from .listener import ReplyListener
from .resolver import resolve
from .sequence import SequenceGenerator
from .session import SocketSession
from .utils import resolve_logger


@dataclass(frozen=True)
class ProbeRequest:
    """Resolved target of one probe and its absolute deadline."""

    address: str
    ip_version: IPVersion
    deadline: float


def echo_identifier() -> int:
    """Identifier carried by every echo request of this process."""
    return os.getpid() & 0xFFFF


def probe_icmp(
    deadline: float,
    target: str,
    module: ModuleConfig,
    sequence: SequenceGenerator,
    logger: Optional[logging.Logger] = None,
    session_factory: Callable[..., SocketSession] = SocketSession.open,
) -> bool:
    """
    Send one ICMP echo request to `target` and wait for its reply.

    Time spent resolving the target and opening the socket is charged
    against the same deadline as the wait for the reply.

    Args:
        deadline: Absolute `time.monotonic()` instant the probe must end by
        target: Host name or IP address to probe
        module: Module settings, provides the IP protocol preference
        sequence: Sequence number source shared by concurrent probes, owned
            by the caller (see `ICMPProber`)
        logger: Optional logger, defaults to the prober logger
        session_factory: Opens the socket session for an IP version

    Returns:
        bool: True if a matching echo reply arrived before the deadline
    """
    logger = resolve_logger(logger)
    if not isinstance(sequence, SequenceGenerator):
        logger.error(f"No sequence generator given (target={target})")
        return False

    try:
        try:
            resolved = resolve(target, module.preferred_ip_protocol, logger=logger)
        except ResolutionError as e:
            logger.warning(f"Error resolving address (target={target}, err={e})")
            return False

        request = ProbeRequest(
            address=resolved.address,
            ip_version=resolved.ip_version,
            deadline=deadline,
        )

        logger.info("Creating socket")
        try:
            session = session_factory(request.ip_version, logger=logger)
        except SocketOpenError as e:
            logger.error(f"Error listening to socket (err={e})")
            return False

        with session:
            return _exchange(session, request, sequence, logger)

    except Exception as e:
        logger.error(f"Probe failed (target={target}, err={e})")
        return False


def _exchange(
    session: SocketSession,
    request: ProbeRequest,
    sequence: SequenceGenerator,
    logger: logging.Logger,
) -> bool:
    listener = ReplyListener(
        session, request.address, request.ip_version, logger=logger
    )

    identifier = echo_identifier()
    seq = sequence.next()
    logger.info(f"Creating ICMP packet (seq={seq}, id={identifier})")
    try:
        request_bytes = build_request(request.ip_version, identifier, seq)
    except MarshalError as e:
        listener.abort()
        logger.error(f"Error marshalling packet (err={e})")
        return False

    logger.info("Writing out packet")
    try:
        listener.send(request_bytes)
    except WriteError as e:
        logger.warning(f"Error writing to socket (err={e})")
        return False

    # Reply should be the same except for the message type
    try:
        expected_reply = derive_expected_reply(request_bytes, request.ip_version)
        return listener.listen(expected_reply, request.deadline)
    except MarshalError as e:
        listener.abort()
        logger.error(f"Error marshalling packet (err={e})")
        return False
    except DeadlineError as e:
        logger.error(f"Error setting socket deadline (err={e})")
        return False


class ICMPProber:
    """
    Runs ICMP probes for one module.

    All probes of a prober draw their sequence numbers from the same
    SequenceGenerator, so they can run concurrently.

    Example usage:
        >>> prober = ICMPProber(ModuleConfig(timeout=2.0))
        >>> prober.probe("127.0.0.1")
        True
    """

    def __init__(
        self,
        module: Optional[ModuleConfig] = None,
        sequence: Optional[SequenceGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            module: Module settings, defaults to `ModuleConfig()`
            sequence: Sequence source, a new one is created if None
            logger: Optional logger, defaults to the prober logger
        """
        self.module = module if module is not None else ModuleConfig()
        self.sequence = sequence if sequence is not None else SequenceGenerator()
        self.logger = resolve_logger(logger)

    def probe(self, target: str, timeout: Optional[float] = None) -> bool:
        """
        Probe `target` once.

        Args:
            target: Host name or IP address
            timeout: Seconds the probe may take, defaults to the module timeout

        Returns:
            bool: Probe outcome
        """
        timeout = self.module.timeout if timeout is None else timeout
        start = time.monotonic()
        self.logger.info(f"Beginning probe (module={self.module.name}, target={target}, timeout={timeout}s)")
        success = probe_icmp(
            start + timeout, target, self.module, self.sequence, logger=self.logger
        )
        duration = time.monotonic() - start
        if success:
            self.logger.info(f"Probe succeeded (target={target}, duration={duration:.6f}s)")
        else:
            self.logger.warning(f"Probe failed (target={target}, duration={duration:.6f}s)")
        return success

    async def probe_async(self, target: str, timeout: Optional[float] = None) -> bool:
        """Run `probe` in a worker thread so several probes can be awaited together."""
        return await asyncio.to_thread(self.probe, target, timeout)
