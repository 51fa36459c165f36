"""
Target resolution for ICMP probes.

Turns a target string (host name or literal address) into a single address
and the IP version the probe has to use for it.
"""

import logging
import socket
import time
from dataclasses import dataclass

from .codec import IPVersion
from .config import IPProtocol
from .errors import ResolutionError
from .utils import resolve_logger

_FAMILY_VERSION = {socket.AF_INET: IPVersion.V4, socket.AF_INET6: IPVersion.V6}


@dataclass(frozen=True)
class ResolvedTarget:
    """A resolved probe target."""

    address: str
    ip_version: IPVersion


def _lookup(target: str, family: int) -> list:
    return socket.getaddrinfo(target, None, family, socket.SOCK_DGRAM)


def resolve(
    target: str,
    preference: IPProtocol = IPProtocol.ANY,
    logger: logging.Logger | None = None,
) -> ResolvedTarget:
    """
    Resolve a probe target to one address.

    With an IPv4 or IPv6 preference the preferred family is looked up first
    and the other family is used as a fallback. With no preference the first
    address returned by the system resolver is used.

    Args:
        target: Host name or literal IP address
        preference: IP version preference
        logger: Optional logger, defaults to the prober logger

    Returns:
        ResolvedTarget: The chosen address and its IP version

    Raises:
        ResolutionError: If the target is empty or no usable address is found
    """
    logger = resolve_logger(logger)
    if not target or not target.strip():
        raise ResolutionError("Empty target")

    if preference == IPProtocol.IPV4:
        families = (socket.AF_INET, socket.AF_INET6)
    elif preference == IPProtocol.IPV6:
        families = (socket.AF_INET6, socket.AF_INET)
    else:
        families = (socket.AF_UNSPEC,)

    logger.info(f"Resolving target address (target={target}, preference={preference.value})")
    lookup_start = time.monotonic()
    last_error = None
    for family in families:
        try:
            infos = _lookup(target, family)
        except socket.gaierror as e:
            last_error = e
            logger.debug(f"Lookup failed (target={target}, family={family!r}, err={e})")
            continue

        for family_found, _, _, _, sockaddr in infos:
            if family_found not in _FAMILY_VERSION:
                continue
            resolved = ResolvedTarget(
                address=sockaddr[0], ip_version=_FAMILY_VERSION[family_found]
            )
            logger.info(
                f"Resolved target address (target={target}, ip={resolved.address}, "
                f"ip_version={int(resolved.ip_version)}, "
                f"lookup_time={time.monotonic() - lookup_start:.6f}s)"
            )
            return resolved

    if last_error is not None:
        raise ResolutionError(f"Unable to resolve {target!r}: {last_error}")
    raise ResolutionError(f"No usable address found for {target!r}")
