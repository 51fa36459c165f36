"""
Errors raised by the ICMP prober components.

All of them are caught at the probe boundary: `probe_icmp` logs them and
reports a failed probe, it never lets them reach the caller.
"""


class ProbeError(RuntimeError):
    """Base class for every error raised inside a single probe."""


class ResolutionError(ProbeError):
    """The target could not be resolved to an address."""


class SocketOpenError(ProbeError):
    """The raw ICMP socket could not be created or bound."""


class MarshalError(ProbeError):
    """An echo message could not be serialized or decoded."""


class WriteError(ProbeError):
    """The echo request could not be written to the socket."""


class DeadlineError(ProbeError):
    """The read deadline could not be applied to the socket."""


class ReadError(ProbeError):
    """A receive failed for a reason other than the read deadline."""
