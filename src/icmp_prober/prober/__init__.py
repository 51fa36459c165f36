from .codec import EchoMessage, IPVersion, build_request, derive_expected_reply
from .config import IPProtocol, ModuleConfig, load_module_config
from .errors import (
    DeadlineError,
    MarshalError,
    ProbeError,
    ReadError,
    ResolutionError,
    SocketOpenError,
    WriteError,
)
from .listener import ListenerState, ReplyListener
from .probe import ICMPProber, ProbeRequest, probe_icmp
from .resolver import ResolvedTarget, resolve
from .sequence import SequenceGenerator
from .session import SocketSession

__all__ = [
    "probe_icmp",
    "ICMPProber",
    "ProbeRequest",
    "SequenceGenerator",
    "SocketSession",
    "ReplyListener",
    "ListenerState",
    "EchoMessage",
    "IPVersion",
    "build_request",
    "derive_expected_reply",
    "IPProtocol",
    "ModuleConfig",
    "load_module_config",
    "ResolvedTarget",
    "resolve",
    "ProbeError",
    "ResolutionError",
    "SocketOpenError",
    "MarshalError",
    "WriteError",
    "DeadlineError",
    "ReadError",
]
