"""
Public API:
- MessagingService: two-way channel between a host and its frame (handshake + dispatch)
- FrameLink: one-liner factory resolving transport, codec and config
- HandshakeState, HandshakeMessage, ChannelMessage: wire-level types
- Channel, ChannelRegistry: per-token session state
- Transport: abstract class transports must implement; MemoryTransport for in-process windows
- Reactor: the single execution queue inbound events and retry timers run on
- ServiceConfig, load_config: YAML configuration
- errors: ConfigurationError, OriginMismatch, NoChannel, NoInitializedChannel, MissingFrameReference
"""

# Core runtime
from .service import MessagingService, Role
from .factory import FrameLink

# Wire types
from .message import (
    ChannelMessage,
    HandshakeMessage,
    HandshakeState,
    UNKNOWN_DESTINATION,
)

# Session state
from .registry import Channel, ChannelRegistry

# Transport contract
from .transport import Transport, WILDCARD_ORIGIN
from .transports.memory import MemoryTransport, Address

# Execution queue
from .reactor import Reactor, TimerHandle

# Config
from .config import ServiceConfig, RetryConfig, load_config

# Errors
from .errors import (
    FrameLinkError,
    ConfigurationError,
    MissingFrameReference,
    OriginMismatch,
    NoChannel,
    NoInitializedChannel,
    MalformedMessage,
)

__all__ = [
    "MessagingService",
    "Role",
    "FrameLink",
    "ChannelMessage",
    "HandshakeMessage",
    "HandshakeState",
    "UNKNOWN_DESTINATION",
    "Channel",
    "ChannelRegistry",
    "Transport",
    "WILDCARD_ORIGIN",
    "MemoryTransport",
    "Address",
    "Reactor",
    "TimerHandle",
    "ServiceConfig",
    "RetryConfig",
    "load_config",
    "FrameLinkError",
    "ConfigurationError",
    "MissingFrameReference",
    "OriginMismatch",
    "NoChannel",
    "NoInitializedChannel",
    "MalformedMessage",
]

__version__ = "0.1.0"
