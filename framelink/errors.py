from __future__ import annotations


class FrameLinkError(Exception):
    """Base class for every error raised by framelink."""


class ConfigurationError(FrameLinkError):
    """Invalid construction parameters (e.g. the '*' target origin)."""


class MissingFrameReference(ConfigurationError):
    """Bootstrap was invoked without a usable frame reference."""


class OriginMismatch(FrameLinkError):
    """An inbound event came from an origin other than the configured target."""

    def __init__(self, origin: str, expected: str):
        super().__init__(f"Origin {origin!r} does not match expected target {expected!r}")
        self.origin = origin
        self.expected = expected


class NoChannel(FrameLinkError):
    """post_message was called before any channel exists."""


class NoInitializedChannel(FrameLinkError):
    """post_message was called before any channel finished its handshake."""


class MalformedMessage(FrameLinkError, ValueError):
    """A wire payload could not be decoded. Absorbed by the service, never surfaced."""
