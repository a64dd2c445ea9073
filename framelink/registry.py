from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .message import HandshakeState, UNKNOWN_DESTINATION
from .transport import ReplyCapability


@dataclass
class Channel:
    token: str
    state: HandshakeState
    destination: str = UNKNOWN_DESTINATION
    initialized: bool = False
    # non-owning, re-captured from each accepted handshake event
    peer: Optional[ReplyCapability] = None

    @property
    def progressed(self) -> bool:
        """True once the channel has moved past the initial SYN."""
        return self.state is not HandshakeState.SYN


@dataclass
class ChannelRegistry:
    channels: Dict[str, Channel] = field(default_factory=dict)

    def put(self, token: str, channel: Channel) -> None:
        if channel.token != token:
            raise ValueError(f"channel token {channel.token!r} stored under {token!r}")
        self.channels[token] = channel

    def get(self, token: str) -> Optional[Channel]:
        return self.channels.get(token)

    def clear(self) -> None:
        self.channels.clear()

    def has_any_initialized(self) -> bool:
        return any(c.initialized for c in list(self.channels.values()))

    def has_any_progressed(self) -> bool:
        return any(c.progressed for c in list(self.channels.values()))

    def initialized(self) -> List[Channel]:
        return [c for c in list(self.channels.values()) if c.initialized]

    def __len__(self) -> int:
        return len(self.channels)

    def __contains__(self, token: object) -> bool:
        return token in self.channels

    def __iter__(self) -> Iterator[Channel]:
        return iter(list(self.channels.values()))
