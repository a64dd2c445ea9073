from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional
from enum import StrEnum

UNKNOWN_DESTINATION = "UNKNOWN_DESTINATION"

# Handshake states
class HandshakeState(StrEnum):
    SYN     = "SYN"
    SYN_ACK = "SYN+ACK"
    ACK     = "ACK"
    FIN     = "FIN"       # terminal marker, never sent on the wire

    @property
    def reply_state(self) -> Optional["HandshakeState"]:
        """State carried by our reply to an inbound message in this state (None => no reply)."""
        return _REPLIES[self]

    def advance(self) -> Optional["HandshakeState"]:
        """State a channel moves to when a message in this state is accepted."""
        return _ADVANCES[self]

    @property
    def on_wire(self) -> bool:
        return self is not HandshakeState.FIN


_REPLIES = {
    HandshakeState.SYN:     HandshakeState.SYN_ACK,
    HandshakeState.SYN_ACK: HandshakeState.ACK,
    HandshakeState.ACK:     None,
    HandshakeState.FIN:     None,
}

_ADVANCES = {
    HandshakeState.SYN:     HandshakeState.SYN_ACK,
    HandshakeState.SYN_ACK: HandshakeState.ACK,
    HandshakeState.ACK:     HandshakeState.FIN,
    HandshakeState.FIN:     None,     # no outgoing transitions
}


@dataclass(frozen=True)
class HandshakeMessage:
    token: str                   # correlation id minted per handshake attempt
    source: str                  # sender identity
    state: HandshakeState
    frame: int = 1               # hop counter, diagnostic only

    def reply(self, source: str) -> Optional["HandshakeMessage"]:
        """Build the reply to this message, or None if this state is not answered."""
        state = self.state.reply_state
        if state is None:
            return None
        return HandshakeMessage(token=self.token, source=source, state=state, frame=self.frame + 1)


@dataclass(frozen=True)
class ChannelMessage:
    token: str
    data: Any = None
