from __future__ import annotations
from collections.abc import Mapping
from numbers import Real
from typing import Any, Dict, Union

from .errors import MalformedMessage
from .message import ChannelMessage, HandshakeMessage, HandshakeState

WireMessage = Union[HandshakeMessage, ChannelMessage]


def encode(msg: WireMessage) -> Dict[str, Any]:
    if isinstance(msg, HandshakeMessage):
        if not msg.state.on_wire:
            raise ValueError(f"{msg.state} is a local marker and is never transmitted")
        return {
            "token":  msg.token,
            "source": msg.source,
            "state":  str(msg.state),
            "frame":  msg.frame,
        }
    return {"token": msg.token, "data": msg.data}


def is_handshake(payload: Any) -> bool:
    """Handshake and application messages are told apart by the presence of 'state'."""
    return isinstance(payload, Mapping) and bool(payload.get("state"))


def decode(payload: Any) -> WireMessage:
    if not isinstance(payload, Mapping):
        raise MalformedMessage(f"expected an object, got {type(payload).__name__}")

    token = payload.get("token")
    if not isinstance(token, str) or not token:
        raise MalformedMessage("missing token")

    if not is_handshake(payload):
        return ChannelMessage(token=token, data=payload.get("data"))

    try:
        state = HandshakeState(payload["state"])
    except ValueError:
        raise MalformedMessage(f"unknown handshake state {payload['state']!r}") from None
    if not state.on_wire:
        raise MalformedMessage(f"{state} is not a wire state")

    source = payload.get("source")
    if not isinstance(source, str) or not source:
        raise MalformedMessage("handshake without source")

    # peers written in JS send the counter as a double
    frame = payload.get("frame", 0)
    if isinstance(frame, bool) or not isinstance(frame, Real):
        raise MalformedMessage(f"bad frame counter {frame!r}")

    return HandshakeMessage(token=token, source=source, state=state, frame=int(frame))
