from __future__ import annotations
import logging
import weakref
from typing import Any, List, Optional, Union

from ..codecs import Codec, Codecs, clone
from ..transport import MessageCallback, ReplyCapability, Transport, WILDCARD_ORIGIN

log = logging.getLogger(__name__)


class Address:
    """Weak handle to a MemoryTransport; what a window reference is to postMessage."""

    __slots__ = ("_ref", "origin")

    def __init__(self, endpoint: "MemoryTransport"):
        self._ref = weakref.ref(endpoint)
        self.origin = endpoint.origin

    def resolve(self) -> Optional["MemoryTransport"]:
        return self._ref()

    def __repr__(self) -> str:
        alive = "alive" if self._ref() is not None else "dead"
        return f"<Address {self.origin} {alive}>"


class MemoryTransport(Transport):
    """In-process window.

    Mapping:
    - every endpoint has an origin and an `address` peers use to post to it
    - send() clones the payload through the codec, like the structured clone of postMessage
    - a target_origin that does not match the receiver drops the message silently
    - the receiver's listeners get (payload, sender origin, sender address)
    """

    def __init__(self, origin: str, *, codec: Union[str, Codec] = "json"):
        self._origin = origin
        self.codec = Codecs.resolve(codec)
        self.running = True
        self._listeners: List[MessageCallback] = []
        self.address = Address(self)

    @property
    def origin(self) -> str:
        return self._origin

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def on_message(self, cb: MessageCallback) -> None:
        self._listeners.append(cb)

    def off_message(self, cb: MessageCallback) -> None:
        try:
            self._listeners.remove(cb)
        except ValueError:
            pass

    def is_reachable(self, via: ReplyCapability) -> bool:
        return isinstance(via, Address) and via.resolve() is not None

    def send(self, payload: Any, target_origin: str, via: ReplyCapability) -> None:
        if not isinstance(via, Address):
            raise TypeError(f"MemoryTransport cannot address {via!r}")

        target = via.resolve()
        if target is None or not target.running:
            log.debug("%s: target window is gone, message dropped", self._origin)
            return
        if target_origin != WILDCARD_ORIGIN and target.origin != target_origin:
            log.debug("%s: target origin %s does not match %s, message dropped",
                      self._origin, target_origin, target.origin)
            return

        target._deliver(clone(self.codec, payload), self._origin, self.address)

    def _deliver(self, payload: Any, origin: str, reply: Address) -> None:
        for cb in list(self._listeners):
            cb(payload, origin, reply)
