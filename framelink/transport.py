from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable

# Opaque handle addressing whoever sent a given message (a window, a peer).
# Transports hand one out with every inbound event; holders must not assume
# it outlives the channel it was captured into.
ReplyCapability = Hashable

MessageCallback = Callable[[Any, str, ReplyCapability], None]

WILDCARD_ORIGIN = "*"

class Transport(ABC):

    @property
    @abstractmethod
    def origin(self) -> str:
        """Origin string peers see on messages from this endpoint."""
        raise NotImplementedError

    @abstractmethod
    def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def send(self, payload: Any, target_origin: str, via: ReplyCapability) -> None:
        """Post one payload through `via`; dropped by the transport if the receiver's origin is not `target_origin`."""
        raise NotImplementedError

    @abstractmethod
    def on_message(self, cb: MessageCallback) -> None:
        raise NotImplementedError

    @abstractmethod
    def off_message(self, cb: MessageCallback) -> None:
        raise NotImplementedError

    def is_reachable(self, via: ReplyCapability) -> bool:
        """Whether `via` still addresses a live endpoint."""
        return via is not None
