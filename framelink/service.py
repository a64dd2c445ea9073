from __future__ import annotations
import functools
import logging
import random
from enum import StrEnum
from typing import Any, List, Optional

from . import wire
from .dispatch import Dispatcher, MessageHandler
from .errors import ConfigurationError, MalformedMessage, OriginMismatch
from .handshake import HandshakeMachine
from .ids import new_identity
from .message import HandshakeMessage
from .reactor import Reactor, Scheduler
from .registry import Channel, ChannelRegistry
from .transport import ReplyCapability, Transport, WILDCARD_ORIGIN

log = logging.getLogger(__name__)


class Role(StrEnum):
    INITIATOR = "initiator"     # holds the frame, runs the bootstrap
    RESPONDER = "responder"     # only answers whoever addresses it


class MessagingService:
    """
    Two-way messaging between a host and the frame it embeds (or the frame and its host).

    Passing `frame` makes this side the initiator: it repeatedly offers a
    handshake to the frame until one completes. Without it, the service waits
    for the other side's SYN and replies through the captured reply capability.

    All inbound reactions run on one execution queue (`reactor`). A private
    Reactor is started when none is supplied and stopped on close().
    """

    def __init__(self, target_origin: str, transport: Transport,
                 frame: Optional[ReplyCapability] = None,
                 identity: Optional[str] = None,
                 logger: Optional[logging.Logger] = None, *,
                 reactor: Optional[Scheduler] = None,
                 retry_window_s: float = 1.0,
                 retry_floor_s: float = 0.05,
                 rng: Optional[random.Random] = None):
        if target_origin == WILDCARD_ORIGIN:
            raise ConfigurationError("Don't use '*' as target.")
        if not target_origin:
            raise ConfigurationError("A target origin is required.")
        if retry_floor_s < 0 or retry_window_s < retry_floor_s:
            raise ConfigurationError(
                f"Invalid retry window {retry_window_s!r} / floor {retry_floor_s!r}.")

        self.target = target_origin
        self.t = transport
        self.frame = frame
        self.id = identity or new_identity()
        self.log = logger or log

        self._own_reactor = reactor is None
        self.reactor: Scheduler = reactor if reactor is not None else Reactor()

        self.registry = ChannelRegistry()
        self.dispatcher = Dispatcher(self.registry, self._send, logger=self.log)
        self.handshake = HandshakeMachine(
            self.registry, self._send, self.id, self.reactor,
            frame=frame,
            is_reachable=self.t.is_reachable,
            retry_window_s=retry_window_s,
            retry_floor_s=retry_floor_s,
            rng=rng,
            logger=self.log,
        )

        self.t.on_message(self._on_transport_message)
        if self._own_reactor:
            self.reactor.start()
        self.handshake.start()

    # ---- public API ----
    @property
    def identity(self) -> str:
        return self.id

    @property
    def role(self) -> Role:
        return Role.INITIATOR if self.frame is not None else Role.RESPONDER

    @property
    def channels(self) -> List[Channel]:
        return list(self.registry)

    @property
    def is_connected(self) -> bool:
        return self.registry.has_any_initialized()

    def add_handler(self, handler: MessageHandler) -> int:
        """Register a callback receiving the data of every application message. Returns its id."""
        return self.dispatcher.add_handler(handler)

    def remove_handler(self, handler_id: int) -> None:
        self.dispatcher.remove_handler(handler_id)

    def post_message(self, data: Any) -> int:
        """
        Post `data` to the remote side over every initialized channel.

        Raises NoChannel / NoInitializedChannel when no handshake has completed
        yet; callers retry once the handshake has had time to finish.
        Returning does not mean the remote received it.
        """
        return self.dispatcher.post(data)

    def bootstrap(self) -> Optional[Channel]:
        """
        Offer a handshake to the frame right away (initiators only).

        Touches the channel registry, so call it on the reactor, e.g.
        `service.reactor.post(service.bootstrap)` from another thread.
        """
        return self.handshake.bootstrap()

    def close(self) -> None:
        """Unsubscribe from the transport and stop retrying. Safe to call from any thread."""
        self.t.off_message(self._on_transport_message)
        self.handshake.stop()
        # a firing already running on the reactor may have re-armed the timer
        if self._own_reactor:
            self.reactor.stop()
            self.handshake.cancel()
        else:
            self.reactor.post(self.handshake.cancel)

    def __enter__(self) -> "MessagingService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---- inbound ----
    def _on_transport_message(self, payload: Any, origin: str, reply: ReplyCapability) -> None:
        self.reactor.post(functools.partial(self.handle_event, payload, origin, reply))

    def handle_event(self, payload: Any, origin: str, reply: ReplyCapability) -> None:
        """React to one inbound transport event. Runs on the reactor."""
        if origin != self.target:
            raise OriginMismatch(origin, self.target)

        self.log.debug("receive message on %s, role: %s", self.id, self.role)
        if not payload:
            return

        try:
            msg = wire.decode(payload)
        except MalformedMessage as ex:
            self.log.debug("drop malformed message: %s", ex)
            return

        if isinstance(msg, HandshakeMessage):
            self.handshake.receive(msg, reply)
        else:
            self.dispatcher.deliver(msg)

    # ---- outbound ----
    def _send(self, msg: wire.WireMessage, channel: Channel) -> bool:
        if channel.peer is None:
            self.log.debug("no reply capability for channel %s", channel.token)
            return False
        self.t.send(wire.encode(msg), self.target, channel.peer)
        return True
