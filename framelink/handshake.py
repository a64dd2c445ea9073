from __future__ import annotations
import logging
import random
from typing import Callable, Dict, Optional

from .errors import MissingFrameReference
from .ids import new_token
from .message import HandshakeMessage, HandshakeState
from .reactor import Scheduler, TimerHandle
from .registry import Channel, ChannelRegistry
from .transport import ReplyCapability

log = logging.getLogger(__name__)

SendHandshake = Callable[[HandshakeMessage, Channel], bool]


class HandshakeMachine:

    # Notes:
    # - SYN -> SYN+ACK -> ACK per token; the receiver of ACK parks the channel in FIN
    # - Only the side holding a frame bootstraps; it retries on a randomized timer
    #   until one of its channels is initialized
    # - Replies for unknown or already initialized tokens are ignored (no state, no reply)
    # - Two initiators are not arbitrated: their independent tokens may both initialize

    def __init__(self, registry: ChannelRegistry, send: SendHandshake, self_id: str,
                 scheduler: Scheduler, *,
                 frame: Optional[ReplyCapability] = None,
                 is_reachable: Callable[[ReplyCapability], bool] = lambda via: via is not None,
                 retry_window_s: float = 1.0,
                 retry_floor_s: float = 0.05,
                 rng: Optional[random.Random] = None,
                 logger: Optional[logging.Logger] = None):
        self.registry = registry
        self.send = send
        self.self_id = self_id
        self.scheduler = scheduler
        self.frame = frame
        self.is_reachable = is_reachable
        self.retry_window_s = retry_window_s
        self.retry_floor_s = retry_floor_s
        self.rng = rng or random.Random()
        self.log = logger or log

        self.timer: Optional[TimerHandle] = None
        self.stopped = False
        self._receivers: Dict[HandshakeState, Callable[[HandshakeMessage, ReplyCapability], None]] = {
            HandshakeState.SYN:     self._on_syn,
            HandshakeState.SYN_ACK: self._on_syn_ack,
            HandshakeState.ACK:     self._on_ack,
        }

    @property
    def is_initiator(self) -> bool:
        return self.frame is not None

    @property
    def retrying(self) -> bool:
        return self.timer is not None

    def start(self) -> None:
        """Arm the bootstrap timer (initiators only)."""
        if self.stopped:
            return
        if self.is_initiator and self.timer is None and not self.registry.has_any_initialized():
            self._schedule()

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def stop(self) -> None:
        """Cancel the retry timer for good; later start() calls and queued firings do nothing."""
        self.stopped = True
        self.cancel()

    def next_delay(self) -> float:
        return max(self.retry_floor_s, self.rng.uniform(0.0, self.retry_window_s))

    # ---- bootstrap ----
    def bootstrap(self) -> Optional[Channel]:
        """
        Start a fresh handshake attempt toward the frame. Runs on the reactor.
        Returns the new SYN channel, or None if an attempt already progressed past SYN.
        """
        if self.frame is None or not self.is_reachable(self.frame):
            raise MissingFrameReference("Frame reference is missing or no longer reachable.")

        if self.registry.has_any_progressed():
            self.log.debug("bootstrap skipped on %s: a channel already progressed", self.self_id)
            return None

        self.registry.clear()
        channel = Channel(token=new_token(), state=HandshakeState.SYN, peer=self.frame)
        self.registry.put(channel.token, channel)

        syn = HandshakeMessage(token=channel.token, source=self.self_id,
                               state=HandshakeState.SYN, frame=1)
        self.log.debug("send handshake with state: %s, token: %s", syn.state, syn.token)
        self.send(syn, channel)
        return channel

    def _schedule(self) -> None:
        self.timer = self.scheduler.call_later(self.next_delay(), self._on_timer)

    def _on_timer(self) -> None:
        if self.timer is None or self.stopped:
            return  # cancelled while the firing was already queued
        try:
            self.bootstrap()
        except MissingFrameReference:
            self.timer = None
            raise
        finally:
            # a failed send still leaves the loop armed for the next attempt
            if self.timer is not None and not self.stopped:
                self._schedule()

    # ---- inbound ----
    def receive(self, msg: HandshakeMessage, reply: ReplyCapability) -> None:
        self.log.debug("receive initialization with state: %s, frame: %s", msg.state, msg.frame)
        self._receivers[msg.state](msg, reply)

    def _on_syn(self, msg: HandshakeMessage, reply: ReplyCapability) -> None:
        current = self.registry.get(msg.token)
        if current is not None and current.initialized:
            self.log.debug("duplicate SYN for initialized token %s, ignored", msg.token)
            return

        channel = Channel(
            token=msg.token,
            state=msg.state.advance(),
            destination=msg.source,
            initialized=False,
            peer=reply,
        )
        self.registry.put(msg.token, channel)
        self._reply(msg, channel)

    def _on_syn_ack(self, msg: HandshakeMessage, reply: ReplyCapability) -> None:
        channel = self._pending(msg)
        if channel is None:
            return
        self._accept(msg, channel, reply)
        self._reply(msg, channel)

    def _on_ack(self, msg: HandshakeMessage, reply: ReplyCapability) -> None:
        channel = self._pending(msg)
        if channel is None:
            return
        self._accept(msg, channel, reply)

    def _pending(self, msg: HandshakeMessage) -> Optional[Channel]:
        channel = self.registry.get(msg.token)
        if channel is None or channel.initialized:
            self.log.debug("%s for unknown or initialized token %s, ignored", msg.state, msg.token)
            return None
        return channel

    def _accept(self, msg: HandshakeMessage, channel: Channel, reply: ReplyCapability) -> None:
        channel.destination = msg.source
        channel.state = msg.state.advance()
        channel.peer = reply
        channel.initialized = True
        # the only place the retry timer is cancelled on success
        self.cancel()

    def _reply(self, msg: HandshakeMessage, channel: Channel) -> None:
        answer = msg.reply(self.self_id)
        if answer is None:
            return
        self.log.debug("send handshake with state: %s, token: %s", answer.state, answer.token)
        self.send(answer, channel)
