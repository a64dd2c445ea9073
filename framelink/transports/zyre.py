from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from ..codecs import Codec, Codecs
from ..transport import MessageCallback, ReplyCapability, Transport

try:
    from zyre import Zyre, ZyreEvent
except Exception as e:
    raise RuntimeError("Zyre Python bindings are required. Error: %r" % (e,))

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeerAddress:
    name: str


class ZyreTransport(Transport):
    """Transport over Zyre.

    Mapping:
    - origin -> the Zyre node *name*; peers see it as the origin of our messages
    - reply capability / frame reference -> PeerAddress(name), resolved to a uuid from ENTER events
    - send -> WHISPER [codec-encoded payload] to that peer
    - a target_origin that differs from the addressed peer's name drops the message

    """

    def __init__(self, name: str, *, group: Optional[str] = None,
                 codec: Union[str, Codec] = "json", **kwargs):
        self.name = name
        self.group = group
        self.codec = Codecs.resolve(codec)
        self.node = Zyre(name)

        try:
            self.node.set_name(name)
        except Exception:
            log.debug("set_name not supported by these bindings", exc_info=True)

        self._listeners: List[MessageCallback] = []
        self._peers_by_uuid: Dict[str, str] = {}
        self._uuid_by_name: Dict[str, str] = {}
        self._running = False
        self._rx_thread: Optional[threading.Thread] = None

    @property
    def origin(self) -> str:
        return self.name

    def address_of(self, name: str) -> PeerAddress:
        return PeerAddress(name)

    def start(self) -> None:
        if self._running:
            return
        self.node.start()
        if self.group:
            self.node.join(self.group)
        self._running = True
        self._rx_thread = threading.Thread(target=self._rx_loop, daemon=True)
        self._rx_thread.start()

    def stop(self) -> None:
        self._running = False
        try:
            self.node.stop()
        except Exception:
            log.debug("zyre node stop failed", exc_info=True)

    def on_message(self, cb: MessageCallback) -> None:
        self._listeners.append(cb)

    def off_message(self, cb: MessageCallback) -> None:
        try:
            self._listeners.remove(cb)
        except ValueError:
            pass

    def is_reachable(self, via: ReplyCapability) -> bool:
        return isinstance(via, PeerAddress) and bool(via.name)

    def send(self, payload: Any, target_origin: str, via: ReplyCapability) -> None:
        if not isinstance(via, PeerAddress):
            raise TypeError(f"ZyreTransport cannot address {via!r}")
        if via.name != target_origin:
            log.debug("peer %s is not %s, message dropped", via.name, target_origin)
            return

        uuid = self._uuid_by_name.get(via.name)
        if uuid is None:
            # not ENTERed yet; the handshake retry covers the loss
            log.debug("peer %s unknown yet, message dropped", via.name)
            return
        self.node.whisper(uuid, [self.codec.dumps(payload)])

    def _rx_loop(self):
        while self._running:
            try:
                event = ZyreEvent(self.node)
            except Exception:
                continue
            if not event:
                continue
            etype = _text(event.type())

            if etype == "ENTER":
                uuid = _text(event.peer_uuid())
                name = _text(event.peer_name())
                self._peers_by_uuid[uuid] = name
                self._uuid_by_name[name] = uuid
                continue

            if etype in ("EXIT", "LEAVE"):
                uuid = _text(event.peer_uuid())
                name = self._peers_by_uuid.pop(uuid, None)
                if name:
                    self._uuid_by_name.pop(name, None)
                continue

            if etype == "WHISPER":
                uuid = _text(event.peer_uuid())
                src_name = self._peers_by_uuid.get(uuid, uuid)
                try:
                    payload = self.codec.loads(self._first_frame(event.msg()))
                except Exception:
                    log.debug("malformed frame from %s dropped", src_name, exc_info=True)
                    continue
                for cb in list(self._listeners):
                    cb(payload, src_name, PeerAddress(src_name))

    def _first_frame(self, zmsg) -> bytes:
        # Some bindings expose popmem, others pop
        try:
            data = zmsg.popmem()
        except AttributeError:
            data = zmsg.pop()
        if not isinstance(data, (bytes, bytearray)):
            data = bytes(data)
        return bytes(data)

    def close(self):
        self.stop()


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else value
