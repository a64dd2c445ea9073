from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Optional

from .errors import NoChannel, NoInitializedChannel
from .ids import new_handler_id
from .message import ChannelMessage
from .registry import Channel, ChannelRegistry

log = logging.getLogger(__name__)

MessageHandler = Callable[[Any], None]
SendApplication = Callable[[ChannelMessage, Channel], bool]


class Dispatcher:
    """Fans outbound data to initialized channels and inbound data to every handler."""

    def __init__(self, registry: ChannelRegistry, send: SendApplication,
                 logger: Optional[logging.Logger] = None):
        self.registry = registry
        self.send = send
        self.log = logger or log
        self.handlers: Dict[int, MessageHandler] = {}

    def add_handler(self, handler: MessageHandler) -> int:
        handler_id = new_handler_id()
        while handler_id in self.handlers:
            handler_id = new_handler_id()
        self.handlers[handler_id] = handler
        return handler_id

    def remove_handler(self, handler_id: int) -> None:
        self.handlers.pop(handler_id, None)

    def post(self, data: Any) -> int:
        """
        Send `data` on every initialized channel.
        Returns the number of channels the message was handed to; channels
        without a reply capability are not counted.
        """
        if len(self.registry) == 0:
            raise NoChannel("No channel.")
        if not self.registry.has_any_initialized():
            raise NoInitializedChannel("No channel initialized.")

        sent = 0
        for channel in self.registry.initialized():
            try:
                self.log.debug("send message to: %s with token: %s", channel.destination, channel.token)
                if self.send(ChannelMessage(token=channel.token, data=data), channel):
                    sent += 1
            except Exception:
                self.log.exception("send on channel %s failed", channel.token)
        return sent

    def deliver(self, msg: ChannelMessage) -> None:
        channel = self.registry.get(msg.token)
        if channel is None:
            self.log.debug("receive a message with no valid token. drop.")
            return

        self.log.debug("receive a message from: %s", channel.destination)
        for handler_id, handler in list(self.handlers.items()):
            try:
                handler(msg.data)
            except Exception:
                self.log.exception("message handler %s failed", handler_id)
